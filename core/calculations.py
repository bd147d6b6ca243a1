# core/calculations.py
"""
EMI and amortization maths.
Pure functions. No storage, no side effects.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from core import config
from core.errors import DivergentAmortization, InvalidInput
from core.models import check_finite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmiBreakdown:
    emi: float
    total_payable: float
    total_interest: float
    monthly_rate: float


@dataclass(frozen=True)
class LoanQuote:
    breakdown: EmiBreakdown
    affordability: str  # good | moderate | risky
    emi_to_income: Optional[float]
    emi_to_disposable: Optional[float]
    max_affordable_amount: float
    suggested_tenure: Optional[int]

# ==================================================
# VALIDATION
# ==================================================
def _check_loan_terms(principal: float, annual_rate: float, tenure: int) -> None:
    check_finite(principal=principal, annual_rate=annual_rate, tenure=tenure)
    if principal is None or principal <= 0:
        raise InvalidInput(f"principal must be positive, got {principal}")
    if annual_rate is None or annual_rate < 0:
        raise InvalidInput(f"interest rate cannot be negative, got {annual_rate}")
    if tenure is None or tenure <= 0:
        raise InvalidInput(f"tenure must be positive, got {tenure}")
    if tenure > config.MAX_TENURE_MONTHS:
        raise InvalidInput(
            f"tenure cannot exceed {config.MAX_TENURE_MONTHS} months, got {tenure}"
        )


def compound_growth(r: float, months: int) -> float:
    try:
        return (1 + r) ** months
    except OverflowError:
        raise InvalidInput(
            f"interest compounding overflows: rate {r * 1200}% over {months} months"
        ) from None

# ==================================================
# EMI
# ==================================================
def monthly_rate(annual_rate: float) -> float:
    return annual_rate / 12 / 100


def calculate_emi(principal: float, annual_rate: float, tenure: int) -> float:
    _check_loan_terms(principal, annual_rate, tenure)

    r = monthly_rate(annual_rate)
    if r == 0:
        return principal / tenure
    growth = compound_growth(r, tenure)
    if growth == 1:
        # rate too small to register in floating point
        return principal / tenure
    emi = (principal * r * growth) / (growth - 1)
    if not math.isfinite(emi):
        raise InvalidInput(f"EMI is not representable for principal {principal}")
    return emi


def emi_breakdown(principal: float, annual_rate: float, tenure: int) -> EmiBreakdown:
    emi = calculate_emi(principal, annual_rate, tenure)
    total_payable = emi * tenure
    return EmiBreakdown(
        emi=emi,
        total_payable=total_payable,
        # float noise on zero-rate loans must not show up as negative interest
        total_interest=max(0.0, total_payable - principal),
        monthly_rate=monthly_rate(annual_rate),
    )


def principal_for_emi(emi: float, annual_rate: float, tenure: int) -> float:
    """
    Largest principal a given EMI repays over `tenure` months.
    """
    check_finite(emi=emi, annual_rate=annual_rate, tenure=tenure)
    if tenure <= 0 or tenure > config.MAX_TENURE_MONTHS:
        raise InvalidInput(
            f"tenure must be 1..{config.MAX_TENURE_MONTHS} months, got {tenure}"
        )
    if emi <= 0:
        return 0.0
    r = monthly_rate(annual_rate)
    if r == 0:
        return emi * tenure
    growth = compound_growth(r, tenure)
    if growth == 1:
        return emi * tenure
    return emi * (growth - 1) / (r * growth)

# ==================================================
# TENURE
# ==================================================
def remaining_months(balance: float, annual_rate: float, emi: float) -> int:
    """
    Months left on `balance` at a fixed EMI:
        ceil( ln(1 + B*r/emi) / ln(1 + r) )

    This is the tenure relation used for new debts, tenure suggestions and
    prepayment. `payoff_months` walks the real schedule instead.
    """
    check_finite(balance=balance, annual_rate=annual_rate, emi=emi)
    if emi is None or emi <= 0:
        raise InvalidInput(f"EMI must be positive, got {emi}")
    if annual_rate is None or annual_rate < 0:
        raise InvalidInput(f"interest rate cannot be negative, got {annual_rate}")
    if balance <= 0:
        return 0

    r = monthly_rate(annual_rate)
    if r == 0 or 1 + r == 1:
        return math.ceil(balance / emi)

    interest = balance * r
    if interest >= emi:
        raise DivergentAmortization(balance, interest, emi)

    return math.ceil(math.log(1 + interest / emi) / math.log(1 + r))


def payoff_months(balance: float, annual_rate: float, emi: float) -> int:
    return len(amortization_schedule(balance, annual_rate, emi))

# ==================================================
# SCHEDULES
# ==================================================
def amortization_schedule(
    principal: float,
    annual_rate: float,
    emi: float,
    max_months: int = config.MAX_SCHEDULE_MONTHS,
) -> List[Dict[str, Any]]:
    check_finite(principal=principal, annual_rate=annual_rate, emi=emi)
    if emi is None or emi <= 0:
        raise InvalidInput(f"EMI must be positive, got {emi}")
    if principal <= 0:
        return []

    rate = monthly_rate(annual_rate)
    if principal * rate >= emi:
        raise DivergentAmortization(principal, principal * rate, emi)

    schedule = []
    balance = principal

    for month in range(1, max_months + 1):
        if balance <= 0.005:
            break

        opening = balance
        interest = opening * rate
        principal_component = min(emi - interest, opening)
        closing = opening - principal_component

        schedule.append({
            "month": month,
            "opening_balance": round(opening, 2),
            "emi": round(interest + principal_component, 2),
            "interest": round(interest, 2),
            "principal": round(principal_component, 2),
            "closing_balance": round(closing, 2)
        })

        balance = closing

    return schedule


def outstanding_balance(
    principal: float, annual_rate: float, emi: float, months_paid: int
) -> float:
    """
    Balance left after `months_paid` EMIs, closed form.
    """
    check_finite(principal=principal, annual_rate=annual_rate, emi=emi, months_paid=months_paid)
    if months_paid > config.MAX_TENURE_MONTHS:
        raise InvalidInput(
            f"months_paid cannot exceed {config.MAX_TENURE_MONTHS}, got {months_paid}"
        )
    if months_paid <= 0:
        return principal
    r = monthly_rate(annual_rate)
    if r == 0:
        return max(0.0, principal - emi * months_paid)
    growth = compound_growth(r, months_paid)
    balance = principal * growth - emi * (growth - 1) / r
    return max(0.0, balance)

# ==================================================
# LOAN QUOTE (EMI + AFFORDABILITY)
# ==================================================
def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator <= 0:
        return None
    return numerator / denominator


def _affordability_tier(
    emi_to_income: Optional[float], emi_to_disposable: Optional[float]
) -> str:
    if emi_to_income is None or emi_to_disposable is None:
        return "risky"
    if (emi_to_income <= config.GOOD_EMI_INCOME_RATIO
            and emi_to_disposable <= config.GOOD_EMI_DISPOSABLE_RATIO):
        return "good"
    if (emi_to_income <= config.MODERATE_EMI_INCOME_RATIO
            and emi_to_disposable <= config.MODERATE_EMI_DISPOSABLE_RATIO):
        return "moderate"
    return "risky"


def quote_loan(
    principal: float,
    annual_rate: float,
    tenure: int,
    monthly_income: float,
    monthly_expenses: float,
    existing_emis: float,
) -> LoanQuote:
    """
    EMI for a prospective loan, judged against the current budget.

    - emi_to_income counts existing EMIs plus the new one
    - max_affordable_amount: principal repayable with half of disposable income
    - suggested_tenure: months needed at 30% of disposable income, capped at 20 years
    """
    check_finite(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        existing_emis=existing_emis,
    )
    breakdown = emi_breakdown(principal, annual_rate, tenure)
    disposable = monthly_income - monthly_expenses - existing_emis

    emi_to_income = _ratio(breakdown.emi + existing_emis, monthly_income)
    emi_to_disposable = _ratio(breakdown.emi, disposable)

    max_affordable = principal_for_emi(
        disposable * config.MAX_EMI_SHARE_OF_DISPOSABLE, annual_rate, tenure
    )

    suggested = None
    target_emi = disposable * config.TARGET_EMI_SHARE_OF_DISPOSABLE
    if target_emi > 0:
        try:
            suggested = min(
                remaining_months(principal, annual_rate, target_emi),
                config.MAX_SUGGESTED_TENURE,
            )
        except DivergentAmortization:
            suggested = config.MAX_SUGGESTED_TENURE

    quote = LoanQuote(
        breakdown=breakdown,
        affordability=_affordability_tier(emi_to_income, emi_to_disposable),
        emi_to_income=emi_to_income,
        emi_to_disposable=emi_to_disposable,
        max_affordable_amount=round(max_affordable, 2),
        suggested_tenure=suggested,
    )
    logger.debug("loan quote %s", quote)
    return quote
