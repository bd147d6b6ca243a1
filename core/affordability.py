# core/affordability.py
"""
Can I afford this?

One-time purchases are judged against the liquid bank balance,
new EMIs against the monthly budget.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from core.config import AffordabilityRules, RECOMMENDED_EMI_SHARE, SHORTFALL_SAVING_SHARE
from core.errors import InvalidInput
from core.models import check_finite

logger = logging.getLogger(__name__)

DEFAULT_RULES = AffordabilityRules()


@dataclass(frozen=True)
class AffordabilityResult:
    affordable: bool
    disposable_income: float
    available_for_purchase: float
    balance_after: float
    coverage_after: Optional[float]  # None when there are no monthly outflows
    debt_to_income: Optional[float]  # None when there is no income
    shortfall: float
    # purchases only; None when there is no disposable income to save from
    months_to_afford: Optional[int] = None

# ==================================================
# RATIOS
# ==================================================
def disposable_income(monthly_income: float, monthly_expenses: float, emis: float) -> float:
    return monthly_income - monthly_expenses - emis


def debt_to_income_ratio(total_debt: float, monthly_income: float) -> Optional[float]:
    if monthly_income <= 0:
        return None
    return total_debt / (monthly_income * 12)


def emergency_coverage_months(
    balance: float, monthly_expenses: float, emis: float
) -> Optional[float]:
    outflow = monthly_expenses + emis
    if outflow <= 0:
        return None
    return balance / outflow


def recommended_max_emi(disposable: float) -> int:
    return max(0, math.floor(disposable * RECOMMENDED_EMI_SHARE))


def emi_for_purchase(amount: float, months: int) -> float:
    """
    Interest-free monthly split of a purchase.
    """
    if amount <= 0:
        raise InvalidInput(f"purchase amount must be positive, got {amount}")
    if months <= 0:
        raise InvalidInput(f"EMI months must be positive, got {months}")
    return amount / months


def months_to_afford(shortfall: float, disposable: float) -> Optional[int]:
    """
    Months of saving part of disposable income needed to close a shortfall.
    """
    if shortfall <= 0:
        return 0
    monthly_saving = disposable * SHORTFALL_SAVING_SHARE
    if monthly_saving <= 0:
        return None
    return math.ceil(shortfall / monthly_saving)

# ==================================================
# VERDICTS
# ==================================================
def assess_purchase(
    amount: float,
    total_balance: float,
    monthly_income: float,
    monthly_expenses: float,
    existing_emis: float,
    total_debt: float = 0.0,
    rules: AffordabilityRules = DEFAULT_RULES,
) -> AffordabilityResult:
    """
    One-time purchase paid from bank balance.

    Affordable only if it fits inside the non-reserved part of the balance
    AND the balance left afterwards still covers enough months of outflow.
    """
    check_finite(
        amount=amount,
        total_balance=total_balance,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        existing_emis=existing_emis,
        total_debt=total_debt,
    )
    if amount is None or amount <= 0:
        raise InvalidInput(f"purchase amount must be positive, got {amount}")

    available = total_balance * (1 - rules.reserve_share)
    balance_after = total_balance - amount
    coverage_after = emergency_coverage_months(balance_after, monthly_expenses, existing_emis)

    fits_reserve = amount <= available
    keeps_cushion = coverage_after is None or coverage_after > rules.min_coverage_months
    disposable = disposable_income(monthly_income, monthly_expenses, existing_emis)
    shortfall = max(0.0, amount - available)

    result = AffordabilityResult(
        affordable=fits_reserve and keeps_cushion,
        disposable_income=disposable,
        available_for_purchase=available,
        balance_after=balance_after,
        coverage_after=coverage_after,
        debt_to_income=debt_to_income_ratio(total_debt, monthly_income),
        shortfall=shortfall,
        months_to_afford=months_to_afford(shortfall, disposable),
    )
    logger.debug("purchase of %.2f -> %s", amount, result)
    return result


def assess_new_emi(
    new_emi: float,
    monthly_income: float,
    monthly_expenses: float,
    existing_emis: float,
    total_balance: float = 0.0,
    total_debt: float = 0.0,
    rules: AffordabilityRules = DEFAULT_RULES,
) -> AffordabilityResult:
    """
    A prospective EMI must leave more than 20% of current expenses free.
    """
    check_finite(
        new_emi=new_emi,
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        existing_emis=existing_emis,
        total_balance=total_balance,
        total_debt=total_debt,
    )
    if new_emi is None or new_emi <= 0:
        raise InvalidInput(f"new EMI must be positive, got {new_emi}")

    disposable = disposable_income(monthly_income, monthly_expenses, existing_emis)
    left_over = disposable - new_emi
    buffer = monthly_expenses * rules.emi_buffer_share

    result = AffordabilityResult(
        affordable=left_over > buffer,
        disposable_income=disposable,
        available_for_purchase=max(0.0, disposable - buffer),
        balance_after=total_balance,
        coverage_after=emergency_coverage_months(
            total_balance, monthly_expenses, existing_emis + new_emi
        ),
        debt_to_income=debt_to_income_ratio(total_debt, monthly_income),
        shortfall=max(0.0, buffer - left_over),
    )
    logger.debug("new EMI of %.2f -> %s", new_emi, result)
    return result
