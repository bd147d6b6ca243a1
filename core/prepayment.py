# core/prepayment.py
"""
What a lump-sum prepayment does to a loan.
EMI stays the same, tenure shrinks.
Does NOT modify stored data.
"""

import logging
from dataclasses import dataclass

from core.calculations import remaining_months
from core.errors import InvalidInput
from core.models import Debt, check_finite

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrepaymentImpact:
    new_balance: float
    new_remaining_months: int
    months_saved: int
    interest_saved: float
    closed: bool


def prepayment_impact(
    current_balance: float,
    emi: float,
    annual_rate: float,
    months_left: int,
    prepay: float,
) -> PrepaymentImpact:
    """
    Raises DivergentAmortization when the EMI no longer covers the
    interest on the balance that remains after prepaying.
    """
    check_finite(
        current_balance=current_balance,
        emi=emi,
        annual_rate=annual_rate,
        months_left=months_left,
        prepay=prepay,
    )
    if prepay is None or prepay <= 0:
        raise InvalidInput(f"prepayment must be positive, got {prepay}")
    if emi is None or emi <= 0:
        raise InvalidInput(f"EMI must be positive, got {emi}")
    if months_left < 0:
        raise InvalidInput(f"remaining months cannot be negative, got {months_left}")

    new_balance = current_balance - prepay

    # 🎉 loan closed
    if new_balance <= 0:
        impact = PrepaymentImpact(
            new_balance=0.0,
            new_remaining_months=0,
            months_saved=months_left,
            interest_saved=round(max(0.0, months_left * emi - current_balance), 2),
            closed=True,
        )
        logger.debug("prepayment of %.2f closes the loan: %s", prepay, impact)
        return impact

    new_months = remaining_months(new_balance, annual_rate, emi)
    # stored months_left may have drifted below the recomputed tenure
    months_saved = max(0, months_left - new_months)

    impact = PrepaymentImpact(
        new_balance=round(new_balance, 2),
        new_remaining_months=new_months,
        months_saved=months_saved,
        interest_saved=round(max(0.0, months_saved * emi - prepay), 2),
        closed=False,
    )
    logger.debug("prepayment of %.2f: %s", prepay, impact)
    return impact


def debt_prepayment_impact(debt: Debt, prepay: float) -> PrepaymentImpact:
    return prepayment_impact(
        current_balance=debt.current_balance,
        emi=debt.emi,
        annual_rate=debt.interest_rate,
        months_left=debt.remaining_months,
        prepay=prepay,
    )
