# core/finance_metrics.py
"""
READ-ONLY financial calculations over record snapshots.
No storage.
No file writes.
Safe to import anywhere.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional

from core import config
from core.affordability import (
    debt_to_income_ratio,
    disposable_income,
    emergency_coverage_months,
)
from core.calculations import compound_growth, monthly_rate, remaining_months
from core.errors import DivergentAmortization, InvalidInput
from core.models import (
    BankBalance,
    Debt,
    Expense,
    Income,
    Investment,
    Snapshot,
    check_finite,
)

logger = logging.getLogger(__name__)

TYPICAL_RETURNS = {
    "epf": 8.15, "ppf": 7.1, "fd": 6.5, "rd": 6.0, "mf_equity": 12.0,
    "mf_debt": 7.0, "mf_hybrid": 9.0, "sip": 12.0, "elss": 11.0,
    "nsc": 6.8, "kisan_vikas": 7.5, "gold": 8.0, "stocks": 15.0,
    "bonds": 6.0, "ulip": 8.0, "other": 7.0,
}
DEFAULT_TYPICAL_RETURN = 7.0


@dataclass(frozen=True)
class FinancialSummary:
    total_income: float
    total_expenses: float
    total_emis: float
    total_balance: float
    total_debt: float
    total_invested: float
    investments_value: float
    net_worth: float
    disposable_income: float
    emergency_months: Optional[float]
    debt_to_income: Optional[float]
    savings_rate: Optional[float]
    health_score: int
    health_label: str

# ==================================================
# RATIOS & SCORE
# ==================================================
def savings_rate(disposable: float, income: float) -> Optional[float]:
    if income <= 0:
        return None
    return disposable / income * 100


def health_score(
    emergency_months: Optional[float],
    debt_to_income: Optional[float],
    savings_rate_percent: Optional[float],
) -> int:
    """
    0–100, starting from 50.

    None means the ratio had no denominator:
    - coverage: no monthly outflow at all → best tier
    - debt-to-income / savings rate: no income → worst tier
    """
    score = config.HEALTH_BASE_SCORE

    # ---------------- Emergency fund ----------------
    if emergency_months is None:
        score += config.EMERGENCY_SCORE_TIERS[0][1]
    else:
        for months, points in config.EMERGENCY_SCORE_TIERS:
            if emergency_months >= months:
                score += points
                break

    # ---------------- Debt load ----------------
    debt_points = config.DEBT_RATIO_PENALTY
    if debt_to_income is not None:
        for below, points in config.DEBT_RATIO_SCORE_TIERS:
            if debt_to_income < below:
                debt_points = points
                break
    score += debt_points

    # ---------------- Savings ----------------
    if savings_rate_percent is None or savings_rate_percent < 0:
        score += config.NEGATIVE_SAVINGS_PENALTY
    else:
        for at_least, points in config.SAVINGS_SCORE_TIERS:
            if savings_rate_percent >= at_least:
                score += points
                break

    return int(max(0, min(100, score)))


def health_label(score: int) -> str:
    for floor, label in config.HEALTH_LABELS:
        if score >= floor:
            return label
    return config.HEALTH_LABEL_FLOOR

# ==================================================
# PORTFOLIO SUMMARY
# ==================================================
def summarize(
    expenses: Iterable[Expense] = (),
    incomes: Iterable[Income] = (),
    debts: Iterable[Debt] = (),
    bank_balances: Iterable[BankBalance] = (),
    investments: Iterable[Investment] = (),
) -> FinancialSummary:
    expenses, incomes, debts = list(expenses), list(incomes), list(debts)
    bank_balances, investments = list(bank_balances), list(investments)

    total_income = sum(i.amount for i in incomes)
    total_expenses = sum(e.amount for e in expenses)
    total_emis = sum(d.emi for d in debts)
    total_balance = sum(b.balance for b in bank_balances)
    total_debt = sum(d.current_balance for d in debts)
    total_invested = sum(i.amount for i in investments)
    investments_value = sum(i.current_value for i in investments)

    disposable = disposable_income(total_income, total_expenses, total_emis)
    coverage = emergency_coverage_months(total_balance, total_expenses, total_emis)
    dti = debt_to_income_ratio(total_debt, total_income)
    rate = savings_rate(disposable, total_income)
    score = health_score(coverage, dti, rate)

    summary = FinancialSummary(
        total_income=round(total_income, 2),
        total_expenses=round(total_expenses, 2),
        total_emis=round(total_emis, 2),
        total_balance=round(total_balance, 2),
        total_debt=round(total_debt, 2),
        total_invested=round(total_invested, 2),
        investments_value=round(investments_value, 2),
        net_worth=round(total_balance + investments_value - total_debt, 2),
        disposable_income=round(disposable, 2),
        emergency_months=coverage,
        debt_to_income=dti,
        savings_rate=rate,
        health_score=score,
        health_label=health_label(score),
    )
    logger.debug("summary %s", summary)
    return summary


def summarize_snapshot(snapshot: Snapshot) -> FinancialSummary:
    return summarize(
        expenses=snapshot.expenses,
        incomes=snapshot.incomes,
        debts=snapshot.debts,
        bank_balances=snapshot.bank_balances,
        investments=snapshot.investments,
    )

# ==================================================
# BREAKDOWNS
# ==================================================
def _totals_by(records, key) -> Dict[str, float]:
    totals = defaultdict(float)
    for r in records:
        totals[key(r)] += r.amount
    return {
        k: round(v, 2)
        for k, v in sorted(totals.items(), key=lambda x: -x[1])
    }


def expense_breakdown(expenses: Iterable[Expense]) -> Dict[str, float]:
    return _totals_by(expenses, lambda e: e.category)


def expenses_by_type(expenses: Iterable[Expense]) -> Dict[str, float]:
    return _totals_by(expenses, lambda e: e.type)


def income_by_type(incomes: Iterable[Income]) -> Dict[str, float]:
    return _totals_by(incomes, lambda i: i.type)

# ==================================================
# INVESTMENTS
# ==================================================
def typical_return(investment_type: str) -> float:
    return TYPICAL_RETURNS.get(investment_type, DEFAULT_TYPICAL_RETURN)


def investment_returns(investment: Investment) -> Dict[str, Any]:
    returns = investment.current_value - investment.amount
    percent = (
        round(returns / investment.amount * 100, 2)
        if investment.amount > 0 else None
    )
    return {"returns": round(returns, 2), "return_percent": percent}


def portfolio_returns(investments: Iterable[Investment]) -> Dict[str, Any]:
    investments = list(investments)
    invested = sum(i.amount for i in investments)
    value = sum(i.current_value for i in investments)
    returns = value - invested
    return {
        "invested": round(invested, 2),
        "current_value": round(value, 2),
        "returns": round(returns, 2),
        "return_percent": round(returns / invested * 100, 2) if invested > 0 else None,
    }


def sip_future_value(monthly_amount: float, annual_return: float, months: int) -> Dict[str, Any]:
    """
    Monthly SIP, contributions at the start of each month:
        FV = P * ((1+i)^n - 1) / i * (1+i)
    """
    check_finite(monthly_amount=monthly_amount, annual_return=annual_return, months=months)
    if monthly_amount <= 0:
        raise InvalidInput(f"SIP amount must be positive, got {monthly_amount}")
    if annual_return < 0:
        raise InvalidInput(f"expected return cannot be negative, got {annual_return}")
    if months != int(months) or not 1 <= months <= config.MAX_TENURE_MONTHS:
        raise InvalidInput(
            f"SIP duration must be 1..{config.MAX_TENURE_MONTHS} whole months, got {months}"
        )

    i = monthly_rate(annual_return)
    invested = monthly_amount * months
    growth = compound_growth(i, int(months)) if i > 0 else 1.0
    if growth == 1:
        future_value = invested
    else:
        future_value = monthly_amount * (growth - 1) / i * (1 + i)
    check_finite(future_value=future_value)

    return {
        "invested": round(invested, 2),
        "future_value": round(future_value, 2),
        "gains": round(future_value - invested, 2),
    }

# ==================================================
# DEBTS
# ==================================================
def debt_alerts(debts: Iterable[Debt], monthly_income: float) -> List[Dict[str, Any]]:
    alerts = []
    for d in debts:
        if monthly_income > 0 and d.emi > monthly_income * config.HIGH_EMI_INCOME_SHARE:
            alerts.append({
                "type": "high_emi",
                "debt": d.name,
                "emi_income_percent": round(d.emi / monthly_income * 100, 1),
            })

        if 0 < d.remaining_months <= config.CLOSING_SOON_MONTHS:
            alerts.append({
                "type": "closing_soon",
                "debt": d.name,
                "remaining_months": d.remaining_months,
            })

        if d.interest_rate > config.HIGH_INTEREST_RATE:
            alerts.append({
                "type": "high_interest",
                "debt": d.name,
                "interest_rate": d.interest_rate,
            })
    return alerts


def debt_remaining_interest(debt: Debt) -> float:
    # interest still to be paid if every remaining EMI is paid in full
    return round(max(0.0, debt.remaining_months * debt.emi - debt.current_balance), 2)


def debt_progress_percent(debt: Debt) -> int:
    repaid = debt.principal - debt.current_balance
    return int(max(0, min(100, repaid / debt.principal * 100)))


def debt_consistency(debt: Debt) -> Dict[str, Any]:
    """
    Compare stored remaining_months with what current_balance implies.
    """
    try:
        expected = remaining_months(debt.current_balance, debt.interest_rate, debt.emi)
    except DivergentAmortization:
        return {
            "expected_remaining_months": None,
            "stored_remaining_months": debt.remaining_months,
            "drift": None,
            "consistent": False,
        }

    drift = debt.remaining_months - expected
    return {
        "expected_remaining_months": expected,
        "stored_remaining_months": debt.remaining_months,
        "drift": drift,
        "consistent": drift == 0,
    }


def reconcile_debt(debt: Debt) -> Debt:
    """
    current_balance is authoritative; remaining_months is derived from it.
    Raises DivergentAmortization if the EMI can never clear the balance.
    """
    expected = remaining_months(debt.current_balance, debt.interest_rate, debt.emi)
    expected = min(expected, debt.tenure)
    if expected != debt.remaining_months:
        logger.info(
            "debt %s: remaining months %s -> %s",
            debt.name, debt.remaining_months, expected,
        )
    return replace(debt, remaining_months=expected)
