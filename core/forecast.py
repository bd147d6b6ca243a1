# core/forecast.py
"""
Month-by-month cash-flow projection.

Pure logic only.
Same inputs → same snapshots (no random variance).
"""

import math
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, List, Optional

import pandas as pd
from dateutil.relativedelta import relativedelta

from core import config
from core.config import ProjectionThresholds
from core.errors import InvalidInput
from core.models import check_finite
from utils.dates import month_key

DEFAULT_THRESHOLDS = ProjectionThresholds()


@dataclass(frozen=True)
class MonthSnapshot:
    month: int
    label: str
    income: float
    expenses: float
    emis: float
    net_savings: float
    balance: float
    status: str  # critical | warning | good

# ==================================================
# PROJECTION
# ==================================================
def project_cash_flow(
    monthly_income: float,
    average_expenses: float,
    total_emis: float,
    starting_balance: float,
    months: int,
    thresholds: ProjectionThresholds = DEFAULT_THRESHOLDS,
    start: Optional[date] = None,
) -> List[MonthSnapshot]:
    check_finite(
        monthly_income=monthly_income,
        average_expenses=average_expenses,
        total_emis=total_emis,
        starting_balance=starting_balance,
    )
    if months is None or months < 1 or months > config.MAX_PROJECTION_MONTHS:
        raise InvalidInput(
            f"projection length must be 1..{config.MAX_PROJECTION_MONTHS} months, got {months}"
        )

    net = monthly_income - average_expenses - total_emis
    balance = starting_balance
    snapshots = []

    for i in range(1, months + 1):
        balance += net
        label = (
            month_key(start + relativedelta(months=i))
            if start else f"Month {i}"
        )
        snapshots.append(MonthSnapshot(
            month=i,
            label=label,
            income=monthly_income,
            expenses=average_expenses,
            emis=total_emis,
            net_savings=net,
            balance=balance,
            status=thresholds.status(balance),
        ))

    return snapshots


def net_worth_projection(net_worth: float, disposable: float, months: int = 12) -> List[Dict[str, Any]]:
    rows = []
    current = net_worth
    for month in range(1, months + 1):
        current += disposable
        rows.append({
            "month": month,
            "net_worth": current,
            "savings": disposable * month,
        })
    return rows


def summary_frame(snapshots: List[MonthSnapshot]) -> pd.DataFrame:
    columns = [
        "month", "label", "income", "expenses", "emis",
        "net_savings", "balance", "status",
    ]
    return pd.DataFrame([asdict(s) for s in snapshots], columns=columns)

# ==================================================
# 🧠 INSIGHTS
# ==================================================
def forecast_insights(
    snapshots: List[MonthSnapshot],
    monthly_income: float,
    total_emis: float,
    savings_goal: Optional[float] = None,
    current_savings: float = 0.0,
    emergency_fund: Optional[float] = None,
    monthly_expenses: Optional[float] = None,
    thresholds: ProjectionThresholds = DEFAULT_THRESHOLDS,
) -> List[Dict[str, Any]]:
    """
    Plain observations on a projection, most urgent first.
    Each insight is {"type", "title", "detail"}; wording is left to the caller.
    """
    insights = []
    if not snapshots:
        return insights

    low_months = [s for s in snapshots if s.balance < thresholds.warning]
    if low_months:
        insights.append({
            "type": "warning",
            "title": "Low Balance Alert",
            "detail": {
                "months": len(low_months),
                "first_month": low_months[0].label,
                "threshold": thresholds.warning,
            },
        })

    if monthly_income > 0:
        emi_percent = total_emis / monthly_income * 100
        if emi_percent > config.HIGH_EMI_INCOME_PERCENT:
            insights.insert(0, {
                "type": "critical",
                "title": "High EMI Burden",
                "detail": {"emi_to_income_percent": round(emi_percent, 1)},
            })

    if savings_goal is not None and savings_goal > current_savings:
        avg_savings = sum(s.net_savings for s in snapshots) / len(snapshots)
        months_to_goal = (
            math.ceil((savings_goal - current_savings) / avg_savings)
            if avg_savings > 0 else None
        )
        insights.append({
            "type": "info",
            "title": "Savings Goal",
            "detail": {"goal": savings_goal, "months_to_goal": months_to_goal},
        })

    if emergency_fund is not None and monthly_expenses:
        target = monthly_expenses * config.EMERGENCY_FUND_TARGET_MONTHS
        progress = emergency_fund / target * 100
        if progress < config.EMERGENCY_FUND_PRIORITY_PERCENT:
            insights.append({
                "type": "warning",
                "title": "Emergency Fund Priority",
                "detail": {"progress_percent": round(progress, 1), "target": target},
            })

    return insights
