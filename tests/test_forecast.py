from datetime import date

import pytest

from core.config import ProjectionThresholds
from core.errors import InvalidInput
from core.forecast import (
    forecast_insights,
    net_worth_projection,
    project_cash_flow,
    summary_frame,
)


def test_balance_accumulates_net_savings():
    snapshots = project_cash_flow(
        monthly_income=75000,
        average_expenses=45000,
        total_emis=21400,
        starting_balance=15000,
        months=3,
    )

    assert [s.month for s in snapshots] == [1, 2, 3]
    assert all(s.net_savings == 8600 for s in snapshots)
    assert [s.balance for s in snapshots] == [23600, 32200, 40800]
    assert [s.status for s in snapshots] == ["warning", "good", "good"]
    assert snapshots[0].label == "Month 1"


def test_projection_is_deterministic():
    args = (75000, 45000, 21400, 15000, 12)
    assert project_cash_flow(*args) == project_cash_flow(*args)


def test_negative_cash_flow_goes_critical():
    snapshots = project_cash_flow(40000, 45000, 5000, 30000, 3)

    assert [s.balance for s in snapshots] == [20000, 10000, 0]
    # exactly 10000 is not below the critical line
    assert [s.status for s in snapshots] == ["warning", "warning", "critical"]


def test_custom_thresholds():
    loose = ProjectionThresholds(critical=1000, warning=5000)
    snapshots = project_cash_flow(40000, 45000, 5000, 30000, 3, thresholds=loose)

    assert [s.status for s in snapshots] == ["good", "good", "critical"]


def test_labels_follow_calendar_months():
    snapshots = project_cash_flow(
        75000, 45000, 21400, 15000, 3, start=date(2024, 11, 15)
    )

    assert [s.label for s in snapshots] == ["2024-12", "2025-01", "2025-02"]


@pytest.mark.parametrize("months", [0, -1, 241])
def test_projection_length_is_bounded(months):
    with pytest.raises(InvalidInput):
        project_cash_flow(75000, 45000, 21400, 15000, months)


@pytest.mark.parametrize("income,balance", [
    (float("nan"), 15000),
    (75000, float("inf")),
])
def test_projection_rejects_non_finite_inputs(income, balance):
    with pytest.raises(InvalidInput):
        project_cash_flow(income, 45000, 21400, balance, 12)


def test_summary_frame_has_one_row_per_month():
    frame = summary_frame(project_cash_flow(75000, 45000, 21400, 15000, 6))

    assert len(frame) == 6
    assert list(frame["balance"])[-1] == 15000 + 6 * 8600
    assert "status" in frame.columns


def test_net_worth_projection():
    rows = net_worth_projection(100000, 8600, months=2)

    assert rows == [
        {"month": 1, "net_worth": 108600, "savings": 8600},
        {"month": 2, "net_worth": 117200, "savings": 17200},
    ]


# --------------------------------------------------
# Insights
# --------------------------------------------------
def test_insights_flag_low_balance_and_emi_burden():
    snapshots = project_cash_flow(50000, 20000, 25000, 5000, 3)

    insights = forecast_insights(snapshots, monthly_income=50000, total_emis=25000)
    titles = [i["title"] for i in insights]

    assert titles[0] == "High EMI Burden"
    assert insights[0]["detail"]["emi_to_income_percent"] == 50.0
    assert "Low Balance Alert" in titles
    low = next(i for i in insights if i["title"] == "Low Balance Alert")
    assert low["detail"]["months"] == 3


def test_insights_savings_goal_and_emergency_fund():
    snapshots = project_cash_flow(75000, 45000, 21400, 50000, 6)

    insights = forecast_insights(
        snapshots,
        monthly_income=75000,
        total_emis=21400,
        savings_goal=50000,
        current_savings=12000,
        emergency_fund=50000,
        monthly_expenses=45000,
    )
    by_title = {i["title"]: i for i in insights}

    # (50000 - 12000) / 8600 = 4.4 → 5 months
    assert by_title["Savings Goal"]["detail"]["months_to_goal"] == 5
    assert by_title["Emergency Fund Priority"]["detail"]["target"] == 135000
    assert "Low Balance Alert" not in by_title


def test_no_snapshots_no_insights():
    assert forecast_insights([], 75000, 21400) == []
