import pytest

from core.errors import DivergentAmortization, InvalidInput
from core.models import Debt
from core.prepayment import debt_prepayment_impact, prepayment_impact

CAR_LOAN = Debt(
    id="car",
    name="Car Loan",
    principal=800000,
    current_balance=450000,
    emi=8900,
    interest_rate=9.2,
    tenure=84,
    remaining_months=52,
)


def test_partial_prepayment_shortens_tenure():
    """
    ₹50,000 off a car loan with 52 EMIs left.
    EMI stays, tenure drops.
    """
    impact = debt_prepayment_impact(CAR_LOAN, 50000)

    assert impact.new_balance == 400000
    assert not impact.closed
    assert impact.new_remaining_months < 52
    assert impact.new_remaining_months == 39
    assert impact.months_saved == 13
    assert impact.interest_saved == 13 * 8900 - 50000
    assert impact.interest_saved >= 0


@pytest.mark.parametrize("prepay", [450000, 450001, 1000000])
def test_prepaying_full_balance_closes_loan(prepay):
    impact = debt_prepayment_impact(CAR_LOAN, prepay)

    assert impact.closed
    assert impact.new_balance == 0
    assert impact.new_remaining_months == 0
    assert impact.months_saved == 52
    # 52 * 8900 scheduled minus 450000 owed
    assert impact.interest_saved == 12800


def test_closing_with_no_interest_left_clamps_to_zero():
    impact = prepayment_impact(
        current_balance=100000, emi=1000, annual_rate=0, months_left=50, prepay=100000
    )

    assert impact.closed
    assert impact.interest_saved == 0


def test_emi_not_covering_interest_is_flagged():
    # 900000 * 1% = 9000 monthly interest > 8000 EMI
    with pytest.raises(DivergentAmortization):
        prepayment_impact(
            current_balance=1000000, emi=8000, annual_rate=12,
            months_left=200, prepay=100000,
        )


def test_drifted_remaining_months_never_saves_negative():
    drifted = Debt(
        id="drift",
        name="Drifted Loan",
        principal=800000,
        current_balance=450000,
        emi=8900,
        interest_rate=9.2,
        tenure=84,
        remaining_months=30,
    )
    impact = debt_prepayment_impact(drifted, 50000)

    assert impact.months_saved == 0
    assert impact.interest_saved == 0


@pytest.mark.parametrize("prepay,emi", [(0, 8900), (-100, 8900), (5000, 0)])
def test_invalid_prepayment_rejected(prepay, emi):
    with pytest.raises(InvalidInput):
        prepayment_impact(
            current_balance=450000, emi=emi, annual_rate=9.2,
            months_left=52, prepay=prepay,
        )


def test_bigger_prepayment_saves_at_least_as_many_months():
    saved = [
        debt_prepayment_impact(CAR_LOAN, amount).months_saved
        for amount in (10000, 50000, 100000, 200000, 400000)
    ]
    assert saved == sorted(saved)


@pytest.mark.parametrize("field", ["current_balance", "emi", "annual_rate", "prepay"])
def test_non_finite_amounts_rejected(field):
    args = dict(current_balance=450000, emi=8900, annual_rate=9.2, months_left=52, prepay=50000)
    args[field] = float("nan")

    with pytest.raises(InvalidInput):
        prepayment_impact(**args)
