import json

import pytest

from core.errors import InvalidInput
from core.models import Debt
from core.record_store import open_store


@pytest.fixture
def store(tmp_path):
    return open_store(tmp_path / "data", max_backups=3)


def test_open_store_creates_empty_document(tmp_path):
    store = open_store(tmp_path / "fresh")

    assert store.data_file.exists()
    assert json.loads(store.data_file.read_text()) == {
        "expenses": [], "incomes": [], "debts": [],
        "bank_balances": [], "investments": [],
    }


def test_add_list_delete_expense(store):
    added = store.add("expenses", {
        "amount": 250,
        "category": "Food",
        "description": "Lunch",
        "date": "2024-02-10",
        "type": "variable",
    })

    assert added["id"]
    assert added["date"] == "2024-02-10"
    assert store.list("expenses") == [added]

    assert store.delete("expenses", added["id"]) is True
    assert store.delete("expenses", added["id"]) is False
    assert store.list("expenses") == []


def test_invalid_record_is_not_stored(store):
    with pytest.raises(InvalidInput):
        store.add("expenses", {"amount": -5, "category": "Food", "date": "2024-02-10"})

    assert store.list("expenses") == []


def test_update_replaces_debt_by_id(store):
    store.add("debts", {
        "id": "car",
        "name": "Car Loan",
        "principal": 800000,
        "current_balance": 450000,
        "emi": 8900,
        "interest_rate": 9.2,
        "tenure": 84,
        "remaining_months": 52,
    })

    store.update("debts", {
        "id": "car",
        "name": "Car Loan",
        "principal": 800000,
        "current_balance": 400000,
        "emi": 8900,
        "interest_rate": 9.2,
        "tenure": 84,
        "remaining_months": 39,
    })

    debts = store.list("debts")
    assert len(debts) == 1
    assert debts[0]["current_balance"] == 400000
    assert debts[0]["remaining_months"] == 39


def test_update_rules(store):
    with pytest.raises(ValueError):
        store.update("expenses", {"id": "x"})

    with pytest.raises(KeyError):
        store.update("bank_balances", {
            "id": "missing", "bank_name": "SBI", "balance": 10, "date": "2024-01-01",
        })


def test_duplicate_id_rejected(store):
    record = {"id": "b1", "bank_name": "SBI", "balance": 1000, "date": "2024-01-01"}
    store.add("bank_balances", record)

    with pytest.raises(ValueError):
        store.add("bank_balances", record)


def test_unknown_kind(store):
    with pytest.raises(KeyError):
        store.list("loans")


def test_snapshot_is_typed(store):
    store.add("incomes", {"amount": 75000, "source": "Employer", "date": "2024-03-01"})
    store.add("debts", {
        "name": "Home Loan", "principal": 2500000, "current_balance": 1850000,
        "emi": 12500, "interest_rate": 8.5, "tenure": 240, "remaining_months": 186,
    })

    snapshot = store.snapshot()

    assert len(snapshot.incomes) == 1
    assert snapshot.incomes[0].amount == 75000
    assert isinstance(snapshot.debts[0], Debt)
    assert snapshot.expenses == ()


def test_corrupt_file_recovers(store):
    """
    Regression test:
    broken JSON on disk → empty store + backup tagged corrupt
    """
    store.data_file.write_text("{broken json")

    assert store.list("expenses") == []
    assert json.loads(store.data_file.read_text())["debts"] == []
    assert any("corrupt" in p.name for p in store.list_backups())


def test_backups_are_capped(store):
    for i in range(6):
        store.add("expenses", {
            "amount": 100 + i, "category": "Misc", "date": "2024-01-01",
        })

    assert len(store.list_backups()) == 3


def test_single_backup_is_kept(tmp_path):
    store = open_store(tmp_path / "one", max_backups=1)
    for i in range(4):
        store.add("expenses", {"amount": 100 + i, "category": "Misc", "date": "2024-01-01"})

    assert len(store.list_backups()) == 1


@pytest.mark.parametrize("max_backups", [0, -2])
def test_backup_cap_must_be_positive(tmp_path, max_backups):
    """
    Regression test:
    max_backups=0 sliced as backups[:-0] and never pruned anything
    """
    with pytest.raises(ValueError):
        open_store(tmp_path / "data", max_backups=max_backups)


def test_restore_backup(store):
    store.add("expenses", {"id": "keep", "amount": 100, "category": "Misc", "date": "2024-01-01"})
    store.add("expenses", {"id": "drop", "amount": 200, "category": "Misc", "date": "2024-01-01"})

    # newest backup was taken right before "drop" was added
    store.restore_backup(store.list_backups()[0])

    assert [e["id"] for e in store.list("expenses")] == ["keep"]


def test_restore_missing_backup(store, tmp_path):
    with pytest.raises(FileNotFoundError):
        store.restore_backup(tmp_path / "nope.json")


def test_snapshot_feeds_summary(store):
    from core.finance_metrics import expenses_by_type, summarize_snapshot

    store.add("incomes", {"amount": 75000, "source": "Employer", "date": "2024-03-01"})
    store.add("expenses", {"amount": 30000, "category": "Rent", "date": "2024-03-02", "type": "fixed"})
    store.add("expenses", {"amount": 15000, "category": "Food", "date": "2024-03-05"})
    store.add("bank_balances", {"bank_name": "SBI", "balance": 300000, "date": "2024-03-01"})

    snapshot = store.snapshot()
    summary = summarize_snapshot(snapshot)

    assert summary.disposable_income == 30000
    assert summary.emergency_months == pytest.approx(300000 / 45000)
    assert summary.debt_to_income == 0
    # 50 + 20 (6.7 months) + 15 (no debt) + 15 (40% saved)
    assert summary.health_score == 100
    assert expenses_by_type(snapshot.expenses) == {"fixed": 30000, "variable": 15000}
