# core/models.py
"""
Record types the engine works on.

Every record is an immutable snapshot. The store keeps plain dicts on disk;
`from_dict` / `to_dict` convert at the edge.
"""

import math
import uuid
from dataclasses import dataclass, asdict, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

from core.errors import InvalidInput

EXPENSE_TYPES = frozenset({"fixed", "variable", "discretionary"})
INCOME_TYPES = frozenset({"salary", "freelance", "business", "investment", "other"})
ACCOUNT_TYPES = frozenset({"savings", "current", "fd", "other"})
INVESTMENT_TYPES = frozenset({
    "epf", "ppf", "fd", "rd",
    "mf_equity", "mf_debt", "mf_hybrid", "sip", "elss",
    "nsc", "kisan_vikas", "gold", "stocks", "bonds", "ulip", "other",
})

# ==================================================
# FIELD HELPERS
# ==================================================
def _new_id() -> str:
    return uuid.uuid4().hex


def _required(data: Dict[str, Any], key: str, kind: str) -> Any:
    value = data.get(key)
    if value is None or value == "":
        raise InvalidInput(f"{kind} missing field: {key}")
    return value


def _number(value: Any, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInput(f"{key} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidInput(f"{key} must be a finite number, got {value!r}")
    return number


def check_finite(**values: Any) -> None:
    """
    Engine entry guard: NaN / inf never reach a result.
    None is left to the caller's own checks.
    """
    for key, value in values.items():
        if value is not None:
            _number(value, key)


def _positive(value: Any, key: str) -> float:
    number = _number(value, key)
    if number <= 0:
        raise InvalidInput(f"{key} must be positive, got {number}")
    return number


def _non_negative(value: Any, key: str) -> float:
    number = _number(value, key)
    if number < 0:
        raise InvalidInput(f"{key} cannot be negative, got {number}")
    return number


def _whole(value: Any, key: str) -> int:
    number = _number(value, key)
    if number != int(number):
        raise InvalidInput(f"{key} must be a whole number of months, got {number}")
    return int(number)


def _choice(value: Any, allowed: frozenset, key: str) -> str:
    value = str(value).lower()
    if value not in allowed:
        raise InvalidInput(f"unknown {key} {value!r}, expected one of {sorted(allowed)}")
    return value


def parse_date(value: Any, key: str = "date") -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        raise InvalidInput(f"{key} is not an ISO date: {value!r}") from None


def _serialize(record) -> Dict[str, Any]:
    out = asdict(record)
    for key, value in out.items():
        if isinstance(value, date):
            out[key] = value.isoformat()
    return out

# ==================================================
# RECORDS
# ==================================================
@dataclass(frozen=True)
class Expense:
    amount: float
    category: str
    date: date
    type: str = "variable"
    description: str = ""
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        return cls(
            id=str(data.get("id") or _new_id()),
            amount=_positive(_required(data, "amount", "Expense"), "amount"),
            category=str(_required(data, "category", "Expense")),
            description=str(data.get("description") or ""),
            date=parse_date(_required(data, "date", "Expense")),
            type=_choice(data.get("type") or "variable", EXPENSE_TYPES, "expense type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class Income:
    amount: float
    source: str
    date: date
    type: str = "salary"
    description: str = ""
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Income":
        return cls(
            id=str(data.get("id") or _new_id()),
            amount=_positive(_required(data, "amount", "Income"), "amount"),
            source=str(_required(data, "source", "Income")),
            description=str(data.get("description") or ""),
            type=_choice(data.get("type") or "salary", INCOME_TYPES, "income type"),
            date=parse_date(_required(data, "date", "Income")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class Debt:
    """
    A running loan.

    current_balance and remaining_months are stored independently and can
    drift apart; see core.finance_metrics.reconcile_debt.
    """
    name: str
    principal: float
    current_balance: float
    emi: float
    interest_rate: float
    tenure: int
    remaining_months: int
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Debt":
        principal = _positive(_required(data, "principal", "Debt"), "principal")
        tenure = _whole(_positive(_required(data, "tenure", "Debt"), "tenure"), "tenure")

        balance = data.get("current_balance")
        balance = principal if balance is None else _non_negative(balance, "current_balance")
        if balance > principal:
            raise InvalidInput(
                f"current_balance {balance} cannot exceed principal {principal}"
            )

        remaining = data.get("remaining_months")
        remaining = tenure if remaining is None else _whole(
            _non_negative(remaining, "remaining_months"), "remaining_months"
        )
        if remaining > tenure:
            raise InvalidInput(
                f"remaining_months {remaining} cannot exceed tenure {tenure}"
            )

        return cls(
            id=str(data.get("id") or _new_id()),
            name=str(_required(data, "name", "Debt")),
            principal=principal,
            current_balance=balance,
            emi=_positive(_required(data, "emi", "Debt"), "emi"),
            interest_rate=_non_negative(_required(data, "interest_rate", "Debt"), "interest_rate"),
            tenure=tenure,
            remaining_months=remaining,
        )

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class BankBalance:
    bank_name: str
    balance: float
    date: date
    account_type: str = "savings"
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BankBalance":
        return cls(
            id=str(data.get("id") or _new_id()),
            bank_name=str(_required(data, "bank_name", "BankBalance")),
            account_type=_choice(data.get("account_type") or "savings", ACCOUNT_TYPES, "account type"),
            balance=_non_negative(_required(data, "balance", "BankBalance"), "balance"),
            date=parse_date(_required(data, "date", "BankBalance")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


@dataclass(frozen=True)
class Investment:
    name: str
    type: str
    amount: float
    current_value: float
    interest_rate: Optional[float] = None
    maturity_date: Optional[date] = None
    id: str = field(default_factory=_new_id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Investment":
        amount = _positive(_required(data, "amount", "Investment"), "amount")
        current = data.get("current_value")
        rate = data.get("interest_rate")
        maturity = data.get("maturity_date")
        return cls(
            id=str(data.get("id") or _new_id()),
            name=str(_required(data, "name", "Investment")),
            type=_choice(_required(data, "type", "Investment"), INVESTMENT_TYPES, "investment type"),
            amount=amount,
            current_value=amount if current is None else _non_negative(current, "current_value"),
            interest_rate=None if rate in (None, "") else _non_negative(rate, "interest_rate"),
            maturity_date=None if maturity in (None, "") else parse_date(maturity, "maturity_date"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _serialize(self)


RECORD_TYPES = {
    "expenses": Expense,
    "incomes": Income,
    "debts": Debt,
    "bank_balances": BankBalance,
    "investments": Investment,
}

# Only these collections support full replace by id.
UPDATABLE = frozenset({"debts", "bank_balances", "investments"})


@dataclass(frozen=True)
class Snapshot:
    """
    Everything the engine needs, read in one go.
    """
    expenses: Tuple[Expense, ...] = ()
    incomes: Tuple[Income, ...] = ()
    debts: Tuple[Debt, ...] = ()
    bank_balances: Tuple[BankBalance, ...] = ()
    investments: Tuple[Investment, ...] = ()
