# core/errors.py


class FinanceError(Exception):
    """Base class for everything the finance engine raises."""


class InvalidInput(FinanceError, ValueError):
    """Non-positive amount/rate/tenure, missing field or unknown type."""


class DivergentAmortization(FinanceError, ArithmeticError):
    """
    EMI does not cover the monthly interest on the balance.
    The loan never closes at this EMI.
    """

    def __init__(self, balance: float, monthly_interest: float, emi: float):
        self.balance = balance
        self.monthly_interest = monthly_interest
        self.emi = emi
        super().__init__(
            f"EMI {emi:,.2f} does not cover monthly interest "
            f"{monthly_interest:,.2f} on balance {balance:,.2f}"
        )
