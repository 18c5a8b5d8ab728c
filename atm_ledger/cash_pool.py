"""
Cash Pool Module

Tracks the physical cash available in the dispenser. This is independent
of account balances: a withdrawal must reserve cash here before the account
is debited, and must give it back if the debit fails.
"""

from decimal import Decimal

from .accounts import validate_amount
from .currency import ZERO, format_amount, to_amount
from .results import ErrorKind, Result


class CashPool:
    """Dispenser cash reserve. `available` never goes below zero."""

    def __init__(self, initial_reserve=ZERO):
        available = to_amount(initial_reserve)
        if available < ZERO:
            raise ValueError("Initial cash reserve cannot be negative")
        self._available = available

    def reserve(self) -> Decimal:
        """Current amount of cash available to dispense"""
        return self._available

    def try_dispense(self, amount) -> Result[Decimal]:
        """Take cash out of the pool if enough is available"""
        checked = validate_amount(amount)
        if not checked.ok:
            return checked
        value = checked.value

        if self._available < value:
            return Result.failure(
                ErrorKind.INSUFFICIENT_POOL_CASH,
                f"ATM doesn't have enough cash: available {format_amount(self._available)}, "
                f"requested {format_amount(value)}"
            )
        self._available -= value
        return Result.success(self._available)

    def refill(self, amount) -> Result[Decimal]:
        """Add cash to the pool"""
        checked = validate_amount(amount)
        if not checked.ok:
            return checked
        try:
            available = to_amount(self._available + checked.value)
        except ValueError as e:
            return Result.failure(ErrorKind.INVALID_AMOUNT, f"Cannot refill by {checked.value}: {e}")
        self._available = available
        return Result.success(self._available)

    def restore(self, amount: Decimal) -> Decimal:
        """
        Return previously dispensed cash to the pool.

        Compensation for a withdrawal whose account debit failed after
        try_dispense succeeded; not a refill and never logged.
        """
        self._available += to_amount(amount)
        return self._available
