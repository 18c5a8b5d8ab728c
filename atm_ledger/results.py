"""
Operation Results Module

Every ledger operation returns a Result carrying either a value or one
ErrorKind with a human-readable message, so failures cannot be ignored by
accident.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(Enum):
    """Failure taxonomy shared by all ledger components"""
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_POOL_CASH = "insufficient_pool_cash"
    DUPLICATE_ID = "duplicate_id"
    NOT_FOUND = "not_found"
    AUTH_FAILURE = "auth_failure"
    IO_FAILURE = "io_failure"
    SAME_ACCOUNT = "same_account"      # Transfer source equals destination
    INVALID_ACCOUNT = "invalid_account"  # Account fields unusable in the record format


class LedgerError(Exception):
    """Raised by Result.unwrap() on a failed result"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None, message: str = "") -> "Result[T]":
        return cls(value=value, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(error=kind, message=message)

    def unwrap(self) -> T:
        """Return the value or raise LedgerError"""
        if self.error is not None:
            raise LedgerError(self.error, self.message)
        return self.value
