"""
Account Management Module

Owns the registry of customer accounts and the primitives that mutate their
balances. Every primitive validates first and mutates only when it is
certain to succeed, so a failed call leaves the registry untouched.

The store has no lock of its own: when it is shared between threads it must
be driven through the Ledger facade, which serializes every call.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Dict, Iterable, List
import hmac

from .currency import ZERO, format_amount, to_amount
from .results import ErrorKind, Result


# Every boundary str.splitlines() breaks on
LINE_BREAKS = ("\n", "\r", "\x0b", "\x0c", "\x1c", "\x1d", "\x1e", "\x85", "\u2028", "\u2029")

# Characters that would break the account file or the transaction log line
_RECORD_BREAKERS = (",", "|") + LINE_BREAKS


def breaks_record(value: str) -> bool:
    """True if `value` cannot be written as one field of an account or log line"""
    return any(ch in value for ch in _RECORD_BREAKERS)


def record_safe_name(name: str) -> str:
    """Drop commas and turn line breaks into spaces so a name stays one field"""
    name = name.replace(",", "")
    for line_break in LINE_BREAKS:
        name = name.replace(line_break, " ")
    return name.strip()


@dataclass
class Account:
    """
    Customer account. Balances are Decimal and never negative.
    """
    id: str
    pin: str
    name: str
    balance: Decimal = ZERO

    def __post_init__(self):
        self.balance = to_amount(self.balance)
        if self.balance < ZERO:
            raise ValueError(f"Account {self.id} cannot have a negative balance")

    def __repr__(self) -> str:
        # Keep the pin out of logs and tracebacks
        return f"Account(id={self.id!r}, name={self.name!r}, balance={format_amount(self.balance)})"

    def copy(self) -> "Account":
        return replace(self)


def validate_amount(amount) -> Result[Decimal]:
    """Normalize an amount to cents and require it to be strictly positive"""
    try:
        value = to_amount(amount)
    except ValueError as e:
        return Result.failure(ErrorKind.INVALID_AMOUNT, str(e))
    if value <= ZERO:
        return Result.failure(ErrorKind.INVALID_AMOUNT, "Amount must be greater than zero")
    return Result.success(value)


def _credited_balance(account: Account, value: Decimal) -> Result[Decimal]:
    """Balance after crediting `value`, computed without touching the account"""
    try:
        return Result.success(to_amount(account.balance + value))
    except ValueError as e:
        return Result.failure(
            ErrorKind.INVALID_AMOUNT,
            f"Cannot credit {value} to account {account.id}: {e}"
        )


class AccountStore:
    """
    In-memory account registry with atomic mutation primitives
    """

    def __init__(self, accounts: Iterable[Account] = ()):
        self._accounts: Dict[str, Account] = {}
        self.replace_all(accounts)

    def __len__(self) -> int:
        return len(self._accounts)

    def __contains__(self, account_id: str) -> bool:
        return account_id in self._accounts

    def replace_all(self, accounts: Iterable[Account]) -> None:
        """Install a loaded snapshot, dropping whatever was registered"""
        self._accounts = {account.id: account.copy() for account in accounts}

    def lookup(self, account_id: str) -> Result[Account]:
        """Get a copy of an account by id"""
        account = self._accounts.get(account_id)
        if account is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Account {account_id} not found")
        return Result.success(account.copy())

    def authenticate(self, account_id: str, pin: str) -> Result[Account]:
        """
        Check an id/pin pair.

        The failure is identical whether the id or the pin was wrong.
        """
        account = self._accounts.get(account_id)
        if account is None or not hmac.compare_digest(
            account.pin.encode("utf-8"), str(pin).encode("utf-8")
        ):
            return Result.failure(ErrorKind.AUTH_FAILURE, "Invalid credentials")
        return Result.success(account.copy())

    def withdraw(self, account_id: str, amount) -> Result[Account]:
        """Debit exactly `amount` from an account"""
        checked = validate_amount(amount)
        if not checked.ok:
            return checked
        value = checked.value

        account = self._accounts.get(account_id)
        if account is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Account {account_id} not found")
        if account.balance < value:
            return Result.failure(
                ErrorKind.INSUFFICIENT_FUNDS,
                f"Insufficient funds: available {format_amount(account.balance)}, "
                f"requested {format_amount(value)}"
            )

        account.balance -= value
        return Result.success(account.copy())

    def deposit(self, account_id: str, amount) -> Result[Account]:
        """Credit exactly `amount` to an account. No upper bound."""
        checked = validate_amount(amount)
        if not checked.ok:
            return checked
        value = checked.value

        account = self._accounts.get(account_id)
        if account is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Account {account_id} not found")

        credited = _credited_balance(account, value)
        if not credited.ok:
            return credited

        account.balance = credited.value
        return Result.success(account.copy())

    def transfer(self, source_id: str, destination_id: str, amount) -> Result[Account]:
        """
        Move `amount` from source to destination.

        Either both balances change or neither does. A transfer from an
        account to itself is rejected with SAME_ACCOUNT before anything is
        touched.

        Returns:
            Result carrying a copy of the debited source account
        """
        checked = validate_amount(amount)
        if not checked.ok:
            return checked
        value = checked.value

        source = self._accounts.get(source_id)
        if source is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Account {source_id} not found")
        destination = self._accounts.get(destination_id)
        if destination is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Recipient {destination_id} not found")
        if source is destination:
            return Result.failure(ErrorKind.SAME_ACCOUNT, "Cannot transfer to the same account")
        if source.balance < value:
            return Result.failure(
                ErrorKind.INSUFFICIENT_FUNDS,
                f"Insufficient funds: available {format_amount(source.balance)}, "
                f"requested {format_amount(value)}"
            )

        credited = _credited_balance(destination, value)
        if not credited.ok:
            return credited

        # Every check passed; neither assignment below can fail
        source.balance -= value
        destination.balance = credited.value
        return Result.success(source.copy())

    def add_account(self, account_id: str, pin: str, name: str, initial_balance=ZERO) -> Result[Account]:
        """Register a new account"""
        account_id = (account_id or "").strip()
        pin = (pin or "").strip()
        if not account_id or not pin:
            return Result.failure(ErrorKind.INVALID_ACCOUNT, "Account id and pin are required")
        for field_name, value in (("id", account_id), ("pin", pin)):
            if breaks_record(value):
                return Result.failure(
                    ErrorKind.INVALID_ACCOUNT,
                    f"Account {field_name} cannot contain commas, '|' or line breaks"
                )

        try:
            balance = to_amount(initial_balance)
        except ValueError as e:
            return Result.failure(ErrorKind.INVALID_AMOUNT, str(e))
        if balance < ZERO:
            return Result.failure(ErrorKind.INVALID_AMOUNT, "Initial balance cannot be negative")

        if account_id in self._accounts:
            return Result.failure(ErrorKind.DUPLICATE_ID, f"Account {account_id} already exists")

        account = Account(id=account_id, pin=pin, name=record_safe_name(name or ""), balance=balance)
        self._accounts[account_id] = account
        return Result.success(account.copy())

    def remove_account(self, account_id: str) -> Result[Account]:
        """Delete an account, returning its last state"""
        account = self._accounts.pop(account_id, None)
        if account is None:
            return Result.failure(ErrorKind.NOT_FOUND, f"Account {account_id} not found")
        return Result.success(account)

    def list_accounts(self) -> List[Account]:
        """Point-in-time copies of every account, in registry order"""
        return [account.copy() for account in self._accounts.values()]
