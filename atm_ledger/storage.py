"""
Storage Backend Module

Provides the abstract account snapshot interface and implementations for
in-memory (testing) and line-oriented file persistence. Every save replaces
the whole snapshot; there is no delta format.

File format, one account per line:

    id,pin,name,balance

with the balance written with exactly two fractional digits.
"""

from abc import ABC, abstractmethod
from contextlib import suppress
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union
import os
import tempfile

from .accounts import Account, breaks_record, record_safe_name
from .currency import ZERO, format_amount, to_amount
from .logging_config import get_logger
from .results import ErrorKind, Result


logger = get_logger("atm_ledger.storage")

FIELD_COUNT = 4

# Demo dataset written the first time the ledger starts without a snapshot
SEED_ACCOUNTS = (
    Account(id="1001", pin="1234", name="vignesh reddy", balance=Decimal("15000.00")),
    Account(id="1002", pin="2345", name="tripuresh", balance=Decimal("30000.00")),
    Account(id="1003", pin="3456", name="yuva kishore", balance=Decimal("10000.00")),
)


def serialize_account(account: Account) -> str:
    """Render one account as a record line (without the line terminator)"""
    name = record_safe_name(account.name)
    return f"{account.id},{account.pin},{name},{format_amount(account.balance)}"


def serialize_accounts(accounts: Iterable[Account]) -> str:
    return "".join(serialize_account(account) + "\n" for account in accounts)


def parse_account_line(line: str, line_number: int = 0, source: str = "") -> Optional[Account]:
    """
    Parse one record line.

    Returns None for blank or malformed lines; malformed ones are logged.
    """
    line = line.strip()
    if not line:
        return None

    parts = [part.strip() for part in line.split(",")]
    if len(parts) != FIELD_COUNT:
        logger.warning(
            f"Skipping account record {source}:{line_number}: "
            f"expected {FIELD_COUNT} fields, got {len(parts)}"
        )
        return None

    account_id, pin, name, raw_balance = parts
    try:
        balance = to_amount(Decimal(raw_balance))
    except (InvalidOperation, ValueError):
        logger.warning(f"Skipping account record {source}:{line_number}: bad balance {raw_balance!r}")
        return None
    if not account_id or balance < ZERO:
        logger.warning(f"Skipping account record {source}:{line_number}: invalid id or negative balance")
        return None
    if breaks_record(account_id) or breaks_record(pin):
        logger.warning(f"Skipping account record {source}:{line_number}: id or pin contains '|' or a line break")
        return None

    return Account(id=account_id, pin=pin, name=name, balance=balance)


def parse_accounts(text: str, source: str = "") -> List[Account]:
    """
    Parse a whole snapshot. A repeated id replaces the earlier row.

    Records are terminated by "\\n" only; other Unicode line boundaries are
    ordinary characters inside a field.
    """
    accounts: Dict[str, Account] = {}
    for number, line in enumerate(text.split("\n"), start=1):
        account = parse_account_line(line, number, source)
        if account is not None:
            accounts[account.id] = account
    return list(accounts.values())


class AccountStorage(ABC):
    """Abstract interface for account snapshot backends"""

    @abstractmethod
    def exists(self) -> bool:
        """Check whether a snapshot has been written"""
        pass

    @abstractmethod
    def read_text(self) -> str:
        """Read the raw snapshot"""
        pass

    @abstractmethod
    def write_text(self, data: str) -> None:
        """Replace the raw snapshot atomically"""
        pass

    def load(self) -> Result[List[Account]]:
        """
        Load every account, seeding the demo dataset when no snapshot exists
        """
        if not self.exists():
            seeded = [account.copy() for account in SEED_ACCOUNTS]
            saved = self.save(seeded)
            if not saved.ok:
                return saved
            logger.info(f"Seeded {len(seeded)} default accounts")
            return Result.success(seeded)

        try:
            text = self.read_text()
        except OSError as e:
            logger.error(f"Failed to read accounts: {e}")
            return Result.failure(ErrorKind.IO_FAILURE, f"Failed to read accounts: {e}")
        return Result.success(parse_accounts(text, source=self.describe()))

    def save(self, accounts: Iterable[Account]) -> Result[None]:
        """Replace the snapshot with `accounts`"""
        data = serialize_accounts(accounts)
        try:
            self.write_text(data)
        except OSError as e:
            logger.error(f"Failed to save accounts: {e}")
            return Result.failure(ErrorKind.IO_FAILURE, f"Failed to save accounts: {e}")
        return Result.success()

    def describe(self) -> str:
        return type(self).__name__


class InMemoryAccountStorage(AccountStorage):
    """In-memory snapshot storage for testing"""

    def __init__(self, data: Optional[str] = None):
        self._data = data

    def exists(self) -> bool:
        return self._data is not None

    def read_text(self) -> str:
        return self._data or ""

    def write_text(self, data: str) -> None:
        self._data = data

    @property
    def data(self) -> Optional[str]:
        return self._data


class FileAccountStorage(AccountStorage):
    """Line-oriented file storage. Writes go to a temp file then replace the target."""

    def __init__(self, path: Union[str, Path] = "accounts.txt"):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read_text(self) -> str:
        with open(self.path, "r", encoding="utf-8") as handle:
            return handle.read()

    def write_text(self, data: str) -> None:
        if not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            with suppress(OSError):
                os.unlink(tmp_path)
            raise

    def describe(self) -> str:
        return str(self.path)
