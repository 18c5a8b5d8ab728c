"""
Ledger Facade Module

Single entry point for every ledger operation. Each mutating operation runs

    Validate -> Mutate -> Persist -> Log

under one re-entrant lock. A failed mutation aborts before anything is
written. A withdrawal that took cash from the pool but could not debit the
account gives the cash back before it reports the failure.

Persist or Log failing after the mutation leaves the in-memory change in
place (memory is authoritative while the process runs) and reports
IO_FAILURE: the change happened but may not be durable.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import threading

from .accounts import Account, AccountStore, breaks_record, validate_amount
from .audit import AuditLog, OperationKind, TransactionRecord
from .cash_pool import CashPool
from .config import LedgerConfig, get_config
from .currency import ZERO, format_amount
from .logging_config import get_logger, log_action
from .results import ErrorKind, Result
from .storage import AccountStorage, FileAccountStorage


ATM_TARGET = "ATM"


def _check_actor(actor: str) -> Result[str]:
    """Actors are written as one field of a log line"""
    if not actor.strip() or breaks_record(actor):
        return Result.failure(
            ErrorKind.INVALID_ACCOUNT,
            f"Actor {actor!r} must be non-empty and cannot contain commas, '|' or line breaks"
        )
    return Result.success(actor)


class Ledger:
    """
    Composes the account store, cash pool, snapshot storage and audit log
    """

    def __init__(
        self,
        store: AccountStore,
        cash_pool: CashPool,
        storage: AccountStorage,
        audit_log: AuditLog,
        admin_actor: str = "ADMIN",
        technician_actor: str = "TECH"
    ):
        for role, name in (("admin", admin_actor), ("technician", technician_actor)):
            if not _check_actor(name).ok:
                raise ValueError(f"Invalid {role} actor name {name!r}")
        self.store = store
        self.cash_pool = cash_pool
        self.storage = storage
        self.audit_log = audit_log
        self.admin_actor = admin_actor
        self.technician_actor = technician_actor
        self._lock = threading.RLock()
        self.logger = get_logger("atm_ledger.ledger")

    @classmethod
    def open(cls, config: Optional[LedgerConfig] = None) -> 'Ledger':
        """
        Build a ledger from configuration and load the account snapshot

        Raises:
            LedgerError: If the snapshot cannot be read or seeded
        """
        config = config or get_config()
        storage = FileAccountStorage(config.accounts_file)
        accounts = storage.load().unwrap()

        ledger = cls(
            store=AccountStore(accounts),
            cash_pool=CashPool(config.initial_cash_reserve_amount),
            storage=storage,
            audit_log=AuditLog(config.transactions_file),
            admin_actor=config.admin_actor,
            technician_actor=config.technician_actor
        )
        ledger.logger.info(
            f"Ledger opened with {len(accounts)} accounts, "
            f"cash reserve {format_amount(ledger.cash_pool.reserve())}"
        )
        return ledger

    # ------------------------------------------------------------------
    # Queries

    def authenticate(self, account_id: str, pin: str) -> Result[Account]:
        with self._lock:
            result = self.store.authenticate(account_id, pin)
        if not result.ok:
            log_action(
                self.logger, "warning", "Authentication failed",
                action="authenticate", resource=f"account:{account_id}"
            )
        return result

    def get_account(self, account_id: str) -> Result[Account]:
        with self._lock:
            return self.store.lookup(account_id)

    def list_accounts(self) -> List[Account]:
        with self._lock:
            return self.store.list_accounts()

    def cash_reserve(self) -> Decimal:
        with self._lock:
            return self.cash_pool.reserve()

    def read_log(self) -> Result[List[str]]:
        with self._lock:
            return self.audit_log.read_all()

    def read_records(self) -> Result[List[TransactionRecord]]:
        with self._lock:
            return self.audit_log.read_records()

    def verify_log(self) -> Result[Dict[str, Any]]:
        with self._lock:
            return self.audit_log.verify_integrity()

    # ------------------------------------------------------------------
    # Customer operations

    def withdraw(self, account_id: str, amount) -> Result[Account]:
        """Dispense cash and debit the account"""
        with self._lock:
            checked = validate_amount(amount)
            if not checked.ok:
                return self._reject("withdraw", account_id, checked)
            value = checked.value

            if account_id not in self.store:
                return self._reject(
                    "withdraw", account_id,
                    Result.failure(ErrorKind.NOT_FOUND, f"Account {account_id} not found")
                )

            dispensed = self.cash_pool.try_dispense(value)
            if not dispensed.ok:
                return self._reject("withdraw", account_id, dispensed)

            debited = self.store.withdraw(account_id, value)
            if not debited.ok:
                self.cash_pool.restore(value)
                log_action(
                    self.logger, "info", "Returned reserved cash to the pool",
                    user_id=account_id, action="compensate_withdraw",
                    resource=f"account:{account_id}",
                    extra={"amount": format_amount(value)}
                )
                return self._reject("withdraw", account_id, debited)

            return self._commit(
                debited, account_id, OperationKind.WITHDRAW, account_id, value,
                f"Withdrawal successful. Dispensed {format_amount(value)}"
            )

    def deposit(self, account_id: str, amount) -> Result[Account]:
        with self._lock:
            credited = self.store.deposit(account_id, amount)
            if not credited.ok:
                return self._reject("deposit", account_id, credited)

            value = validate_amount(amount).value
            return self._commit(
                credited, account_id, OperationKind.DEPOSIT, account_id, value,
                f"Deposit successful. {format_amount(value)} added"
            )

    def transfer(self, source_id: str, destination_id: str, amount) -> Result[Account]:
        """
        Move funds between two accounts.

        The destination is looked up under the same lock as the mutation, so
        an account removed concurrently shows up as NOT_FOUND.
        """
        with self._lock:
            moved = self.store.transfer(source_id, destination_id, amount)
            if not moved.ok:
                return self._reject("transfer", source_id, moved)

            value = validate_amount(amount).value
            return self._commit(
                moved, source_id, OperationKind.TRANSFER, destination_id, value,
                f"Transferred {format_amount(value)} to {destination_id}"
            )

    # ------------------------------------------------------------------
    # Administrative operations. Authorization is decided by the caller.

    def add_account(self, account_id: str, pin: str, name: str,
                    initial_balance=ZERO, actor: Optional[str] = None) -> Result[Account]:
        actor = actor or self.admin_actor
        with self._lock:
            checked = _check_actor(actor)
            if not checked.ok:
                return self._reject("add_account", actor, checked)

            added = self.store.add_account(account_id, pin, name, initial_balance)
            if not added.ok:
                return self._reject("add_account", actor, added)

            account = added.value
            return self._commit(
                added, actor, OperationKind.ADD_ACCOUNT, account.id, account.balance,
                f"Added account {account.id}"
            )

    def remove_account(self, account_id: str, actor: Optional[str] = None) -> Result[Account]:
        actor = actor or self.admin_actor
        with self._lock:
            checked = _check_actor(actor)
            if not checked.ok:
                return self._reject("remove_account", actor, checked)

            removed = self.store.remove_account(account_id)
            if not removed.ok:
                return self._reject("remove_account", actor, removed)

            return self._commit(
                removed, actor, OperationKind.REMOVE_ACCOUNT, account_id, ZERO,
                f"Removed account {account_id}"
            )

    def refill_cash(self, amount, actor: Optional[str] = None) -> Result[Decimal]:
        actor = actor or self.technician_actor
        with self._lock:
            checked = _check_actor(actor)
            if not checked.ok:
                return self._reject("refill_cash", actor, checked)

            refilled = self.cash_pool.refill(amount)
            if not refilled.ok:
                return self._reject("refill_cash", actor, refilled)

            value = validate_amount(amount).value
            return self._commit(
                refilled, actor, OperationKind.REFILL_ATM, ATM_TARGET, value,
                f"Refilled ATM by {format_amount(value)}. "
                f"ATM cash: {format_amount(refilled.value)}"
            )

    # ------------------------------------------------------------------
    # Protocol steps

    def _commit(self, outcome: Result, actor: str, kind: OperationKind,
                target_id: str, amount: Decimal, message: str) -> Result:
        """Persist the snapshot, then append the log line. Caller holds the lock."""
        saved = self.storage.save(self.store.list_accounts())
        if not saved.ok:
            return self._durability_failure(actor, kind, target_id, amount, saved)

        logged = self.audit_log.append(actor, kind, target_id, amount)
        if not logged.ok:
            return self._durability_failure(actor, kind, target_id, amount, logged)

        log_action(
            self.logger, "info", message,
            user_id=actor, action=kind.value.lower(), resource=f"account:{target_id}",
            extra={"amount": format_amount(amount)}
        )
        return Result.success(outcome.value, message)

    def _durability_failure(self, actor: str, kind: OperationKind, target_id: str,
                            amount: Decimal, failed: Result) -> Result:
        message = (
            f"{kind.value} applied in memory but may not be durable; "
            f"retry persistence. Cause: {failed.message}"
        )
        log_action(
            self.logger, "error", message,
            user_id=actor, action=kind.value.lower(), resource=f"account:{target_id}",
            extra={"amount": format_amount(amount)}
        )
        return Result.failure(ErrorKind.IO_FAILURE, message)

    def _reject(self, action: str, actor: str, failed: Result) -> Result:
        log_action(
            self.logger, "warning", f"{action} rejected: {failed.message}",
            user_id=actor, action=action,
            extra={"error": failed.error.value}
        )
        return failed

    def persist(self) -> Result[None]:
        """Write the current snapshot again, e.g. after an IO_FAILURE"""
        with self._lock:
            return self.storage.save(self.store.list_accounts())


