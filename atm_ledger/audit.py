"""
Audit Log Module

Append-only transaction log. Every state change in the ledger is recorded
here as one greppable line:

    2026-01-31 09:15:02 | 1001 | WITHDRAW | target:1001 | 500.00

Lines are never rewritten. Append order is the order in which operations
were committed.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union
import os

from .currency import format_amount, to_amount
from .logging_config import get_logger
from .results import ErrorKind, Result


logger = get_logger("atm_ledger.audit")

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
FIELD_SEPARATOR = " | "
TARGET_PREFIX = "target:"


class OperationKind(Enum):
    """Kinds of state-changing operations recorded in the log"""
    WITHDRAW = "WITHDRAW"
    DEPOSIT = "DEPOSIT"
    TRANSFER = "TRANSFER"
    ADD_ACCOUNT = "ADD_ACCOUNT"
    REMOVE_ACCOUNT = "REMOVE_ACCOUNT"
    REFILL_ATM = "REFILL_ATM"


@dataclass(frozen=True)
class TransactionRecord:
    """One immutable log entry"""
    timestamp: datetime
    actor: str
    kind: OperationKind
    target_id: str
    amount: Decimal

    def to_line(self) -> str:
        return FIELD_SEPARATOR.join([
            self.timestamp.strftime(TIMESTAMP_FORMAT),
            self.actor,
            self.kind.value,
            f"{TARGET_PREFIX}{self.target_id}",
            format_amount(self.amount),
        ])

    @classmethod
    def from_line(cls, line: str) -> 'TransactionRecord':
        """
        Parse a log line

        Raises:
            ValueError: If the line does not have the log line shape
        """
        parts = line.rstrip("\r\n").split(FIELD_SEPARATOR)
        if len(parts) != 5:
            raise ValueError(f"Expected 5 fields, got {len(parts)}")

        raw_timestamp, actor, raw_kind, raw_target, raw_amount = parts
        if not raw_target.startswith(TARGET_PREFIX):
            raise ValueError(f"Target field must start with '{TARGET_PREFIX}'")

        try:
            amount = to_amount(Decimal(raw_amount))
        except InvalidOperation:
            raise ValueError(f"Bad amount {raw_amount!r}")

        return cls(
            timestamp=datetime.strptime(raw_timestamp, TIMESTAMP_FORMAT),
            actor=actor,
            kind=OperationKind(raw_kind),
            target_id=raw_target[len(TARGET_PREFIX):],
            amount=amount,
        )


class AuditLog:
    """
    File-backed append-only log of committed operations
    """

    def __init__(self, path: Union[str, Path] = "transactions.txt",
                 clock: Optional[Callable[[], datetime]] = None):
        self.path = Path(path)
        self._clock = clock or datetime.now

    def append(self, actor: str, kind: OperationKind, target_id: str, amount) -> Result[TransactionRecord]:
        """
        Append one record and force it to disk

        Args:
            actor: Account id or administrative role performing the operation
            kind: Operation kind
            target_id: Account (or "ATM") the operation applied to
            amount: Amount moved, recorded with two fractional digits

        Returns:
            Result carrying the written TransactionRecord
        """
        record = TransactionRecord(
            timestamp=self._clock().replace(microsecond=0),
            actor=actor,
            kind=kind,
            target_id=target_id,
            amount=to_amount(amount),
        )
        try:
            with open(self.path, "a", encoding="utf-8", newline="\n") as handle:
                handle.write(record.to_line() + "\n")
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as e:
            logger.error(f"Failed to append to transaction log {self.path}: {e}")
            return Result.failure(ErrorKind.IO_FAILURE, f"Failed to write transaction log: {e}")
        return Result.success(record)

    def read_all(self) -> Result[List[str]]:
        """
        Raw log lines in append order. A missing log is an empty log.

        Only "\\n" ends a line, matching what append writes.
        """
        if not self.path.exists():
            return Result.success([])
        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                text = handle.read()
        except OSError as e:
            logger.error(f"Failed to read transaction log {self.path}: {e}")
            return Result.failure(ErrorKind.IO_FAILURE, f"Failed to read transaction log: {e}")

        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return Result.success(lines)

    def read_records(self) -> Result[List[TransactionRecord]]:
        """Parsed log entries; lines that do not parse are skipped"""
        lines = self.read_all()
        if not lines.ok:
            return lines

        records = []
        for number, line in enumerate(lines.value, start=1):
            try:
                records.append(TransactionRecord.from_line(line))
            except ValueError as e:
                logger.warning(f"Skipping transaction log line {number}: {e}")
        return Result.success(records)

    def verify_integrity(self) -> Result[Dict[str, Any]]:
        """
        Check that every line parses and that timestamps never go backwards

        Returns:
            Result carrying a dictionary with the check results
        """
        lines = self.read_all()
        if not lines.ok:
            return lines

        report: Dict[str, Any] = {
            'valid': True,
            'total_lines': len(lines.value),
            'malformed_lines': [],
            'out_of_order': [],
            'details': {}
        }

        records = []
        previous: Optional[TransactionRecord] = None
        for number, line in enumerate(lines.value, start=1):
            try:
                record = TransactionRecord.from_line(line)
            except ValueError as e:
                report['valid'] = False
                report['malformed_lines'].append({'line_number': number, 'error': str(e)})
                continue

            if previous is not None and record.timestamp < previous.timestamp:
                report['valid'] = False
                report['out_of_order'].append({
                    'line_number': number,
                    'timestamp': record.timestamp.strftime(TIMESTAMP_FORMAT),
                    'previous_timestamp': previous.timestamp.strftime(TIMESTAMP_FORMAT)
                })
            previous = record
            records.append(record)

        report['details'] = {
            'first_event_time': records[0].timestamp.strftime(TIMESTAMP_FORMAT) if records else None,
            'last_event_time': records[-1].timestamp.strftime(TIMESTAMP_FORMAT) if records else None,
            'operation_kinds': sorted({r.kind.value for r in records})
        }
        return Result.success(report)
