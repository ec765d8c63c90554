"""
Audit Trail Module

Transaction observer that keeps a hash-chained audit log with SHA-256 for
tamper detection, optionally mirrored line by line to a file.
"""

import hashlib
import json
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .currency import Currency, format_amount
from .events import TransactionObserver
from .logging_config import get_logger
from .transactions import Transaction


@dataclass(frozen=True)
class AuditEntry:
    """
    Immutable audit record for one transaction
    """
    id: str
    logged_at: datetime
    transaction_id: str
    transaction_type: str
    amount: str
    from_account_id: str
    to_account_id: str
    is_transfer: bool
    previous_hash: str
    current_hash: str

    def hash_payload(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'logged_at': self.logged_at.isoformat(),
            'transaction_id': self.transaction_id,
            'transaction_type': self.transaction_type,
            'amount': self.amount,
            'from_account_id': self.from_account_id,
            'to_account_id': self.to_account_id,
            'is_transfer': self.is_transfer,
            'previous_hash': self.previous_hash,
        }

    def calculate_hash(self) -> str:
        """
        Calculate SHA-256 hash of this entry
        Hash includes all fields except current_hash
        """
        json_data = json.dumps(self.hash_payload(), sort_keys=True, separators=(',', ':'))
        return hashlib.sha256(json_data.encode('utf-8')).hexdigest()

    def verify_hash(self) -> bool:
        return self.current_hash == self.calculate_hash()


class AuditLogger(TransactionObserver):
    """
    Records every completed transaction in an append-only, hash-chained log
    """

    NAME = "AuditLogger"

    def __init__(
        self,
        log_file: Optional[Union[str, Path]] = None,
        currency: Currency = Currency.EUR,
        date_format: str = "%Y-%m-%d %H:%M:%S"
    ):
        self.log_file = Path(log_file) if log_file else None
        self.write_to_file = self.log_file is not None
        self.currency = currency
        self.date_format = date_format
        self._entries: List[AuditEntry] = []
        self._lines: List[str] = []
        self._lock = threading.Lock()
        self.logger = get_logger("ledger_sim.audit")

    def on_transaction(self, transaction: Transaction) -> None:
        with self._lock:
            previous_hash = self._entries[-1].current_hash if self._entries else ""
            entry = self._build_entry(transaction, previous_hash)
            line = self.format_entry(entry)
            self._entries.append(entry)
            self._lines.append(line)

        self.logger.info(f"[AUDIT] {line}")

        if self.write_to_file:
            self._append_to_file(line)

    def name(self) -> str:
        return self.NAME

    def _build_entry(self, transaction: Transaction, previous_hash: str) -> AuditEntry:
        draft = AuditEntry(
            id=str(uuid.uuid4()),
            logged_at=datetime.now(timezone.utc),
            transaction_id=transaction.id,
            transaction_type=transaction.transaction_type.code,
            amount=str(transaction.amount),
            from_account_id=transaction.from_account.id,
            to_account_id=transaction.to_account.id,
            is_transfer=transaction.is_transfer,
            previous_hash=previous_hash,
            current_hash=""
        )
        return replace(draft, current_hash=draft.calculate_hash())

    def format_entry(self, entry: AuditEntry) -> str:
        """Format an entry as a single audit line"""
        line = (
            f"[{entry.logged_at.strftime(self.date_format)}] "
            f"TX_ID: {entry.transaction_id} | "
            f"TYPE: {entry.transaction_type} | "
            f"AMOUNT: {format_amount(entry.amount, self.currency)} | "
        )
        if entry.is_transfer:
            line += f"FROM: {entry.from_account_id} | TO: {entry.to_account_id}"
        else:
            line += f"ACCOUNT: {entry.from_account_id}"
        return line

    def _append_to_file(self, line: str) -> None:
        try:
            with open(self.log_file, "a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        except OSError as e:
            # The in-memory log is authoritative; a broken file must not fail the observer
            self.logger.error(f"Failed to write audit log file {self.log_file}: {e}")

    def set_write_to_file(self, enabled: bool) -> None:
        """Toggle file mirroring; only effective when a log file is configured"""
        self.write_to_file = enabled and self.log_file is not None

    @property
    def entries(self) -> List[AuditEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def log_lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def count(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._lines.clear()

    def verify_integrity(self) -> Dict[str, Any]:
        """
        Verify the integrity of the audit chain

        Returns:
            Dictionary with integrity check results
        """
        result = {
            'valid': True,
            'total_entries': 0,
            'hash_errors': [],
            'chain_breaks': []
        }

        entries = self.entries
        result['total_entries'] = len(entries)

        previous_hash = ""
        for position, entry in enumerate(entries):
            if not entry.verify_hash():
                result['valid'] = False
                result['hash_errors'].append({
                    'entry_id': entry.id,
                    'position': position,
                    'expected_hash': entry.calculate_hash(),
                    'actual_hash': entry.current_hash
                })
            if entry.previous_hash != previous_hash:
                result['valid'] = False
                result['chain_breaks'].append({
                    'entry_id': entry.id,
                    'position': position,
                    'expected_previous_hash': previous_hash,
                    'actual_previous_hash': entry.previous_hash
                })
            previous_hash = entry.current_hash

        return result
