"""
Transaction Records Module

A Transaction is the immutable record of one completed money movement. It is
built only as the last step of a successful strategy execution and is shared,
read-only, by the history of every account it touched.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from .accounts import Account
from .currency import Currency, format_amount


class TransactionType(Enum):
    """Kinds of money movement"""
    DEPOSIT = ("DEPOSIT", "Deposit")
    WITHDRAWAL = ("WITHDRAWAL", "Withdrawal")
    TRANSFER = ("TRANSFER", "Transfer")

    def __init__(self, code: str, label: str):
        self.code = code
        self.label = label


@dataclass(frozen=True, eq=False)
class Transaction:
    """
    Completed deposit, withdrawal or transfer

    For deposits and withdrawals from_account and to_account are the same
    account. from_balance_after and to_balance_after hold the balances right
    after the movement; they are None on records built outside a strategy.
    Equality and hashing use the transaction id only.
    """
    id: str
    transaction_type: TransactionType
    amount: Decimal
    from_account: Account
    to_account: Account
    description: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    from_balance_after: Optional[Decimal] = None
    to_balance_after: Optional[Decimal] = None

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))

        if self.amount <= 0:
            raise ValueError("Transaction amount must be positive")

    @property
    def is_transfer(self) -> bool:
        """True for a transfer between two different accounts"""
        return (
            self.transaction_type == TransactionType.TRANSFER
            and self.from_account != self.to_account
        )

    def formatted_timestamp(self, date_format: str = "%Y-%m-%d %H:%M:%S") -> str:
        return self.timestamp.strftime(date_format)

    def render(self, currency: Currency = Currency.EUR,
               date_format: str = "%Y-%m-%d %H:%M:%S") -> str:
        """One-line human readable form used by history listings"""
        parts = [f"{self.formatted_timestamp(date_format)} - {self.transaction_type.label}: "]
        if self.is_transfer:
            parts.append(f"{self.from_account.id} -> {self.to_account.id} ")
        parts.append(format_amount(self.amount, currency))
        if self.description:
            parts.append(f" ({self.description})")
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
