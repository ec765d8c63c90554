"""
Transaction Strategies Module

Each strategy validates, mutates and records one kind of money movement.
execute() either completes the movement and returns the new Transaction, or
leaves every account untouched and returns None. can_execute() never mutates
and predicts execute() exactly for unchanged state.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .accounts import Account
from .currency import AmountLike, Currency, format_plain, to_decimal
from .errors import UnsupportedOperationError
from .transactions import Transaction, TransactionType


def generate_transaction_id() -> str:
    return str(uuid.uuid4())


class TransactionStrategy(ABC):
    """Common interface for deposit, withdrawal and transfer"""

    transaction_type: TransactionType

    def __init__(
        self,
        id_factory: Callable[[], str] = generate_transaction_id,
        currency: Currency = Currency.EUR
    ):
        self._id_factory = id_factory
        self.currency = currency

    @property
    def type_name(self) -> str:
        return self.transaction_type.code

    @abstractmethod
    def execute(self, account: Optional[Account], amount: AmountLike) -> Optional[Transaction]:
        """Run a single-account movement; None when it is not executed"""

    def execute_transfer(
        self,
        from_account: Optional[Account],
        to_account: Optional[Account],
        amount: AmountLike
    ) -> Optional[Transaction]:
        """Run a two-account movement; only TransferStrategy supports it"""
        raise UnsupportedOperationError(
            f"{self.type_name} does not support transfers between two accounts"
        )

    @abstractmethod
    def can_execute(self, account: Optional[Account], amount: AmountLike) -> bool:
        """Side-effect free pre-flight check for execute()"""

    def _new_transaction(self, amount, from_account: Account, to_account: Account,
                         description: str) -> Transaction:
        # Called right after the mutation, while the account locks are still held
        return Transaction(
            id=self._id_factory(),
            transaction_type=self.transaction_type,
            amount=amount,
            from_account=from_account,
            to_account=to_account,
            description=description,
            from_balance_after=from_account.balance,
            to_balance_after=to_account.balance
        )


class DepositStrategy(TransactionStrategy):
    """Credit a single account"""

    transaction_type = TransactionType.DEPOSIT

    def execute(self, account, amount):
        if not self.can_execute(account, amount):
            return None

        value = to_decimal(amount)
        if not account.credit(value):
            return None

        transaction = self._new_transaction(
            value, account, account,
            f"Deposit of {format_plain(value, self.currency)}"
        )
        account.add_transaction(transaction)
        return transaction

    def can_execute(self, account, amount) -> bool:
        return account is not None and account.can_credit(amount)


class WithdrawStrategy(TransactionStrategy):
    """Debit a single account when it holds enough funds"""

    transaction_type = TransactionType.WITHDRAWAL

    def execute(self, account, amount):
        if not self.can_execute(account, amount):
            return None

        value = to_decimal(amount)
        if not account.debit(value):
            return None

        transaction = self._new_transaction(
            value, account, account,
            f"Withdrawal of {format_plain(value, self.currency)}"
        )
        account.add_transaction(transaction)
        return transaction

    def can_execute(self, account, amount) -> bool:
        return account is not None and account.can_debit(amount)


class TransferStrategy(TransactionStrategy):
    """
    Move funds between two different accounts

    Debit and credit are two independent single-account mutations. If the
    credit is refused after the debit succeeded, the source is re-credited
    before returning None, so a failed transfer leaves both accounts as they
    were. Callers running concurrently must hold both account locks for the
    whole call.
    """

    transaction_type = TransactionType.TRANSFER

    def execute(self, account, amount):
        raise UnsupportedOperationError(
            "Transfers need two accounts; use execute_transfer(from_account, to_account, amount)"
        )

    def execute_transfer(self, from_account, to_account, amount):
        if not self.can_transfer(from_account, to_account, amount):
            return None

        value = to_decimal(amount)
        if not from_account.debit(value):
            return None

        if not to_account.credit(value):
            # Compensate the debit
            from_account.credit(value)
            return None

        transaction = self._new_transaction(
            value, from_account, to_account,
            f"Transfer from {from_account.id} to {to_account.id}"
        )
        from_account.add_transaction(transaction)
        to_account.add_transaction(transaction)
        return transaction

    def can_execute(self, account, amount) -> bool:
        # Single-account form never applies to transfers
        return False

    def can_transfer(
        self,
        from_account: Optional[Account],
        to_account: Optional[Account],
        amount: AmountLike
    ) -> bool:
        value = to_decimal(amount)
        return (
            from_account is not None
            and to_account is not None
            and from_account != to_account
            and from_account.can_debit(value)
            and to_account.can_credit(value)
        )
