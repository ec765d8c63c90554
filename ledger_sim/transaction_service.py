"""
Transaction Service Module

Single entry point for deposits, withdrawals and transfers. Runs the matching
strategy while holding the affected account locks, then notifies observers if
and only if a transaction was produced.
"""

from contextlib import ExitStack, contextmanager
from typing import Optional, Tuple

from .accounts import Account
from .currency import AmountLike, Currency
from .events import ObserverRegistry, TransactionObserver
from .logging_config import get_logger, log_action
from .strategies import (
    DepositStrategy, TransferStrategy, WithdrawStrategy, generate_transaction_id
)
from .transactions import Transaction


@contextmanager
def account_locks(*accounts: Optional[Account]):
    """
    Hold the locks of several accounts

    Locks are taken in ascending id order so two transfers over the same pair
    of accounts can never deadlock. None entries and repeated accounts are
    skipped.
    """
    unique = {}
    for account in accounts:
        if account is not None:
            unique.setdefault(account.id, account)

    with ExitStack() as stack:
        for account_id in sorted(unique):
            stack.enter_context(unique[account_id].lock)
        yield


class TransactionService:
    """
    Executes transaction strategies and dispatches completed transactions
    to registered observers
    """

    def __init__(self, currency: Currency = Currency.EUR, id_factory=generate_transaction_id):
        self.deposit_strategy = DepositStrategy(id_factory, currency)
        self.withdraw_strategy = WithdrawStrategy(id_factory, currency)
        self.transfer_strategy = TransferStrategy(id_factory, currency)
        self._registry = ObserverRegistry()
        self.logger = get_logger("ledger_sim.transactions")

    # Observers

    def add_observer(self, observer: Optional[TransactionObserver]) -> None:
        """Register an observer; None and duplicates are ignored"""
        self._registry.add(observer)

    def remove_observer(self, observer: TransactionObserver) -> None:
        self._registry.remove(observer)

    @property
    def observers(self) -> Tuple[TransactionObserver, ...]:
        return self._registry.snapshot()

    @property
    def observer_count(self) -> int:
        return len(self._registry)

    # Operations

    def deposit(self, account: Optional[Account], amount: AmountLike) -> Optional[Transaction]:
        """
        Credit an account

        Returns:
            The completed Transaction, or None if the deposit was not executed
        """
        with account_locks(account):
            transaction = self.deposit_strategy.execute(account, amount)
        return self._complete("deposit", transaction, amount, account)

    def withdraw(self, account: Optional[Account], amount: AmountLike) -> Optional[Transaction]:
        """
        Debit an account

        Returns:
            The completed Transaction, or None if the withdrawal was not executed
        """
        with account_locks(account):
            transaction = self.withdraw_strategy.execute(account, amount)
        return self._complete("withdraw", transaction, amount, account)

    def transfer(
        self,
        from_account: Optional[Account],
        to_account: Optional[Account],
        amount: AmountLike
    ) -> Optional[Transaction]:
        """
        Move funds between two different accounts

        Returns:
            The completed Transaction, or None if the transfer was not executed
        """
        with account_locks(from_account, to_account):
            transaction = self.transfer_strategy.execute_transfer(from_account, to_account, amount)
        return self._complete("transfer", transaction, amount, from_account, to_account)

    # Pre-flight checks

    def can_deposit(self, account: Optional[Account], amount: AmountLike) -> bool:
        return self.deposit_strategy.can_execute(account, amount)

    def can_withdraw(self, account: Optional[Account], amount: AmountLike) -> bool:
        return self.withdraw_strategy.can_execute(account, amount)

    def can_transfer(
        self,
        from_account: Optional[Account],
        to_account: Optional[Account],
        amount: AmountLike
    ) -> bool:
        return self.transfer_strategy.can_transfer(from_account, to_account, amount)

    def _complete(self, action: str, transaction: Optional[Transaction],
                  amount: AmountLike, *accounts: Optional[Account]) -> Optional[Transaction]:
        account_ids = [a.id if a is not None else None for a in accounts]

        if transaction is None:
            log_action(
                self.logger, "info", f"{action.capitalize()} not executed",
                action=action, resource=f"account:{account_ids[0]}",
                extra={"amount": str(amount), "accounts": account_ids}
            )
            return None

        log_action(
            self.logger, "info", f"{action.capitalize()} executed",
            user_id=transaction.from_account.owner.id, action=action,
            resource=f"transaction:{transaction.id}",
            extra={"amount": str(transaction.amount), "accounts": account_ids}
        )

        self._registry.notify(transaction)
        return transaction
