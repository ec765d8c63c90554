"""
Ledger Module

Top-level facade of the simulator. Owns the user and account registries,
resolves account ids, applies configured policy limits and delegates money
movement to the TransactionService.
"""

from decimal import Decimal
from typing import List, Optional, Tuple

from .accounts import Account, AccountManager
from .audit import AuditLogger
from .config import LedgerConfig
from .currency import AmountLike, format_amount, to_decimal
from .errors import AccountNotFoundError, TransferLimitExceededError
from .events import TransactionObserver
from .logging_config import get_logger, log_action
from .notifications import NotificationService
from .transaction_service import TransactionService
from .transactions import Transaction
from .users import User, UserManager


class Ledger:
    """
    In-memory ledger with users, accounts and transaction processing

    Configuration is read once here; the audit and notification observers are
    registered when enabled in it.
    """

    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        audit_logger: Optional[AuditLogger] = None,
        notification_service: Optional[NotificationService] = None,
        user_manager: Optional[UserManager] = None,
        account_manager: Optional[AccountManager] = None,
        transaction_service: Optional[TransactionService] = None
    ):
        self.config = config or LedgerConfig()
        currency = self.config.currency_unit

        self.user_manager = user_manager or UserManager()
        self.account_manager = account_manager or AccountManager(self.config)
        self.transaction_service = transaction_service or TransactionService(currency)
        self.logger = get_logger("ledger_sim.ledger")

        # Explicitly supplied observers are always registered
        if audit_logger is None and self.config.enable_audit_logging:
            audit_logger = AuditLogger(
                log_file=self.config.audit_log_file,
                currency=currency,
                date_format=self.config.date_format
            )
        if notification_service is None and self.config.enable_notifications:
            notification_service = NotificationService(
                email_enabled=self.config.notify_email,
                sms_enabled=self.config.notify_sms,
                console_enabled=self.config.notify_console,
                currency=currency
            )

        self.audit_logger = audit_logger
        self.notification_service = notification_service
        self.transaction_service.add_observer(audit_logger)
        self.transaction_service.add_observer(notification_service)

    # Users

    def create_user(self, username: str, password: str, email: str) -> User:
        return self.user_manager.create_user(username, password, email)

    def find_user_by_id(self, user_id: str) -> Optional[User]:
        return self.user_manager.get_user(user_id)

    def find_user_by_username(self, username: str) -> Optional[User]:
        return self.user_manager.get_user_by_username(username)

    def authenticate(self, username: str, password: str) -> Optional[User]:
        return self.user_manager.authenticate(username, password)

    def get_all_users(self) -> List[User]:
        return self.user_manager.list_users()

    @property
    def user_count(self) -> int:
        return self.user_manager.count()

    # Accounts

    def create_account(self, user: User, initial_deposit: AmountLike = Decimal("0")) -> Account:
        return self.account_manager.create_account(user, initial_deposit)

    def create_user_with_account(self, username: str, password: str, email: str,
                                 initial_deposit: AmountLike = Decimal("0")) -> Account:
        """Create a user and open their first account"""
        # Validate the deposit before the user exists so a bad deposit leaves no orphan user
        self.account_manager.validate_initial_deposit(initial_deposit)
        user = self.create_user(username, password, email)
        return self.create_account(user, initial_deposit)

    def find_account_by_id(self, account_id: str) -> Optional[Account]:
        return self.account_manager.get_account(account_id)

    def find_accounts_by_user(self, user: User) -> List[Account]:
        return self.account_manager.find_by_owner(user)

    def get_all_accounts(self) -> List[Account]:
        return self.account_manager.list_accounts()

    @property
    def account_count(self) -> int:
        return self.account_manager.count()

    def get_balance(self, account_id: str) -> Decimal:
        """
        Current balance of an account

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        return self._require_account(account_id).balance

    def get_transaction_history(self, account_id: str) -> Tuple[Transaction, ...]:
        """
        Transactions of an account, oldest first

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        return self._require_account(account_id).transactions

    # Money movement

    def deposit(self, account_id: str, amount: AmountLike) -> Optional[Transaction]:
        """
        Deposit into an account

        Returns:
            The Transaction, or None if the deposit was rejected (non-positive amount)

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        account = self._require_account(account_id)
        return self.transaction_service.deposit(account, amount)

    def withdraw(self, account_id: str, amount: AmountLike) -> Optional[Transaction]:
        """
        Withdraw from an account

        Returns:
            The Transaction, or None if the withdrawal was rejected
            (non-positive amount or insufficient funds)

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        account = self._require_account(account_id)
        return self.transaction_service.withdraw(account, amount)

    def transfer(self, from_account_id: str, to_account_id: str,
                 amount: AmountLike) -> Optional[Transaction]:
        """
        Transfer between two accounts

        Returns:
            The Transaction, or None if the transfer was rejected
            (same account, non-positive amount or insufficient funds)

        Raises:
            AccountNotFoundError: If either account does not exist
            TransferLimitExceededError: If amount exceeds the configured maximum
        """
        from_account = self._require_account(from_account_id, "Source account")
        to_account = self._require_account(to_account_id, "Destination account")

        value = to_decimal(amount)
        limit = self.config.max_transfer_amount
        if value > limit:
            log_action(
                self.logger, "warning", "Transfer rejected by limit",
                user_id=from_account.owner.id, action="transfer",
                resource=f"account:{from_account_id}",
                extra={"amount": str(value), "limit": str(limit)}
            )
            raise TransferLimitExceededError(
                value, limit, format_amount(limit, self.config.currency_unit)
            )

        return self.transaction_service.transfer(from_account, to_account, value)

    # Observers

    def add_observer(self, observer: TransactionObserver) -> None:
        self.transaction_service.add_observer(observer)

    def remove_observer(self, observer: TransactionObserver) -> None:
        self.transaction_service.remove_observer(observer)

    def _require_account(self, account_id: str, role: str = "Account") -> Account:
        account = self.account_manager.get_account(account_id)
        if account is None:
            raise AccountNotFoundError(account_id, role)
        return account
