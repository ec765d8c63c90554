"""
Account Management Module

An Account holds a non-negative Decimal balance and an append-only history of
the transactions that touched it. Balances move only through credit() and
debit(); both refuse invalid amounts by returning False instead of raising.
AccountManager owns every Account and applies the account-opening rules.
"""

import threading
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Tuple

from .config import LedgerConfig
from .currency import AmountLike, exact_add, exact_subtract, format_amount, to_decimal
from .errors import ValidationError
from .logging_config import get_logger, log_action
from .users import User

if TYPE_CHECKING:
    from .transactions import Transaction


def generate_account_id(prefix: str = "ACC") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


class Account:
    """
    Bank account owned by a single user

    Equality and hashing use the account id only.
    """

    def __init__(self, account_id: str, owner: User, initial_balance: AmountLike = Decimal("0")):
        balance = to_decimal(initial_balance)
        if balance < 0:
            raise ValueError("Initial balance cannot be negative")

        self._id = account_id
        self._owner = owner
        self._balance = balance
        self._transactions: List['Transaction'] = []
        # Held by TransactionService around every mutation of this account
        self.lock = threading.RLock()

    @property
    def id(self) -> str:
        return self._id

    @property
    def owner(self) -> User:
        return self._owner

    @property
    def balance(self) -> Decimal:
        return self._balance

    @property
    def transactions(self) -> Tuple['Transaction', ...]:
        """Transaction history, oldest first"""
        return tuple(self._transactions)

    def credit(self, amount: AmountLike) -> bool:
        """
        Add funds to the account

        Returns:
            True if the balance was increased, False if amount <= 0 or the
            new balance cannot be represented exactly
        """
        value = to_decimal(amount)
        if value <= 0:
            return False
        balance = exact_add(self._balance, value)
        if balance is None:
            return False
        self._balance = balance
        return True

    def debit(self, amount: AmountLike) -> bool:
        """
        Remove funds from the account

        Returns:
            True if the balance was decreased, False if amount <= 0,
            amount exceeds the balance or the new balance would be inexact
        """
        value = to_decimal(amount)
        if value <= 0 or value > self._balance:
            return False
        balance = exact_subtract(self._balance, value)
        if balance is None:
            return False
        self._balance = balance
        return True

    def can_credit(self, amount: AmountLike) -> bool:
        """Whether credit(amount) would succeed against the current balance"""
        value = to_decimal(amount)
        return value > 0 and exact_add(self._balance, value) is not None

    def can_debit(self, amount: AmountLike) -> bool:
        """Whether debit(amount) would succeed against the current balance"""
        value = to_decimal(amount)
        return (
            value > 0
            and self.has_sufficient_funds(value)
            and exact_subtract(self._balance, value) is not None
        )

    def has_sufficient_funds(self, amount: AmountLike) -> bool:
        return self._balance >= to_decimal(amount)

    def add_transaction(self, transaction: 'Transaction') -> None:
        """Append a transaction to the history; the caller guarantees it touched this account"""
        self._transactions.append(transaction)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Account):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"Account(id={self._id!r}, owner={self._owner.username!r}, balance={self._balance})"


class AccountManager:
    """
    Manages account creation and lookup
    """

    def __init__(
        self,
        config: LedgerConfig,
        id_factory: Callable[[str], str] = generate_account_id
    ):
        self.config = config
        self._accounts: Dict[str, Account] = {}
        self._id_factory = id_factory
        self._lock = threading.RLock()
        self.logger = get_logger("ledger_sim.accounts")

    def create_account(self, owner: User, initial_deposit: AmountLike = Decimal("0")) -> Account:
        """
        Open an account with a generated ACC- id

        Args:
            owner: Account owner
            initial_deposit: Opening balance, within the configured bounds

        Returns:
            Created Account

        Raises:
            ValidationError: If the owner or the opening balance is invalid
        """
        self._validate_owner(owner)
        deposit = self.validate_initial_deposit(initial_deposit)
        return self._register(Account(self._id_factory("ACC"), owner, deposit))

    def create_account_with_id(self, account_id: str, owner: User,
                               initial_deposit: AmountLike = Decimal("0")) -> Account:
        """Open an account with a caller-supplied id"""
        if not account_id or not account_id.strip():
            raise ValidationError("Account id cannot be empty")
        self._validate_owner(owner)
        deposit = self.validate_initial_deposit(initial_deposit)
        return self._register(Account(account_id, owner, deposit))

    def create_empty_account(self, owner: User) -> Account:
        """Open an account with a zero balance"""
        self._validate_owner(owner)
        return self._register(Account(self._id_factory("ACC"), owner, Decimal("0")))

    def create_premium_account(self, owner: User, initial_deposit: AmountLike) -> Account:
        """Open a PRM- account; requires the configured premium opening balance"""
        self._validate_owner(owner)
        deposit = to_decimal(initial_deposit)
        minimum = self.config.premium_min_initial_deposit
        if deposit < minimum:
            raise ValidationError(
                f"A premium account requires an initial deposit of at least "
                f"{format_amount(minimum, self.config.currency_unit)}"
            )
        deposit = self.validate_initial_deposit(deposit)
        return self._register(Account(self._id_factory("PRM"), owner, deposit))

    def get_account(self, account_id: str) -> Optional[Account]:
        """Get account by ID"""
        with self._lock:
            return self._accounts.get(account_id)

    def find_by_owner(self, owner: User) -> List[Account]:
        """All accounts owned by a user, in opening order"""
        with self._lock:
            return [a for a in self._accounts.values() if a.owner == owner]

    def list_accounts(self) -> List[Account]:
        with self._lock:
            return list(self._accounts.values())

    def count(self) -> int:
        with self._lock:
            return len(self._accounts)

    def _register(self, account: Account) -> Account:
        with self._lock:
            if account.id in self._accounts:
                raise ValidationError(f"An account with id {account.id} already exists")
            self._accounts[account.id] = account

        log_action(
            self.logger, "info", f"Account created: {account.id}",
            user_id=account.owner.id, action="create_account",
            resource=f"account:{account.id}",
            extra={"initial_balance": str(account.balance)}
        )
        return account

    @staticmethod
    def _validate_owner(owner: Optional[User]) -> None:
        if owner is None:
            raise ValidationError("Account owner cannot be None")
        if not owner.id or not owner.id.strip():
            raise ValidationError("Account owner must have a valid id")

    def validate_initial_deposit(self, initial_deposit: AmountLike) -> Decimal:
        deposit = to_decimal(initial_deposit)
        currency = self.config.currency_unit
        if deposit < self.config.min_initial_deposit:
            raise ValidationError(
                f"Initial deposit cannot be below "
                f"{format_amount(self.config.min_initial_deposit, currency)}"
            )
        if deposit > self.config.max_initial_deposit:
            raise ValidationError(
                f"Initial deposit cannot exceed "
                f"{format_amount(self.config.max_initial_deposit, currency)}"
            )
        return deposit
