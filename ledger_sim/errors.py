"""
Ledger Exceptions

Business-rule failures (insufficient funds, non-positive amount, same-account
transfer) are not exceptions: operations return None or False for those.
The classes below cover resolution, policy, validation and contract errors.
"""

from decimal import Decimal
from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger errors"""


class AccountNotFoundError(LedgerError, LookupError):
    """Raised when an account id cannot be resolved"""

    def __init__(self, account_id: str, role: str = "Account"):
        super().__init__(f"{role} not found: {account_id}")
        self.account_id = account_id


class UserNotFoundError(LedgerError, LookupError):
    """Raised when a user id or username cannot be resolved"""

    def __init__(self, user_ref: str):
        super().__init__(f"User not found: {user_ref}")
        self.user_ref = user_ref


class TransferLimitExceededError(LedgerError, ValueError):
    """Raised when a transfer exceeds the configured maximum amount"""

    def __init__(self, amount: Decimal, limit: Decimal, display_limit: Optional[str] = None):
        super().__init__(
            f"Transfer amount {amount} exceeds the transfer limit of {display_limit or limit}"
        )
        self.amount = amount
        self.limit = limit


class ValidationError(LedgerError, ValueError):
    """Raised when user or account creation data is invalid"""


class UnsupportedOperationError(LedgerError, NotImplementedError):
    """Raised when a strategy is invoked through an entry point it does not support"""
