"""
Notification Module

Transaction observer that tells account owners about completed transactions.
Delivery is simulated: every channel provider writes to the log and keeps an
outbox instead of contacting a real mail or SMS gateway.
"""

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .currency import Currency, format_amount
from .events import TransactionObserver
from .logging_config import get_logger
from .transactions import Transaction, TransactionType


class NotificationChannel(Enum):
    """Available notification channels"""
    CONSOLE = "console"
    EMAIL = "email"
    SMS = "sms"


@dataclass(frozen=True)
class Notification:
    """A message addressed to one recipient on one channel"""
    channel: NotificationChannel
    recipient: str
    transaction_id: str
    body: str


class ChannelProvider(ABC):
    """Abstract base class for notification channel providers"""

    def __init__(self):
        self.outbox: List[Notification] = []

    @abstractmethod
    def send(self, notification: Notification) -> bool:
        """Send notification via this channel. Returns True if successful."""


class LogChannelProvider(ChannelProvider):
    """Writes notifications to the application log"""

    def __init__(self, logger=None, tag: str = "NOTIFICATION"):
        super().__init__()
        self.logger = logger or get_logger("ledger_sim.notifications")
        self.tag = tag

    def send(self, notification: Notification) -> bool:
        self.logger.info(f"[{self.tag}] {notification.body}")
        self.outbox.append(notification)
        return True


class EmailChannelProvider(LogChannelProvider):
    """Simulated email delivery to the owner's address"""

    def send(self, notification: Notification) -> bool:
        self.logger.info(f"[EMAIL -> {notification.recipient}] {notification.body}")
        self.outbox.append(notification)
        return True


class SMSChannelProvider(LogChannelProvider):
    """Simulated SMS delivery addressed by username"""

    def send(self, notification: Notification) -> bool:
        self.logger.info(f"[SMS -> {notification.recipient}] {notification.body}")
        self.outbox.append(notification)
        return True


class NotificationService(TransactionObserver):
    """
    Builds one message per completed transaction and sends it through every
    enabled channel
    """

    NAME = "NotificationService"

    def __init__(
        self,
        email_enabled: bool = False,
        sms_enabled: bool = False,
        console_enabled: bool = True,
        currency: Currency = Currency.EUR,
        providers: Optional[Dict[NotificationChannel, ChannelProvider]] = None
    ):
        self.email_enabled = email_enabled
        self.sms_enabled = sms_enabled
        self.console_enabled = console_enabled
        self.currency = currency
        self.providers: Dict[NotificationChannel, ChannelProvider] = {
            NotificationChannel.CONSOLE: LogChannelProvider(),
            NotificationChannel.EMAIL: EmailChannelProvider(),
            NotificationChannel.SMS: SMSChannelProvider(),
        }
        if providers:
            self.providers.update(providers)
        self._sent: List[str] = []
        self._lock = threading.Lock()
        self.logger = get_logger("ledger_sim.notifications")

    def on_transaction(self, transaction: Transaction) -> None:
        message = self.create_message(transaction)
        with self._lock:
            self._sent.append(message)

        owner = transaction.from_account.owner
        if self.console_enabled:
            self._dispatch(NotificationChannel.CONSOLE, owner.id, transaction, message)
        if self.email_enabled:
            self._dispatch(NotificationChannel.EMAIL, owner.email, transaction, message)
        if self.sms_enabled:
            self._dispatch(NotificationChannel.SMS, owner.username, transaction, message)

    def name(self) -> str:
        return self.NAME

    def create_message(self, transaction: Transaction) -> str:
        amount = format_amount(transaction.amount, self.currency)
        account = transaction.from_account
        balance = transaction.from_balance_after
        if balance is None:
            balance = account.balance

        if transaction.transaction_type == TransactionType.DEPOSIT:
            return (
                f"Notification: Deposit of {amount} made to your account {account.id}. "
                f"New balance: {format_amount(balance, self.currency)}"
            )
        if transaction.transaction_type == TransactionType.WITHDRAWAL:
            return (
                f"Notification: Withdrawal of {amount} made from your account {account.id}. "
                f"New balance: {format_amount(balance, self.currency)}"
            )
        return (
            f"Notification: Transfer of {amount} from {account.id} "
            f"to {transaction.to_account.id}"
        )

    def _dispatch(self, channel: NotificationChannel, recipient: str,
                  transaction: Transaction, message: str) -> None:
        notification = Notification(
            channel=channel,
            recipient=recipient,
            transaction_id=transaction.id,
            body=message
        )
        if not self.providers[channel].send(notification):
            self.logger.warning(
                f"{channel.value} notification for transaction {transaction.id} was not delivered"
            )

    def set_email_enabled(self, enabled: bool) -> None:
        self.email_enabled = enabled

    def set_sms_enabled(self, enabled: bool) -> None:
        self.sms_enabled = enabled

    def set_console_enabled(self, enabled: bool) -> None:
        self.console_enabled = enabled

    @property
    def sent_notifications(self) -> List[str]:
        with self._lock:
            return list(self._sent)

    def count(self) -> int:
        with self._lock:
            return len(self._sent)

    def clear(self) -> None:
        with self._lock:
            self._sent.clear()
