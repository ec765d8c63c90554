"""
Test suite for the ledger facade

Tests account resolution, the transfer limit policy, configuration driven
observer wiring and the user/account registry operations.
"""

import pytest
from decimal import Decimal
from unittest.mock import Mock

from ledger_sim.audit import AuditLogger
from ledger_sim.config import LedgerConfig
from ledger_sim.errors import (
    AccountNotFoundError, TransferLimitExceededError, ValidationError
)
from ledger_sim.events import TransactionObserver
from ledger_sim.ledger import Ledger
from ledger_sim.notifications import NotificationService


def make_config(**overrides):
    values = {
        "max_transfer_amount": Decimal("10000"),
        "audit_log_file": None,
        "enable_audit_logging": True,
        "enable_notifications": True,
    }
    values.update(overrides)
    return LedgerConfig(**values)


class TestLedger:
    """Test Ledger operations"""

    def setup_method(self):
        self.ledger = Ledger(make_config())
        self.alice = self.ledger.create_user_with_account(
            "alice", "pass1", "alice@example.com", 1000
        )
        self.bob = self.ledger.create_user_with_account(
            "bob", "pass2", "bob@example.com", 500
        )

    def test_create_user_with_account(self):
        user = self.ledger.find_user_by_username("alice")

        assert self.alice.owner is user
        assert self.alice.balance == Decimal("1000")
        assert self.ledger.find_accounts_by_user(user) == [self.alice]
        assert self.ledger.user_count == 2
        assert self.ledger.account_count == 2

    def test_invalid_deposit_leaves_no_user(self):
        with pytest.raises(ValidationError):
            self.ledger.create_user_with_account("carol", "pass3", "carol@example.com", -5)

        assert self.ledger.find_user_by_username("carol") is None
        assert self.ledger.user_count == 2

    def test_create_additional_account(self):
        user = self.ledger.find_user_by_id(self.alice.owner.id)
        savings = self.ledger.create_account(user, 25)

        assert self.ledger.find_accounts_by_user(user) == [self.alice, savings]
        assert len(self.ledger.get_all_accounts()) == 3

    def test_authenticate(self):
        assert self.ledger.authenticate("alice", "pass1") is self.alice.owner
        assert self.ledger.authenticate("alice", "nope") is None

    def test_get_all_users(self):
        usernames = [user.username for user in self.ledger.get_all_users()]
        assert usernames == ["alice", "bob"]

    def test_deposit_and_withdraw(self):
        self.ledger.deposit(self.alice.id, "250.00")
        self.ledger.withdraw(self.alice.id, 100)

        assert self.ledger.get_balance(self.alice.id) == Decimal("1150.00")
        history = self.ledger.get_transaction_history(self.alice.id)
        assert [tx.description for tx in history] == ["Deposit of 250.00", "Withdrawal of 100.00"]

    def test_business_failures_return_none(self):
        assert self.ledger.withdraw(self.bob.id, 501) is None
        assert self.ledger.deposit(self.bob.id, 0) is None
        assert self.ledger.transfer(self.bob.id, self.bob.id, 1) is None
        assert self.ledger.get_balance(self.bob.id) == Decimal("500")

    def test_transfer(self):
        transaction = self.ledger.transfer(self.alice.id, self.bob.id, 300)

        assert self.ledger.get_balance(self.alice.id) == Decimal("700")
        assert self.ledger.get_balance(self.bob.id) == Decimal("800")
        assert self.ledger.get_transaction_history(self.bob.id) == (transaction,)

    def test_unknown_account(self):
        with pytest.raises(AccountNotFoundError, match="Account not found: ACC-404"):
            self.ledger.deposit("ACC-404", 10)
        with pytest.raises(AccountNotFoundError):
            self.ledger.withdraw("ACC-404", 10)
        with pytest.raises(AccountNotFoundError):
            self.ledger.get_balance("ACC-404")
        with pytest.raises(AccountNotFoundError):
            self.ledger.get_transaction_history("ACC-404")

    def test_transfer_unknown_accounts(self):
        with pytest.raises(AccountNotFoundError, match="Source account not found"):
            self.ledger.transfer("ACC-404", self.bob.id, 10)
        with pytest.raises(AccountNotFoundError, match="Destination account not found"):
            self.ledger.transfer(self.alice.id, "ACC-404", 10)

        assert self.ledger.get_balance(self.alice.id) == Decimal("1000")

    def test_find_missing_account_returns_none(self):
        assert self.ledger.find_account_by_id("ACC-404") is None

    def test_transfer_limit(self):
        ledger = Ledger(make_config(max_transfer_amount=Decimal("200")))
        source = ledger.create_user_with_account("carol", "pass3", "carol@example.com", 1000)
        target = ledger.create_user_with_account("dave", "pass4", "dave@example.com")
        observer = Mock(spec=TransactionObserver)
        ledger.add_observer(observer)

        with pytest.raises(TransferLimitExceededError) as exc_info:
            ledger.transfer(source.id, target.id, "200.01")

        assert exc_info.value.limit == Decimal("200")
        assert exc_info.value.amount == Decimal("200.01")
        assert "200.00€" in str(exc_info.value)
        assert source.balance == Decimal("1000")
        assert source.transactions == ()
        observer.on_transaction.assert_not_called()

        # The limit itself is allowed
        assert ledger.transfer(source.id, target.id, 200) is not None

    def test_limit_checked_even_when_funds_are_short(self):
        ledger = Ledger(make_config(max_transfer_amount=Decimal("50")))
        source = ledger.create_user_with_account("carol", "pass3", "carol@example.com", 10)
        target = ledger.create_user_with_account("dave", "pass4", "dave@example.com")

        with pytest.raises(TransferLimitExceededError):
            ledger.transfer(source.id, target.id, 60)


class TestLedgerWiring:
    """Test observer wiring from configuration"""

    def test_default_observers(self):
        ledger = Ledger(make_config())

        assert isinstance(ledger.audit_logger, AuditLogger)
        assert isinstance(ledger.notification_service, NotificationService)
        assert ledger.transaction_service.observers == (
            ledger.audit_logger, ledger.notification_service
        )

    def test_observers_disabled(self):
        ledger = Ledger(make_config(enable_audit_logging=False, enable_notifications=False))

        assert ledger.audit_logger is None
        assert ledger.notification_service is None
        assert ledger.transaction_service.observer_count == 0

    def test_explicit_observers_always_registered(self):
        audit = AuditLogger()
        ledger = Ledger(make_config(enable_audit_logging=False), audit_logger=audit)

        assert ledger.audit_logger is audit
        assert audit in ledger.transaction_service.observers

    def test_notification_channels_from_config(self):
        ledger = Ledger(make_config(notify_email=True, notify_sms=True, notify_console=False))
        service = ledger.notification_service

        assert service.email_enabled is True
        assert service.sms_enabled is True
        assert service.console_enabled is False

    def test_observers_receive_transactions(self):
        ledger = Ledger(make_config())
        account = ledger.create_user_with_account("alice", "pass1", "alice@example.com", 100)

        transaction = ledger.deposit(account.id, 50)

        assert ledger.audit_logger.entries[0].transaction_id == transaction.id
        assert ledger.notification_service.count() == 1

    def test_audit_file_from_config(self, tmp_path):
        log_file = tmp_path / "audit.log"
        ledger = Ledger(make_config(audit_log_file=str(log_file)))
        account = ledger.create_user_with_account("alice", "pass1", "alice@example.com")

        ledger.deposit(account.id, 5)

        assert "TYPE: DEPOSIT" in log_file.read_text(encoding="utf-8")

    def test_currency_from_config(self):
        ledger = Ledger(make_config(currency="USD"))
        account = ledger.create_user_with_account("alice", "pass1", "alice@example.com")

        transaction = ledger.deposit(account.id, 5)

        assert ledger.notification_service.create_message(transaction).startswith(
            "Notification: Deposit of 5.00$"
        )

    def test_remove_observer(self):
        ledger = Ledger(make_config())
        ledger.remove_observer(ledger.notification_service)

        assert ledger.transaction_service.observers == (ledger.audit_logger,)
