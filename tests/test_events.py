"""
Tests for the observer registry
"""

import logging
from decimal import Decimal
from unittest.mock import Mock

from ledger_sim.accounts import Account
from ledger_sim.events import ObserverRegistry, TransactionObserver, observer_name
from ledger_sim.transactions import Transaction, TransactionType
from ledger_sim.users import User


class RecordingObserver(TransactionObserver):
    """Observer that appends (label, transaction id) to a shared list"""

    def __init__(self, label, calls):
        self.label = label
        self.calls = calls

    def on_transaction(self, transaction):
        self.calls.append((self.label, transaction.id))

    def name(self):
        return self.label


class FailingObserver(TransactionObserver):

    def on_transaction(self, transaction):
        raise RuntimeError("observer exploded")

    def name(self):
        return "Failing"


def make_transaction(tx_id="TX-1"):
    account = Account("ACC-1", User("USR-1", "alice", "alice@example.com", "", ""))
    return Transaction(tx_id, TransactionType.DEPOSIT, Decimal("10"), account, account)


class TestObserverRegistry:
    """Test ObserverRegistry functionality"""

    def setup_method(self):
        self.registry = ObserverRegistry()
        self.calls = []

    def test_add_and_notify_in_order(self):
        first = RecordingObserver("first", self.calls)
        second = RecordingObserver("second", self.calls)
        self.registry.add(first)
        self.registry.add(second)

        delivered = self.registry.notify(make_transaction())

        assert delivered == 2
        assert self.calls == [("first", "TX-1"), ("second", "TX-1")]

    def test_add_none_ignored(self):
        assert self.registry.add(None) is False
        assert len(self.registry) == 0

    def test_duplicate_registration_ignored(self):
        observer = RecordingObserver("only", self.calls)

        assert self.registry.add(observer) is True
        assert self.registry.add(observer) is False
        self.registry.notify(make_transaction())

        assert len(self.registry) == 1
        assert self.calls == [("only", "TX-1")]

    def test_remove(self):
        observer = RecordingObserver("gone", self.calls)
        self.registry.add(observer)

        assert self.registry.remove(observer) is True
        assert observer not in self.registry
        self.registry.notify(make_transaction())
        assert self.calls == []

    def test_remove_unknown_observer(self, caplog):
        with caplog.at_level(logging.WARNING, logger="ledger_sim.events"):
            assert self.registry.remove(RecordingObserver("stranger", self.calls)) is False
        assert "stranger was not registered" in caplog.text

    def test_failing_observer_does_not_stop_others(self, caplog):
        after = RecordingObserver("after", self.calls)
        self.registry.add(FailingObserver())
        self.registry.add(after)

        with caplog.at_level(logging.ERROR, logger="ledger_sim.events"):
            delivered = self.registry.notify(make_transaction())

        assert delivered == 1
        assert self.calls == [("after", "TX-1")]
        assert "Error in observer Failing for transaction TX-1" in caplog.text

    def test_mock_observer_called_once(self):
        observer = Mock(spec=TransactionObserver)
        self.registry.add(observer)
        transaction = make_transaction()

        self.registry.notify(transaction)

        observer.on_transaction.assert_called_once_with(transaction)

    def test_snapshot_and_clear(self):
        observer = RecordingObserver("one", self.calls)
        self.registry.add(observer)

        assert self.registry.snapshot() == (observer,)
        self.registry.clear()
        assert self.registry.snapshot() == ()


def test_registry_logs_under_ledger_namespace():
    assert ObserverRegistry().logger.name == "ledger_sim.events"


def test_observer_name_falls_back_to_repr():
    broken = Mock()
    broken.name.side_effect = RuntimeError("no name")
    assert observer_name(broken) == repr(broken)
