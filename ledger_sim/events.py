"""
Event System Module

Observer pattern for completed transactions. Observers are notified in
registration order; a failing observer is logged and skipped so it can never
undo a committed transaction or starve the observers after it.
"""

from abc import ABC, abstractmethod
from threading import RLock
from typing import List, Optional, Tuple

from .logging_config import get_logger
from .transactions import Transaction


class TransactionObserver(ABC):
    """Listener notified after every successful transaction"""

    @abstractmethod
    def on_transaction(self, transaction: Transaction) -> None:
        """React to a completed transaction"""

    @abstractmethod
    def name(self) -> str:
        """Name used in diagnostics"""


def observer_name(observer) -> str:
    try:
        return observer.name()
    except Exception:
        return repr(observer)


class ObserverRegistry:
    """Ordered, duplicate-free collection of transaction observers"""

    def __init__(self):
        self._observers: List[TransactionObserver] = []
        self._lock = RLock()
        self.logger = get_logger("ledger_sim.events")

    def add(self, observer: Optional[TransactionObserver]) -> bool:
        """Register an observer; None and already registered observers are ignored"""
        if observer is None:
            return False
        with self._lock:
            if any(existing is observer for existing in self._observers):
                return False
            self._observers.append(observer)
        self.logger.debug(f"Registered observer {observer_name(observer)}")
        return True

    def remove(self, observer: TransactionObserver) -> bool:
        """Unregister an observer by identity"""
        with self._lock:
            for index, existing in enumerate(self._observers):
                if existing is observer:
                    del self._observers[index]
                    self.logger.debug(f"Removed observer {observer_name(observer)}")
                    return True
        self.logger.warning(f"Observer {observer_name(observer)} was not registered")
        return False

    def notify(self, transaction: Transaction) -> int:
        """
        Deliver a transaction to every observer

        Returns:
            Number of observers that handled the transaction without raising
        """
        delivered = 0
        for observer in self.snapshot():
            try:
                observer.on_transaction(transaction)
                delivered += 1
            except Exception as e:
                # Log but don't break the committed operation
                self.logger.error(
                    f"Error in observer {observer_name(observer)} "
                    f"for transaction {transaction.id}: {e}",
                    exc_info=True
                )
        return delivered

    def snapshot(self) -> Tuple[TransactionObserver, ...]:
        with self._lock:
            return tuple(self._observers)

    def clear(self) -> None:
        with self._lock:
            self._observers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)

    def __contains__(self, observer) -> bool:
        with self._lock:
            return any(existing is observer for existing in self._observers)
