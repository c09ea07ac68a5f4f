"""Change notifications for store addresses.

Observers register a callback against an address and are told which address
changed after a mutation. No payload is sent; observers re-query.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, List

from contract import Address, Collection, Item

logger = logging.getLogger(__name__)

Observer = Callable[[Address], None]


@dataclass(frozen=True)
class _Registration:
    address: Address
    observer: Observer
    notify_for_descendants: bool


class ChangeNotifier:
    """Registry of observers keyed by address."""

    def __init__(self) -> None:
        self._registrations: List[_Registration] = []
        self._lock = threading.RLock()

    def register(self, address: Address, observer: Observer, notify_for_descendants: bool = True) -> None:
        with self._lock:
            self._registrations.append(_Registration(address, observer, notify_for_descendants))

    def unregister(self, observer: Observer) -> int:
        """Remove every registration of ``observer``. Returns how many were removed."""
        with self._lock:
            before = len(self._registrations)
            self._registrations = [r for r in self._registrations if r.observer is not observer]
            return before - len(self._registrations)

    def observer_count(self) -> int:
        with self._lock:
            return len(self._registrations)

    def notify(self, changed: Address) -> int:
        """Call every observer interested in ``changed``. Returns the number called.

        An observer that raises is logged and skipped; the rest still run.
        """
        with self._lock:
            targets = [r for r in self._registrations if self._matches(r, changed)]

        for registration in targets:
            try:
                registration.observer(changed)
            except Exception:
                logger.exception("Observer %r failed for %s", registration.observer, changed)
        logger.debug("Notified %d observer(s) of change at %s", len(targets), changed)
        return len(targets)

    @staticmethod
    def _matches(registration: _Registration, changed: Address) -> bool:
        watched = registration.address
        if watched == changed:
            return True
        # A collection-wide change may have touched any single item.
        if isinstance(changed, Collection) and isinstance(watched, Item):
            return True
        if isinstance(watched, Collection) and isinstance(changed, Item):
            return registration.notify_for_descendants
        return False
