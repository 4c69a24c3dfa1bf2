# backend/store.py
"""In-memory transaction store with change notifications.

The app shell owns one store. Anything that needs to react to new
transactions subscribes to it; the settlement engine never sees the store,
only the list of transactions it hands out.

Subscribers and updaters always run with no lock held, so they may read or
write the store again.
"""
import threading
from collections import namedtuple

import structlog

from backend.exceptions import StoreLoadError

logger = structlog.get_logger(__name__)

StoreSnapshot = namedtuple('StoreSnapshot', ['data', 'loading', 'error'])


def _ordered(records):
    # Newest date first; sorted() is stable, so ties keep their current order
    return sorted(records, key=lambda r: r.get('date') or '', reverse=True)


class _PendingLoad:
    """One loader call in flight, shared by everybody who asks meanwhile."""

    def __init__(self):
        self.owner = threading.get_ident()
        self.done = threading.Event()
        self.error = None


class TransactionStore:
    def __init__(self, loader=None):
        self._loader = loader if loader is not None else list
        self._data = None
        self._loading = False
        self._error = None
        self._pending = None
        self._subscribers = []
        self._state_lock = threading.Lock()

    def subscribe(self, callback):
        with self._state_lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._state_lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self):
        with self._state_lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback()
            except Exception:
                logger.exception("store_subscriber_failed", subscriber=repr(callback))

    def snapshot(self):
        with self._state_lock:
            data = tuple(self._data) if self._data is not None else None
            return StoreSnapshot(data, self._loading, self._error)

    def fetch(self):
        while True:
            with self._state_lock:
                if self._data is not None:
                    return list(self._data)
                pending = self._pending
                if pending is None:
                    pending = self._pending = _PendingLoad()
                    self._loading = True
                    self._error = None
                    break

            # A subscriber of this thread's own load: nothing to return yet
            if pending.owner == threading.get_ident():
                return []
            pending.done.wait()
            if pending.error is not None:
                raise StoreLoadError(pending.error)
            # Loaded by somebody else; go round again in case it was invalidated meanwhile

        return self._load(pending)

    def _load(self, pending):
        self._notify()

        try:
            records = _ordered(self._loader())
        except Exception as e:
            pending.error = f"Could not load transactions: {e}"
            with self._state_lock:
                if self._pending is pending:
                    self._error = str(e)
                    self._data = []
                    self._loading = False
                    self._pending = None
            pending.done.set()
            self._notify()
            logger.error("transactions_load_failed", error=str(e))
            raise StoreLoadError(pending.error) from e

        with self._state_lock:
            # Results of a load that was invalidated halfway are dropped
            if self._pending is pending:
                self._data = records
                self._loading = False
                self._pending = None
        pending.done.set()
        self._notify()
        logger.info("transactions_loaded", count=len(records))
        return list(records)

    def update(self, updater):
        with self._state_lock:
            if self._data is None:
                return
            current = list(self._data)

        updated = _ordered(updater(current))

        with self._state_lock:
            if self._data is None:
                return
            self._data = updated
        self._notify()

    def add(self, record):
        while True:
            self.fetch()
            with self._state_lock:
                if self._data is not None:
                    self._data = _ordered([record] + self._data)
                    break
                pending = self._pending
            if pending is not None and pending.owner == threading.get_ident():
                raise StoreLoadError("Cannot add a transaction while the store is loading")
            # Invalidated between fetch() and here, load again

        self._notify()
        logger.info("transaction_added", paid_by=record.get('paid_by'), amount=record.get('amount'))

    def invalidate(self):
        with self._state_lock:
            self._data = None
            self._loading = False
            self._error = None
            self._pending = None

    def reload(self):
        self.invalidate()
        return self.fetch()
