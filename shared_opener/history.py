import logging
import threading
from typing import Callable, Iterable, List, Optional

from PySide6 import QtCore

from .config import MAX_HISTORY
from .models import HistoryEntry

logger = logging.getLogger(__name__)


class HistoryLedger(QtCore.QObject):
    """Most-recent-first log of completed copy-open operations."""

    changed = QtCore.Signal()
    cleared = QtCore.Signal()

    def __init__(self, entries: Iterable[HistoryEntry] = (), capacity: int = MAX_HISTORY,
                 persist: Optional[Callable[[], None]] = None):
        super().__init__()
        self.capacity = capacity
        self._items: List[HistoryEntry] = list(entries)[:capacity]
        self._persist = persist
        self._lock = threading.RLock()

    def append(self, entry: HistoryEntry):
        with self._lock:
            self._items.insert(0, entry)
            dropped = len(self._items) - self.capacity
            del self._items[self.capacity:]
        if dropped > 0:
            logger.debug("History over capacity, dropped %d oldest entries", dropped)
        self._save()
        self.changed.emit()

    def clear(self):
        with self._lock:
            self._items.clear()
        logger.info("History cleared")
        self._save()
        self.cleared.emit()
        self.changed.emit()

    def list(self) -> List[HistoryEntry]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _save(self):
        if self._persist is not None:
            self._persist()
