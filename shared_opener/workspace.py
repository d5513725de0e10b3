import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from PySide6 import QtCore

from .config import MAX_HISTORY, SETTINGS_PATH
from .history import HistoryLedger
from .models import FileReference, HistoryEntry
from .orchestrator import CopyOpenOrchestrator, CopyOutcome
from .registry import FileRegistry
from .store import SettingsStore

logger = logging.getLogger(__name__)


class Workspace(QtCore.QObject):
    """
    Process-wide state: working folder, registry and history.

    Loaded once from the store. Every mutation rewrites the whole document.
    A failed write leaves memory as-is and raises ``save_failed``; anything
    not yet on disk is lost if the process exits before the next good save.
    """

    destination_changed = QtCore.Signal(str)
    save_failed = QtCore.Signal()

    def __init__(self, store: Optional[SettingsStore] = None, fs=None,
                 opener: Optional[Callable[[str], bool]] = None):
        super().__init__()
        self.store = store or SettingsStore(Path(SETTINGS_PATH))
        self._lock = threading.RLock()

        doc = self.store.load()
        self._destination_folder: str = doc.get("destinationFolder", "")
        files = [f for f in (FileReference.from_dict(d) for d in doc["files"]) if f]
        history = [h for h in (HistoryEntry.from_dict(d) for d in doc["history"]) if h]
        self.registry = FileRegistry(files, persist=self.save)
        self.history = HistoryLedger(history, capacity=MAX_HISTORY, persist=self.save)

        kwargs: Dict[str, Any] = {"fs": fs}
        if opener is not None:
            kwargs["opener"] = opener
        self.orchestrator = CopyOpenOrchestrator(self.history, **kwargs)
        logger.debug("Loaded %d file(s), %d history entries", len(files), len(history))

    @property
    def destination_folder(self) -> str:
        return self._destination_folder

    def set_destination_folder(self, folder: str):
        folder = (folder or "").strip()
        with self._lock:
            self._destination_folder = folder
        logger.info("Working folder set to %r", folder)
        self.save()
        self.destination_changed.emit(folder)

    def copy_and_open(self, file_id: str) -> CopyOutcome:
        """Copy-and-open a registered file by id using the configured folder."""
        ref = self.registry.get(file_id)
        if ref is None:
            raise KeyError(file_id)
        return self.orchestrator.copy_and_open(ref, self.destination_folder)

    def document(self) -> Dict[str, Any]:
        return {
            "destinationFolder": self._destination_folder,
            "files": [f.to_dict() for f in self.registry.list()],
            "history": [h.to_dict() for h in self.history.list()],
        }

    def save(self) -> bool:
        with self._lock:
            ok = self.store.save(self.document())
        if not ok:
            self.save_failed.emit()
        return ok
