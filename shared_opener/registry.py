import logging
import os
import threading
from typing import Callable, Iterable, List, Optional, Sequence

from PySide6 import QtCore

from .config import CARD_COLORS
from .ids import new_id
from .models import FileReference, file_extension, now_iso

logger = logging.getLogger(__name__)


class FileRegistry(QtCore.QObject):
    """Registered file references, unique by source path, in insertion order.

    Colours are handed out round-robin over ``palette``. The cursor is the
    registry size at the time of the call, so a fresh process continues
    where the saved document left off instead of restarting at the head.
    """

    changed = QtCore.Signal()

    def __init__(self, files: Iterable[FileReference] = (),
                 palette: Sequence[str] = CARD_COLORS,
                 id_factory: Callable[[], str] = new_id,
                 persist: Optional[Callable[[], None]] = None):
        super().__init__()
        self.palette = list(palette)
        self._id_factory = id_factory
        self._persist = persist
        self._lock = threading.RLock()
        self._items: List[FileReference] = []
        seen = set()
        for f in files:
            if f.source_path in seen:
                continue
            seen.add(f.source_path)
            self._items.append(f)

    def register(self, candidate_paths: Iterable[str]) -> List[FileReference]:
        added: List[FileReference] = []
        with self._lock:
            known = {f.source_path for f in self._items}
            for path in candidate_paths:
                if not path or not path.strip() or path in known:
                    continue
                known.add(path)
                name = os.path.basename(path)
                ref = FileReference(
                    id=self._id_factory(),
                    name=name,
                    source_path=path,
                    extension=file_extension(name),
                    color=self._next_color(len(added)),
                    registered_at=now_iso(),
                )
                added.append(ref)
            self._items.extend(added)
        if added:
            logger.info("Registered %d file(s)", len(added))
            self._save()
            self.changed.emit()
        return added

    def remove(self, file_id: str) -> bool:
        with self._lock:
            for i, f in enumerate(self._items):
                if f.id == file_id:
                    del self._items[i]
                    break
            else:
                return False
        logger.info("Unregistered %s", f.source_path)
        self._save()
        self.changed.emit()
        return True

    def set_color(self, file_id: str, color: str) -> bool:
        with self._lock:
            ref = self.get(file_id)
            if ref is None:
                return False
            ref.color = color
        logger.debug("Colour of %s set to %s", file_id, color)
        self._save()
        self.changed.emit()
        return True

    def get(self, file_id: str) -> Optional[FileReference]:
        with self._lock:
            for f in self._items:
                if f.id == file_id:
                    return f
        return None

    def list(self) -> List[FileReference]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def _next_color(self, offset: int) -> str:
        return self.palette[(len(self._items) + offset) % len(self.palette)]

    def _save(self):
        if self._persist is not None:
            self._persist()
