import logging
import os
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .errors import (
    CopyFailed,
    DestinationCreateFailed,
    NoDestinationConfigured,
    SourceNotFound,
)
from .filesystem import LocalFileSystem
from .history import HistoryLedger
from .ids import new_id
from .models import FileReference, HistoryEntry, now_iso
from .opener import open_with_default_app

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopyOutcome:
    destination_path: str

    @property
    def opened(self) -> bool:
        return True


@dataclass(frozen=True)
class CopiedButOpenFailed(CopyOutcome):
    reason: str = ""

    @property
    def opened(self) -> bool:
        return False


def numbered_name(name: str, n: int) -> str:
    stem, ext = os.path.splitext(name)
    return f"{stem} ({n}){ext}"


def resolve_destination_path(folder: str, name: str, fs=None) -> str:
    """
    Pick where ``name`` lands in ``folder``.
    An existing file of the same name is deleted so the copy replaces it.
    If it cannot be deleted (typically still open elsewhere), the first free
    "name (n).ext" is used and both files remain.
    """
    fs = fs or LocalFileSystem()
    target = os.path.join(folder, name)
    if not fs.exists(target):
        return target
    try:
        fs.remove(target)
        return target
    except OSError as e:
        logger.info("Could not replace %s (%s), using a numbered name", target, e)
    n = 1
    while True:
        candidate = os.path.join(folder, numbered_name(name, n))
        if not fs.exists(candidate):
            return candidate
        n += 1


class CopyOpenOrchestrator:
    def __init__(self, ledger: HistoryLedger, fs=None,
                 opener: Callable[[str], bool] = open_with_default_app,
                 id_factory: Callable[[], str] = new_id,
                 clock: Callable[[], str] = now_iso):
        self.ledger = ledger
        self.fs = fs or LocalFileSystem()
        self.opener = opener
        self.id_factory = id_factory
        self.clock = clock
        # one copy-open at a time: same-named files share a destination path
        self._lock = threading.Lock()

    def copy_and_open(self, ref: FileReference, destination_folder: Optional[str]) -> CopyOutcome:
        """Copy ``ref`` into ``destination_folder`` and open the copy.

        Raises an ``OrchestrationError`` subclass if nothing was copied.
        A failed open after a good copy is reported as ``CopiedButOpenFailed``.
        Concurrent calls run one after another.
        """
        with self._lock:
            return self._copy_and_open(ref, destination_folder)

    def _copy_and_open(self, ref: FileReference, destination_folder: Optional[str]) -> CopyOutcome:
        if not destination_folder:
            raise NoDestinationConfigured()
        if not self.fs.exists(destination_folder):
            try:
                self.fs.makedirs(destination_folder)
            except OSError as e:
                raise DestinationCreateFailed(destination_folder, e) from e
        if not self.fs.exists(ref.source_path):
            raise SourceNotFound(ref.source_path)

        dest = resolve_destination_path(destination_folder, ref.name, self.fs)
        try:
            self.fs.copy(ref.source_path, dest)
        except OSError as e:
            logger.warning("Copy %s -> %s failed: %s", ref.source_path, dest, e)
            raise CopyFailed(ref.source_path, dest, e) from e
        logger.info("Copied %s -> %s", ref.source_path, dest)

        outcome = self._open(dest)
        self.ledger.append(HistoryEntry(
            id=self.id_factory(),
            file_reference_id=ref.id,
            file_name=ref.name,
            source_path=ref.source_path,
            destination_path=dest,
            completed_at=self.clock(),
        ))
        return outcome

    def _open(self, dest: str) -> CopyOutcome:
        try:
            ok = self.opener(dest)
        except OSError as e:
            logger.warning("Opening %s failed: %s", dest, e)
            return CopiedButOpenFailed(dest, reason=str(e))
        if not ok:
            return CopiedButOpenFailed(dest, reason="No application is associated with this file.")
        return CopyOutcome(dest)
