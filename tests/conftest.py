import itertools
from pathlib import Path

import pytest
from PySide6 import QtCore

from shared_opener.filesystem import LocalFileSystem
from shared_opener.history import HistoryLedger
from shared_opener.models import HistoryEntry


@pytest.fixture(scope="session", autouse=True)
def qcore_app():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


@pytest.fixture
def counter_ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


class RecordingOpener:
    def __init__(self, result=True, exc=None):
        self.result = result
        self.exc = exc
        self.calls = []

    def __call__(self, path: str) -> bool:
        self.calls.append(path)
        if self.exc is not None:
            raise self.exc
        return self.result


class LockedFileSystem(LocalFileSystem):
    """Existing files cannot be deleted, as when another program holds them open."""

    def __init__(self):
        self.remove_attempts = []

    def remove(self, path: str):
        self.remove_attempts.append(path)
        raise PermissionError(13, "The process cannot access the file", path)


@pytest.fixture
def opener():
    return RecordingOpener()


@pytest.fixture
def share(tmp_path: Path) -> Path:
    d = tmp_path / "share"
    d.mkdir()
    return d


def make_entry(n: int) -> HistoryEntry:
    return HistoryEntry(
        id=f"h{n}",
        file_reference_id=f"f{n}",
        file_name=f"file{n}.txt",
        source_path=f"/share/file{n}.txt",
        destination_path=f"/work/file{n}.txt",
        completed_at="2026-01-01T00:00:00",
    )


@pytest.fixture
def ledger():
    return HistoryLedger()
