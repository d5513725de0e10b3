import os
import threading
import time
from pathlib import Path

import pytest

from shared_opener.errors import (
    CopyFailed,
    DestinationCreateFailed,
    NoDestinationConfigured,
    SourceNotFound,
)
from shared_opener.filesystem import LocalFileSystem
from shared_opener.models import FileReference
from shared_opener.orchestrator import (
    CopiedButOpenFailed,
    CopyOpenOrchestrator,
    CopyOutcome,
    numbered_name,
    resolve_destination_path,
)

from conftest import LockedFileSystem, RecordingOpener, make_entry


def ref_for(path: Path, file_id: str = "f1") -> FileReference:
    return FileReference(
        id=file_id,
        name=path.name,
        source_path=str(path),
        extension=path.suffix.lstrip(".").lower(),
        color="#3B82F6",
        registered_at="2026-01-01T00:00:00",
    )


@pytest.fixture
def orchestrator(ledger, opener, counter_ids):
    return CopyOpenOrchestrator(ledger, opener=opener, id_factory=counter_ids,
                                clock=lambda: "2026-10-19T12:00:00")


def test_copy_into_empty_folder(orchestrator, ledger, opener, share, tmp_path):
    src = share / "report.xlsx"
    src.write_bytes(b"v1")
    work = tmp_path / "work"
    work.mkdir()

    outcome = orchestrator.copy_and_open(ref_for(src), str(work))

    assert type(outcome) is CopyOutcome
    assert outcome.opened
    assert outcome.destination_path == str(work / "report.xlsx")
    assert (work / "report.xlsx").read_bytes() == b"v1"
    assert opener.calls == [outcome.destination_path]
    [entry] = ledger.list()
    assert entry.destination_path == outcome.destination_path
    assert entry.file_reference_id == "f1"
    assert entry.file_name == "report.xlsx"
    assert entry.source_path == str(src)
    assert entry.completed_at == "2026-10-19T12:00:00"


def test_no_destination_fails_without_side_effects(orchestrator, ledger, opener, share):
    src = share / "a.txt"
    src.write_text("x")
    for folder in ("", None):
        with pytest.raises(NoDestinationConfigured):
            orchestrator.copy_and_open(ref_for(src), folder)
    assert ledger.list() == []
    assert opener.calls == []
    assert sorted(os.listdir(share)) == ["a.txt"]


def test_missing_destination_is_created(orchestrator, share, tmp_path):
    src = share / "a.txt"
    src.write_text("x")
    work = tmp_path / "deep" / "nested" / "work"

    outcome = orchestrator.copy_and_open(ref_for(src), str(work))

    assert Path(outcome.destination_path).read_text() == "x"


def test_uncreatable_destination(orchestrator, ledger, share, tmp_path):
    src = share / "a.txt"
    src.write_text("x")
    blocker = tmp_path / "blocker"
    blocker.write_text("not a folder")

    with pytest.raises(DestinationCreateFailed) as exc_info:
        orchestrator.copy_and_open(ref_for(src), str(blocker / "work"))
    assert exc_info.value.folder == str(blocker / "work")
    assert isinstance(exc_info.value.cause, OSError)
    assert ledger.list() == []


def test_source_not_found(orchestrator, ledger, opener, share, tmp_path):
    work = tmp_path / "work"
    with pytest.raises(SourceNotFound) as exc_info:
        orchestrator.copy_and_open(ref_for(share / "gone.docx"), str(work))
    assert exc_info.value.path == str(share / "gone.docx")
    assert ledger.list() == []
    assert opener.calls == []


def test_existing_file_is_overwritten(orchestrator, share, tmp_path):
    src = share / "report.xlsx"
    src.write_bytes(b"new")
    work = tmp_path / "work"
    work.mkdir()
    (work / "report.xlsx").write_bytes(b"old")

    outcome = orchestrator.copy_and_open(ref_for(src), str(work))

    assert outcome.destination_path == str(work / "report.xlsx")
    assert (work / "report.xlsx").read_bytes() == b"new"
    assert sorted(os.listdir(work)) == ["report.xlsx"]


def test_locked_file_falls_back_to_numbered_name(ledger, opener, share, tmp_path):
    src = share / "report.xlsx"
    src.write_bytes(b"new")
    work = tmp_path / "work"
    work.mkdir()
    (work / "report.xlsx").write_bytes(b"old")
    orch = CopyOpenOrchestrator(ledger, fs=LockedFileSystem(), opener=opener)

    outcome = orch.copy_and_open(ref_for(src), str(work))

    assert outcome.destination_path == str(work / "report (1).xlsx")
    assert (work / "report.xlsx").read_bytes() == b"old"
    assert (work / "report (1).xlsx").read_bytes() == b"new"
    assert ledger.list()[0].destination_path == outcome.destination_path


def test_copy_failure(ledger, opener, share, tmp_path):
    class BrokenCopy(LocalFileSystem):
        def copy(self, src, dst):
            raise OSError(28, "No space left on device")

    src = share / "a.txt"
    src.write_text("x")
    orch = CopyOpenOrchestrator(ledger, fs=BrokenCopy(), opener=opener)

    with pytest.raises(CopyFailed) as exc_info:
        orch.copy_and_open(ref_for(src), str(tmp_path / "work"))
    assert "No space left on device" in str(exc_info.value)
    assert ledger.list() == []
    assert opener.calls == []


@pytest.mark.parametrize("fake_opener", [RecordingOpener(result=False), RecordingOpener(exc=OSError("boom"))])
def test_open_failure_is_partial_success(ledger, share, tmp_path, fake_opener):
    src = share / "a.txt"
    src.write_text("x")
    orch = CopyOpenOrchestrator(ledger, opener=fake_opener)

    outcome = orch.copy_and_open(ref_for(src), str(tmp_path / "work"))

    assert isinstance(outcome, CopiedButOpenFailed)
    assert not outcome.opened
    assert outcome.reason
    assert Path(outcome.destination_path).exists()
    assert len(ledger.list()) == 1


def test_history_length_is_capped(orchestrator, ledger, share, tmp_path):
    for n in range(50):
        ledger.append(make_entry(n))
    src = share / "a.txt"
    src.write_text("x")

    outcome = orchestrator.copy_and_open(ref_for(src), str(tmp_path / "work"))

    assert len(ledger.list()) == 50
    assert ledger.list()[0].destination_path == outcome.destination_path


# ---------- resolve_destination_path ----------

class FakeFS:
    def __init__(self, existing=(), removable=True):
        self.files = set(existing)
        self.removable = removable

    def exists(self, path):
        return path in self.files

    def remove(self, path):
        if not self.removable:
            raise PermissionError(path)
        self.files.discard(path)


def test_numbered_name():
    assert numbered_name("report.xlsx", 2) == "report (2).xlsx"
    assert numbered_name("README", 1) == "README (1)"
    assert numbered_name("archive.tar.gz", 1) == "archive.tar (1).gz"


def test_resolve_free_name():
    fs = FakeFS()
    assert resolve_destination_path("/work", "a.txt", fs) == os.path.join("/work", "a.txt")


def test_resolve_deletes_existing():
    target = os.path.join("/work", "a.txt")
    fs = FakeFS([target])
    assert resolve_destination_path("/work", "a.txt", fs) == target
    assert target not in fs.files


def test_resolve_skips_taken_numbers_when_locked():
    fs = FakeFS([os.path.join("/work", n) for n in ("a.txt", "a (1).txt", "a (2).txt")], removable=False)
    assert resolve_destination_path("/work", "a.txt", fs) == os.path.join("/work", "a (3).txt")


# ---------- concurrency ----------

class SlowCopyFS(LocalFileSystem):
    """Writes the first byte, pauses, then the rest, leaving a window mid-copy."""

    def copy(self, src, dst):
        data = Path(src).read_bytes()
        with open(dst, "wb") as f:
            f.write(data[:1])
            f.flush()
            time.sleep(0.1)
            f.write(data[1:])


def test_concurrent_same_named_files_do_not_clobber_each_other(ledger, tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    src_a = tmp_path / "a" / "report.xlsx"
    src_b = tmp_path / "b" / "report.xlsx"
    src_a.write_bytes(b"AAA")
    src_b.write_bytes(b"BBB")
    work = tmp_path / "work"
    work.mkdir()

    seen = {}

    def opener(path):
        seen[threading.current_thread().name] = Path(path).read_bytes()
        return True

    orch = CopyOpenOrchestrator(ledger, fs=SlowCopyFS(), opener=opener)
    results = {}

    def run(name, src):
        results[name] = orch.copy_and_open(ref_for(src, file_id=name), str(work))

    threads = [
        threading.Thread(target=run, args=("A", src_a), name="A"),
        threading.Thread(target=run, args=("B", src_b), name="B"),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(10)

    assert seen == {"A": b"AAA", "B": b"BBB"}
    assert {r.destination_path for r in results.values()} == {str(work / "report.xlsx")}
    assert len(ledger.list()) == 2
    last = ledger.list()[0].file_reference_id
    assert (work / "report.xlsx").read_bytes() == seen[last]
