import logging

from PySide6 import QtCore

from .errors import OrchestrationError
from .workspace import Workspace

logger = logging.getLogger(__name__)


class CopyTaskSignals(QtCore.QObject):
    # file_id, outcome
    finished = QtCore.Signal(str, object)
    # file_id, message
    failed = QtCore.Signal(str, str)


class CopyTask(QtCore.QRunnable):
    """Runs one copy-and-open off the GUI thread. Not cancellable."""

    def __init__(self, workspace: Workspace, file_id: str):
        super().__init__()
        self.workspace = workspace
        self.file_id = file_id
        self.signals = CopyTaskSignals()

    def run(self):
        try:
            outcome = self.workspace.copy_and_open(self.file_id)
        except OrchestrationError as e:
            logger.warning("Copy-and-open of %s failed: %s", self.file_id, e)
            self.signals.failed.emit(self.file_id, str(e))
        except KeyError:
            self.signals.failed.emit(self.file_id, "This file is no longer registered.")
        except Exception as e:
            logger.exception("Unexpected error during copy-and-open of %s", self.file_id)
            self.signals.failed.emit(self.file_id, f"Unexpected error:\n{e}")
        else:
            self.signals.finished.emit(self.file_id, outcome)
