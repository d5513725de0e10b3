import logging
import os
import threading
from typing import Callable, Optional

from PySide6 import QtCore

logger = logging.getLogger(__name__)


def open_with_default_app(path: str) -> bool:
    """Hand ``path`` to the OS default handler. Returns False if nothing took it."""
    if not path or not os.path.exists(path):
        logger.warning("Cannot open missing path %s", path)
        return False
    from PySide6 import QtGui

    ok = QtGui.QDesktopServices.openUrl(QtCore.QUrl.fromLocalFile(path))
    if not ok:
        logger.warning("No application accepted %s", path)
    return ok


def open_folder(path: str) -> bool:
    if not path or not os.path.isdir(path):
        return False
    return open_with_default_app(path)


class _OpenRequest:
    def __init__(self, path: str):
        self.path = path
        self.result = False
        self.error: Optional[OSError] = None
        self.done = threading.Event()


class MainThreadOpener(QtCore.QObject):
    """
    Opener that always runs on the thread owning this object (the GUI thread).

    Shell handlers on Windows expect an initialised COM apartment, which pool
    threads do not have. Calls from other threads are queued over and the
    caller waits for the answer. Once the application is quitting and no
    event loop will pick the request up, the call runs on the caller's thread.
    """

    _requested = QtCore.Signal(object)

    def __init__(self, opener: Callable[[str], bool] = open_with_default_app, parent=None):
        super().__init__(parent)
        self._opener = opener
        self._closing = False
        self._requested.connect(self._run, QtCore.Qt.ConnectionType.QueuedConnection)
        app = QtCore.QCoreApplication.instance()
        if app is not None:
            app.aboutToQuit.connect(self._on_quit)

    def __call__(self, path: str) -> bool:
        if self._closing or QtCore.QThread.currentThread() == self.thread():
            return self._opener(path)
        req = _OpenRequest(path)
        self._requested.emit(req)
        while not req.done.wait(0.05):
            if self._closing:
                return self._opener(path)
        if req.error is not None:
            raise req.error
        return req.result

    @QtCore.Slot(object)
    def _run(self, req: _OpenRequest):
        try:
            req.result = self._opener(req.path)
        except OSError as e:
            req.error = e
        finally:
            req.done.set()

    @QtCore.Slot()
    def _on_quit(self):
        self._closing = True
