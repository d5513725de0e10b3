import logging

from PySide6 import QtCore, QtGui, QtWidgets

from .config import APP_NAME
from .opener import MainThreadOpener
from .ui import MainWindow
from .workspace import Workspace

logger = logging.getLogger(__name__)


def _make_fallback_icon() -> QtGui.QIcon:
    size = 32
    pm = QtGui.QPixmap(size, size)
    pm.fill(QtCore.Qt.GlobalColor.transparent)
    p = QtGui.QPainter(pm)
    p.setRenderHint(QtGui.QPainter.Antialiasing)
    rect = QtCore.QRectF(2.0, 2.0, size - 4.0, size - 4.0)
    p.setPen(QtGui.QPen(QtGui.QColor(59, 130, 246), 1.5))
    p.setBrush(QtGui.QBrush(QtGui.QColor(219, 234, 254)))
    p.drawRoundedRect(rect, 6, 6)
    f = QtGui.QFont()
    f.setPointSizeF(13)
    f.setBold(True)
    p.setFont(f)
    p.setPen(QtGui.QPen(QtGui.QColor(30, 64, 175)))
    p.drawText(pm.rect(), QtCore.Qt.AlignmentFlag.AlignCenter, "⇩")
    p.end()
    return QtGui.QIcon(pm)


class AppController(QtCore.QObject):
    def __init__(self, app: QtWidgets.QApplication, workspace: Workspace = None):
        super().__init__()
        self.app = app
        icon = QtGui.QIcon.fromTheme("document-open")
        if not icon or icon.isNull():
            icon = _make_fallback_icon()
        app.setWindowIcon(icon)

        self.opener = MainThreadOpener(parent=self)
        self.workspace = workspace or Workspace(opener=self.opener)
        self.window = MainWindow(self.workspace)
        self.window.show()
        logger.info("%s started, settings at %s", APP_NAME, self.workspace.store.path)
