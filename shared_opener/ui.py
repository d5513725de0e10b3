from typing import Dict, List, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from .config import APP_NAME, CARD_COLORS, file_icon
from .history import HistoryLedger
from .models import FileReference, HistoryEntry
from .opener import open_folder
from .orchestrator import CopiedButOpenFailed, CopyOutcome
from .worker import CopyTask
from .workspace import Workspace

FILE_FILTERS = ";;".join([
    "All files (*)",
    "Documents (*.xlsx *.xls *.docx *.doc *.pptx *.ppt *.pdf *.txt *.csv)",
    "Images (*.jpg *.jpeg *.png *.gif *.bmp *.svg)",
])

TOAST_MS = 3000


def format_dt(entry: HistoryEntry) -> str:
    d = entry.dt
    return d.strftime("%Y.%m.%d %H:%M") if d else entry.completed_at


# ---------- Cards ----------

class FileCard(QtWidgets.QFrame):
    open_requested = QtCore.Signal(str)
    color_requested = QtCore.Signal(str)
    remove_requested = QtCore.Signal(str)

    def __init__(self, ref: FileReference, parent: QtWidgets.QWidget = None):
        super().__init__(parent)
        self.ref = ref
        self.setObjectName("card")
        self.setStyleSheet(
            "QFrame#card{border:1px solid #e5e7eb; border-radius:12px; background:#ffffff;}"
        )

        outer = QtWidgets.QHBoxLayout(self)
        outer.setContentsMargins(0, 0, 12, 0)
        outer.setSpacing(12)

        bar = QtWidgets.QFrame()
        bar.setFixedWidth(6)
        bar.setStyleSheet(f"QFrame{{background:{ref.color}; border-top-left-radius:12px; border-bottom-left-radius:12px;}}")
        outer.addWidget(bar)

        emoji, bg, label = file_icon(ref.extension)
        icon_lbl = QtWidgets.QLabel(emoji)
        icon_lbl.setToolTip(label)
        icon_lbl.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        icon_lbl.setFixedSize(40, 40)
        icon_lbl.setStyleSheet(f"QLabel{{font-size:20px; border-radius:8px; background:{bg};}}")
        outer.addWidget(icon_lbl)

        info = QtWidgets.QVBoxLayout()
        info.setContentsMargins(0, 10, 0, 10)
        info.setSpacing(2)
        name = QtWidgets.QLabel(ref.name)
        name.setToolTip(ref.name)
        name.setStyleSheet("QLabel{font-size:13px; font-weight:600; color:#111827;}")
        path = QtWidgets.QLabel(ref.source_path)
        path.setToolTip(ref.source_path)
        path.setStyleSheet("QLabel{font-size:11px; color:#6b7280;}")
        info.addWidget(name)
        info.addWidget(path)
        outer.addLayout(info, 1)

        self.btn_open = QtWidgets.QPushButton("Copy && open")
        self.btn_open.setToolTip("Copy to the working folder, then open")
        btn_color = QtWidgets.QPushButton("●")
        btn_color.setToolTip("Change colour")
        btn_color.setStyleSheet(f"QPushButton{{color:{ref.color};}}")
        btn_remove = QtWidgets.QPushButton("✕")
        btn_remove.setToolTip("Unregister")
        for b in (self.btn_open, btn_color, btn_remove):
            outer.addWidget(b)

        self.btn_open.clicked.connect(lambda: self.open_requested.emit(ref.id))
        btn_color.clicked.connect(lambda: self.color_requested.emit(ref.id))
        btn_remove.clicked.connect(lambda: self.remove_requested.emit(ref.id))

    def set_busy(self, busy: bool):
        self.btn_open.setEnabled(not busy)
        self.btn_open.setText("Copying…" if busy else "Copy && open")


# ---------- Dialogs ----------

class SettingsDialog(QtWidgets.QDialog):
    def __init__(self, folder: str, parent: QtWidgets.QWidget = None):
        super().__init__(parent)
        self.setWindowTitle("Settings")
        self.resize(520, 120)

        self.edit = QtWidgets.QLineEdit(folder)
        self.edit.setPlaceholderText("Working folder…")
        btn_pick = QtWidgets.QPushButton("Browse…")
        btn_pick.clicked.connect(self._pick)

        row = QtWidgets.QHBoxLayout()
        row.addWidget(self.edit, 1)
        row.addWidget(btn_pick)

        buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.StandardButton.Save | QtWidgets.QDialogButtonBox.StandardButton.Cancel
        )
        buttons.accepted.connect(self._accept)
        buttons.rejected.connect(self.reject)

        lay = QtWidgets.QVBoxLayout(self)
        lay.addWidget(QtWidgets.QLabel("Files are copied into this folder before opening:"))
        lay.addLayout(row)
        lay.addWidget(buttons)

    def _pick(self):
        folder = QtWidgets.QFileDialog.getExistingDirectory(
            self, "Choose the working folder", self.edit.text()
        )
        if folder:
            self.edit.setText(folder)

    def _accept(self):
        if not self.folder():
            QtWidgets.QMessageBox.warning(self, APP_NAME, "Choose a working folder.")
            return
        self.accept()

    def folder(self) -> str:
        return self.edit.text().strip()


class ColorDialog(QtWidgets.QDialog):
    def __init__(self, current: str, parent: QtWidgets.QWidget = None):
        super().__init__(parent)
        self.setWindowTitle("Card colour")
        self.chosen: Optional[str] = None
        grid = QtWidgets.QGridLayout(self)
        for i, color in enumerate(CARD_COLORS):
            b = QtWidgets.QPushButton()
            b.setFixedSize(36, 36)
            border = "3px solid #111827" if color == current else "1px solid #e5e7eb"
            b.setStyleSheet(f"QPushButton{{background:{color}; border:{border}; border-radius:18px;}}")
            b.clicked.connect(lambda _=False, c=color: self._choose(c))
            grid.addWidget(b, i // 5, i % 5)

    def _choose(self, color: str):
        self.chosen = color
        self.accept()


class HistoryDialog(QtWidgets.QDialog):
    def __init__(self, history: HistoryLedger, parent: QtWidgets.QWidget = None):
        super().__init__(parent)
        self.setWindowTitle("History")
        self.setAttribute(QtCore.Qt.WidgetAttribute.WA_DeleteOnClose, True)
        self.resize(520, 560)
        self.history = history

        self.list = QtWidgets.QListWidget(self)
        self.list.setVerticalScrollMode(QtWidgets.QAbstractItemView.ScrollPerPixel)
        self.empty = QtWidgets.QLabel("Nothing has been opened yet.")
        self.empty.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.empty.setStyleSheet("QLabel{color:#9ca3af;}")

        btn_clear = QtWidgets.QPushButton("Clear history")
        btn_clear.clicked.connect(self._clear)

        lay = QtWidgets.QVBoxLayout(self)
        lay.addWidget(self.list, 1)
        lay.addWidget(self.empty, 1)
        lay.addWidget(btn_clear)

        self.history.changed.connect(self._refill)
        self._refill()

    def _clear(self):
        if QtWidgets.QMessageBox.question(self, "Confirm", "Clear all history?") == QtWidgets.QMessageBox.Yes:
            self.history.clear()

    def _refill(self):
        self.list.clear()
        entries = self.history.list()
        self.list.setVisible(bool(entries))
        self.empty.setVisible(not entries)
        for h in entries:
            emoji = file_icon(h.file_name.rsplit(".", 1)[-1] if "." in h.file_name else "")[0]
            item = QtWidgets.QListWidgetItem(f"{emoji} {h.file_name}\n🕐 {format_dt(h)}\n→ {h.destination_path}")
            item.setToolTip(h.destination_path)
            self.list.addItem(item)


# ---------- Main window ----------

class MainWindow(QtWidgets.QMainWindow):
    def __init__(self, workspace: Workspace):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.resize(580, 680)
        self.setMinimumSize(480, 520)
        self.setAcceptDrops(True)

        self.workspace = workspace
        self.pool = QtCore.QThreadPool.globalInstance()
        self._cards: Dict[str, FileCard] = {}
        self._busy: set = set()
        self._tasks: List[CopyTask] = []

        toolbar = QtWidgets.QHBoxLayout()
        btn_add = QtWidgets.QPushButton("Add files…")
        btn_history = QtWidgets.QPushButton("History")
        btn_settings = QtWidgets.QPushButton("Settings")
        btn_add.clicked.connect(self.on_add_files)
        btn_history.clicked.connect(self.on_history)
        btn_settings.clicked.connect(self.on_settings)
        toolbar.addWidget(btn_add)
        toolbar.addStretch(1)
        toolbar.addWidget(btn_history)
        toolbar.addWidget(btn_settings)

        self.folder_label = QtWidgets.QLabel()
        self.btn_open_folder = QtWidgets.QPushButton("Open folder")
        self.btn_open_folder.clicked.connect(self.on_open_folder)
        folder_bar = QtWidgets.QHBoxLayout()
        folder_bar.addWidget(self.folder_label, 1)
        folder_bar.addWidget(self.btn_open_folder)

        self.list = QtWidgets.QListWidget()
        self.list.setVerticalScrollMode(QtWidgets.QAbstractItemView.ScrollPerPixel)
        self.list.setSelectionMode(QtWidgets.QAbstractItemView.SelectionMode.NoSelection)
        self.list.setStyleSheet("QListWidget{background:transparent; border:none;}")
        self.empty = QtWidgets.QLabel("Drop files here, or use “Add files…”.")
        self.empty.setAlignment(QtCore.Qt.AlignmentFlag.AlignCenter)
        self.empty.setStyleSheet("QLabel{color:#9ca3af; border:2px dashed #d1d5db; border-radius:12px; padding:40px;}")

        central = QtWidgets.QWidget()
        lay = QtWidgets.QVBoxLayout(central)
        lay.addLayout(toolbar)
        lay.addLayout(folder_bar)
        lay.addWidget(self.empty, 1)
        lay.addWidget(self.list, 1)
        self.setCentralWidget(central)

        self.workspace.registry.changed.connect(self.refresh_cards)
        self.workspace.destination_changed.connect(self.refresh_folder_bar)
        self.workspace.save_failed.connect(self._on_save_failed)

        self.refresh_folder_bar()
        self.refresh_cards()

    # ---------- Rendering ----------

    def toast(self, msg: str):
        self.statusBar().showMessage(msg, TOAST_MS)

    @QtCore.Slot()
    def _on_save_failed(self):
        self.toast("Saving settings failed. Recent changes may be lost on exit.")

    def refresh_folder_bar(self, *_):
        folder = self.workspace.destination_folder
        if folder:
            self.folder_label.setText(f"Working folder: {folder}")
            self.folder_label.setStyleSheet("QLabel{color:#374151;}")
        else:
            self.folder_label.setText("⚠️ Set a working folder (Settings)")
            self.folder_label.setStyleSheet("QLabel{color:#b45309;}")
        self.btn_open_folder.setVisible(bool(folder))

    def refresh_cards(self):
        self.list.clear()
        self._cards.clear()
        files = self.workspace.registry.list()
        self.list.setVisible(bool(files))
        self.empty.setVisible(not files)
        for ref in files:
            card = FileCard(ref)
            card.open_requested.connect(self.on_copy_and_open)
            card.color_requested.connect(self.on_color)
            card.remove_requested.connect(self.on_remove)
            card.set_busy(ref.id in self._busy)
            item = QtWidgets.QListWidgetItem()
            item.setSizeHint(card.sizeHint() + QtCore.QSize(0, 8))
            self.list.addItem(item)
            self.list.setItemWidget(item, card)
            self._cards[ref.id] = card

    # ---------- Registration ----------

    def register_paths(self, paths: List[str]):
        paths = [p for p in paths if p and p.strip()]
        if not paths:
            self.toast("Could not read the file paths. Use “Add files…” instead.")
            return
        added = self.workspace.registry.register(paths)
        if not added:
            self.toast("These files are already registered.")
            return
        self.toast(f"Registered {len(added)} file(s).")

    def on_add_files(self):
        paths, _ = QtWidgets.QFileDialog.getOpenFileNames(self, "Choose files to register", "", FILE_FILTERS)
        if paths:
            self.register_paths(paths)

    def dragEnterEvent(self, event: QtGui.QDragEnterEvent) -> None:
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            return
        super().dragEnterEvent(event)

    def dropEvent(self, event: QtGui.QDropEvent) -> None:
        urls = event.mimeData().urls()
        paths = [u.toLocalFile() for u in urls if u.isLocalFile()]
        if len(paths) < len(urls):
            self.toast(f"Only {len(paths)} of {len(urls)} items can be registered.")
        self.register_paths(paths)
        event.acceptProposedAction()

    # ---------- Card actions ----------

    @QtCore.Slot(str)
    def on_copy_and_open(self, file_id: str):
        if file_id in self._busy:
            return
        self._busy.add(file_id)
        if file_id in self._cards:
            self._cards[file_id].set_busy(True)
        task = CopyTask(self.workspace, file_id)
        task.signals.finished.connect(self._on_copy_finished)
        task.signals.failed.connect(self._on_copy_failed)
        self._tasks.append(task)
        self.pool.start(task)

    def _done(self, file_id: str):
        self._busy.discard(file_id)
        self._tasks = [t for t in self._tasks if t.file_id != file_id]
        if file_id in self._cards:
            self._cards[file_id].set_busy(False)

    @QtCore.Slot(str, object)
    def _on_copy_finished(self, file_id: str, outcome: CopyOutcome):
        self._done(file_id)
        if isinstance(outcome, CopiedButOpenFailed):
            QtWidgets.QMessageBox.warning(
                self, APP_NAME,
                f"The file was copied to:\n{outcome.destination_path}\n\nbut could not be opened.\n{outcome.reason}",
            )
            return
        self.toast(f"Copied and opened “{QtCore.QFileInfo(outcome.destination_path).fileName()}”.")

    @QtCore.Slot(str, str)
    def _on_copy_failed(self, file_id: str, message: str):
        self._done(file_id)
        QtWidgets.QMessageBox.critical(self, APP_NAME, message)

    @QtCore.Slot(str)
    def on_color(self, file_id: str):
        ref = self.workspace.registry.get(file_id)
        if ref is None:
            return
        dlg = ColorDialog(ref.color, self)
        if dlg.exec() and dlg.chosen:
            self.workspace.registry.set_color(file_id, dlg.chosen)
            self.toast("Card colour changed.")

    @QtCore.Slot(str)
    def on_remove(self, file_id: str):
        ref = self.workspace.registry.get(file_id)
        if ref and self.workspace.registry.remove(file_id):
            self.toast(f"“{ref.name}” unregistered.")

    # ---------- Toolbar ----------

    def on_settings(self):
        dlg = SettingsDialog(self.workspace.destination_folder, self)
        if dlg.exec():
            self.workspace.set_destination_folder(dlg.folder())
            self.toast("Settings saved.")

    def on_history(self):
        HistoryDialog(self.workspace.history, self).exec()

    def on_open_folder(self):
        if not open_folder(self.workspace.destination_folder):
            self.toast("The working folder does not exist yet.")
