import logging
import sys

from PySide6 import QtCore, QtWidgets

from shared_opener.app import AppController
from shared_opener.config import APP_DIR, APP_NAME, INSTANCE_LOCK_PATH, LOG_LEVEL


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QtWidgets.QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    APP_DIR.mkdir(parents=True, exist_ok=True)
    lock = QtCore.QLockFile(str(INSTANCE_LOCK_PATH))
    lock.setStaleLockTime(5000)
    if not lock.tryLock(1):
        QtWidgets.QMessageBox.information(None, APP_NAME, "The application is already running.")
        return 0

    controller = AppController(app)
    rc = app.exec()
    QtCore.QThreadPool.globalInstance().waitForDone()
    del controller
    del lock
    sys.exit(rc)


if __name__ == "__main__":
    main()
