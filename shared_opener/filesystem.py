import os
import shutil


class LocalFileSystem:
    """The filesystem operations the orchestrator needs, over the real disk.

    Tests substitute an object with the same methods.
    """

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def makedirs(self, path: str):
        os.makedirs(path, exist_ok=True)

    def remove(self, path: str):
        os.remove(path)

    def copy(self, src: str, dst: str):
        shutil.copy2(src, dst)
