import os
import sys
from pathlib import Path

APP_NAME = "SharedFileOpener"


def _default_app_dir() -> Path:
    override = os.environ.get("SHARED_OPENER_HOME")
    if override:
        return Path(override)
    if sys.platform == "win32":
        base = os.environ.get("APPDATA") or os.environ.get("LOCALAPPDATA")
        if base:
            return Path(base) / APP_NAME
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return (Path(xdg) if xdg else Path.home() / ".config") / APP_NAME


APP_DIR = _default_app_dir()
SETTINGS_PATH = APP_DIR / "settings.json"
INSTANCE_LOCK_PATH = APP_DIR / "instance.lock"
MAX_HISTORY = 50
LOG_LEVEL = os.environ.get("SHARED_OPENER_LOG_LEVEL", "INFO").upper()

CARD_COLORS = [
    "#3B82F6",  # blue
    "#10B981",  # green
    "#F59E0B",  # yellow
    "#EF4444",  # red
    "#8B5CF6",  # purple
    "#EC4899",  # pink
    "#06B6D4",  # cyan
    "#F97316",  # orange
    "#6366F1",  # indigo
    "#14B8A6",  # teal
]

# extension -> (emoji, background, label)
FILE_ICONS = {
    "xlsx": ("📊", "#DCFCE7", "Excel"),
    "xls": ("📊", "#DCFCE7", "Excel"),
    "csv": ("📊", "#DCFCE7", "CSV"),
    "docx": ("📝", "#DBEAFE", "Word"),
    "doc": ("📝", "#DBEAFE", "Word"),
    "pptx": ("📑", "#FEE2E2", "PPT"),
    "ppt": ("📑", "#FEE2E2", "PPT"),
    "pdf": ("📕", "#FEF3C7", "PDF"),
    "txt": ("📄", "#F1F5F9", "Text"),
    "jpg": ("🖼️", "#FCE7F3", "Image"),
    "jpeg": ("🖼️", "#FCE7F3", "Image"),
    "png": ("🖼️", "#FCE7F3", "Image"),
    "gif": ("🖼️", "#FCE7F3", "Image"),
    "zip": ("📦", "#E0E7FF", "ZIP"),
    "hwp": ("📃", "#DBEAFE", "HWP"),
    "hwpx": ("📃", "#DBEAFE", "HWPX"),
}
DEFAULT_ICON = ("📁", "#F1F5F9", "File")


def file_icon(extension: str):
    return FILE_ICONS.get((extension or "").lower(), DEFAULT_ICON)
