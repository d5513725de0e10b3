import json
import logging
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)


def default_document() -> Dict[str, Any]:
    return {"destinationFolder": "", "files": [], "history": []}


class SettingsStore:
    """Loads and saves the single settings document as JSON."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Dict[str, Any]:
        doc = default_document()
        if not self.path.exists():
            return doc
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Failed to load settings from %s, starting empty", self.path)
            return doc
        if not isinstance(data, dict):
            logger.warning("Settings at %s is not an object, starting empty", self.path)
            return doc
        folder = data.get("destinationFolder")
        doc["destinationFolder"] = folder if isinstance(folder, str) else ""
        for key in ("files", "history"):
            if isinstance(data.get(key), list):
                doc[key] = data[key]
        return doc

    def save(self, doc: Dict[str, Any]) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(doc, f, ensure_ascii=False, indent=2)
        except OSError:
            logger.exception("Failed to save settings to %s", self.path)
            return False
        return True
