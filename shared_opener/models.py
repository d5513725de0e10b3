import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


def now_iso() -> str:
    return datetime.now().isoformat(timespec="seconds")


def file_extension(path: str) -> str:
    return os.path.splitext(path)[1].lower().lstrip(".")


@dataclass
class FileReference:
    id: str
    name: str
    source_path: str
    extension: str
    color: str
    registered_at: str  # ISO-8601

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "originalPath": self.source_path,
            "extension": self.extension,
            "color": self.color,
            "addedAt": self.registered_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Optional["FileReference"]:
        if not isinstance(d, dict) or not d.get("id") or not d.get("originalPath"):
            return None
        path = str(d["originalPath"])
        name = str(d.get("name") or os.path.basename(path))
        return cls(
            id=str(d["id"]),
            name=name,
            source_path=path,
            extension=str(d.get("extension") or file_extension(name)),
            color=str(d.get("color") or ""),
            registered_at=str(d.get("addedAt") or ""),
        )


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    file_reference_id: str  # weak: the file may have been unregistered since
    file_name: str
    source_path: str
    destination_path: str
    completed_at: str  # ISO-8601

    @property
    def dt(self) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(self.completed_at)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "fileId": self.file_reference_id,
            "fileName": self.file_name,
            "originalPath": self.source_path,
            "copiedTo": self.destination_path,
            "openedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Optional["HistoryEntry"]:
        if not isinstance(d, dict) or not d.get("id") or not d.get("copiedTo"):
            return None
        return cls(
            id=str(d["id"]),
            file_reference_id=str(d.get("fileId") or ""),
            file_name=str(d.get("fileName") or ""),
            source_path=str(d.get("originalPath") or ""),
            destination_path=str(d["copiedTo"]),
            completed_at=str(d.get("openedAt") or ""),
        )
