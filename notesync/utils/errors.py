from __future__ import annotations

from typing import Any, Dict, Optional


class NoteSyncError(Exception):
    """Base error. `code` is a stable marker for triage in the error log."""

    code = "notesync"

    def context(self) -> Dict[str, Any]:
        return {}


class SectionNotFoundError(NoteSyncError):
    code = "section_not_found"

    def __init__(self, uuid: str, heading: str, note_name: Optional[str] = None) -> None:
        self.uuid = uuid
        self.heading = heading
        self.note_name = note_name
        label = note_name or uuid
        super().__init__(f"Could not find section {heading!r} in note {label!r}")

    def context(self) -> Dict[str, Any]:
        return {"uuid": self.uuid, "heading": self.heading, "note_name": self.note_name}


class MalformedHeadingError(NoteSyncError):
    code = "malformed_heading"

    def __init__(self, message: str) -> None:
        super().__init__(f"[{self.code}] {message}")


class MalformedRowError(NoteSyncError):
    code = "malformed_row"

    def __init__(self, row_index: int, row: Any, key: str, message: str = "") -> None:
        self.row_index = row_index
        self.row = row
        self.key = key
        detail = f": {message}" if message else ""
        super().__init__(f"[{self.code}] row {row_index} has no usable value for {key!r}{detail}")

    def context(self) -> Dict[str, Any]:
        return {"row_index": self.row_index, "key": self.key}


class RemoteStoreError(NoteSyncError):
    code = "remote_store"

    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Note bridge HTTP {status_code}: {detail}")

    def context(self) -> Dict[str, Any]:
        return {"status_code": self.status_code}
