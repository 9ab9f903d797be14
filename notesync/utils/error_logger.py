from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from notesync.utils.errors import NoteSyncError
from notesync.utils.paths import ERROR_DIR, error_log_path


@dataclass
class ErrorRecord:
    ts: str
    route: str
    message: str
    code: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None


class ErrorLogger:
    """JSONL error log without note content. Writes to data/notesync/errors/YYYY-MM-DD-HHMM.jsonl"""

    def __init__(self, directory: Path = ERROR_DIR) -> None:
        self.directory = directory

    def log(self, route: str, err: Exception | str, extra: Optional[Dict[str, Any]] = None) -> None:
        # Только текст ошибки, операция и безопасный контекст
        details: Dict[str, Any] = {}
        code = None
        if isinstance(err, NoteSyncError):
            code = err.code
            details.update(err.context())
        if isinstance(extra, dict):
            details.update(extra)
        rec = ErrorRecord(
            ts=datetime.now().isoformat(timespec="seconds"),
            route=route,
            message=str(err),
            code=code,
            extra=details or None,
        )
        path = error_log_path(self.directory)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(rec), ensure_ascii=False) + "\n")
