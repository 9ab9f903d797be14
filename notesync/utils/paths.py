from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

# Data directories: NOTESYNC_DATA_DIR, else ./data/notesync of the calling application
DATA_ROOT = Path(os.getenv("NOTESYNC_DATA_DIR") or Path.cwd() / "data" / "notesync")
JOURNAL_DIR = DATA_ROOT / "journal"
ERROR_DIR = DATA_ROOT / "errors"


def _stamp() -> str:
    return datetime.now().strftime("%Y-%m-%d-%H%M")


def journal_path(directory: Path = JOURNAL_DIR) -> Path:
    """Путь к журналу записей в формате YYYY-MM-DD-HHMM.jsonl.
    Имя меняется каждую минуту (простая ротация по времени).
    """
    return directory / f"{_stamp()}.jsonl"


def error_log_path(directory: Path = ERROR_DIR) -> Path:
    """Путь к журналу ошибок в формате YYYY-MM-DD-HHMM.jsonl."""
    return directory / f"{_stamp()}.jsonl"
