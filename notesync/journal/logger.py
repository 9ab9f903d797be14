from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from notesync.utils.paths import JOURNAL_DIR, journal_path


@dataclass
class WriteRecord:
    ts: str
    uuid: str
    op: str
    section: Optional[str]
    chars: int


class FlushJournal:
    """Appends one JSONL line per remote write performed by a flush."""

    def __init__(self, directory: Path = JOURNAL_DIR) -> None:
        self.directory = directory

    def log(self, uuid: str, op: str, text: str, section: Optional[str] = None) -> None:
        record = WriteRecord(
            ts=datetime.now().isoformat(timespec="seconds"),
            uuid=uuid,
            op=op,
            section=section,
            chars=len(text),
        )
        path = journal_path(self.directory)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(asdict(record), ensure_ascii=False) + "\n")

    def read_all(self) -> List[Dict[str, Any]]:
        rows: List[Dict[str, Any]] = []
        for p in sorted(self.directory.glob("*.jsonl")):
            for line in p.read_text(encoding="utf-8").splitlines():
                if line.strip():
                    rows.append(json.loads(line))
        return rows
