from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from notesync.utils.errors import MalformedRowError

logger = logging.getLogger(__name__)

# Lines made only of pipes, dashes and whitespace ("| --- | --- |")
_SEPARATOR_RE = re.compile(r"^\s*\|([-\s]+\|\s*)+$")

# Column names of the book table as exported by the host before June 2023
DEFAULT_TABLE_HEADERS = (
    "Cover",
    "Book Title",
    "Author",
    "Category",
    "Source",
    "Highlights",
    "Updated",
    "Other Details",
)


def render_table_preamble(headers: Sequence[str]) -> str:
    markdown = f"| {' | '.join(f'**{h}**' for h in headers)} |\n"
    markdown += f"| {' | '.join('---' for _ in headers)} |\n"
    return markdown


def render_table_row(headers: Sequence[str], item: Mapping[str, Any], row_index: int = 0) -> str:
    cells: List[str] = []
    for header in headers:
        try:
            value = item[header]
        except (KeyError, TypeError) as exc:
            raise MalformedRowError(row_index, item, header, str(exc)) from exc
        if value is None:
            raise MalformedRowError(row_index, item, header, "value is None")
        cells.append(str(value).replace("|", ","))
    return f"| {' | '.join(cells)} |\n"


def render_table(rows: Sequence[Mapping[str, Any]]) -> str:
    """Markdown table; headers are the keys of the first row."""
    if not rows:
        return ""
    headers = list(rows[0].keys())
    markdown = render_table_preamble(headers)
    for idx, row in enumerate(rows):
        markdown += render_table_row(headers, row, row_index=idx)
    return markdown + "\n"


def _split_cells(line: str) -> List[str]:
    # drop the empty strings produced by the leading and trailing "|"
    return [cell.strip() for cell in line.split("|")[1:-1]]


def parse_table(content: str) -> Optional[List[Dict[str, Optional[str]]]]:
    """Parse a markdown table into a list of dicts.

    Tolerates the empty rows the host sometimes produces. Returns None when
    there is no table (fewer than two non-blank lines), which is not the same
    as an empty table.
    """
    lines = [line for line in content.split("\n") if line.strip()]
    if len(lines) < 2:
        return None
    lines = [line for line in lines if not _SEPARATOR_RE.match(line.strip())]
    if not lines:
        return []

    headers = [h.replace("*", "") for h in _split_cells(lines[0])]
    table: List[Dict[str, Optional[str]]] = []
    for line in lines[1:]:
        cells = _split_cells(line)
        row: Dict[str, Optional[str]] = {}
        for i, header in enumerate(headers):
            row[header] = (cells[i] if i < len(cells) else None) or None
        table.append(row)
    logger.debug("parsed table with %d rows and columns %s", len(table), headers)
    return table


def strip_table_preamble(content: str, headers: Sequence[str] = DEFAULT_TABLE_HEADERS) -> str:
    """Legacy cleanup of an exported table: drops the header row made of known
    column names, separator rows and a leading section label.
    """
    names = "|".join(re.escape(h) for h in headers)
    patterns = [
        re.compile(r"^([|\s*]+(" + names + r")){1,10}[|\s*]*(?:[\r\n]+|$)", re.MULTILINE),
        re.compile(r"^[|\-\s]+(?:[\r\n]+|$)", re.MULTILINE),
    ]
    for pattern in patterns:
        content = pattern.sub("", content).strip()
        content = re.sub(r"^#+.*", "", content).strip()
    return content
