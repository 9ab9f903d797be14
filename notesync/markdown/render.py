from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Tuple

from notesync.markdown.headings import headings_of
from notesync.markdown.ranges import HeadingRef, extract_section

if TYPE_CHECKING:
    from notesync.store.buffered import BufferedNoteStore
    from notesync.store.remote import NoteHandle

logger = logging.getLogger(__name__)


@dataclass
class Highlight:
    id: str
    text: str
    highlighted_at: Optional[str] = None
    note: Optional[str] = None
    color: Optional[str] = None


def iso_date(value: Optional[str]) -> str:
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d")
    except ValueError:
        return value


def render_sections_as_markdown(
    entries: Iterable[Tuple[str, Any]],
    render_value: Callable[[Any], str],
) -> str:
    """Each key becomes a level 2 heading followed by render_value(value).

    Used to turn a dashboard or a book note into markdown that can be written
    back section by section, which keeps every single write small.
    """
    markdown = ""
    for key, value in entries:
        markdown += f"## {key}\n"
        markdown += render_value(value)
    return markdown


def render_highlights(
    highlights: Iterable[Highlight],
    format_date: Callable[[Optional[str]], str] = iso_date,
) -> str:
    blocks: List[str] = []
    for hl in highlights:
        result = f"> ### {hl.text}\n\n"
        if hl.note:
            result += f"**Note**: {hl.note}\n"
        if hl.color:
            result += f"**Highlight color**: {hl.color}\n"
        result += f"**Highlighted at**: {format_date(hl.highlighted_at)} (#H{hl.id})\n"
        blocks.append(result)
    return "\n\n".join(blocks)


async def sections_from_markdown(
    store: "BufferedNoteStore",
    note: "NoteHandle",
    heading_label: HeadingRef,
    parse_entries: Callable[[str], Optional[List[Any]]],
) -> List[Any]:
    """Visit every sub-section of `heading_label` and flatten what parse_entries
    returns for each of them (e.g. a book list split into year sections).
    """
    logger.debug("sections_from_markdown(%s, %r)", note.uuid, heading_label)
    content = await store.note_content(note)
    main_section = extract_section(content, heading_label)

    result: List[Any] = []
    for heading in headings_of(main_section):
        entries = parse_entries(extract_section(main_section, heading))
        if not entries:
            continue
        result.extend(entries)
    return result
