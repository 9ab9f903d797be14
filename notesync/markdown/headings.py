from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from notesync.utils.errors import MalformedHeadingError

# A heading line: one or more "#", optional spaces, then the heading text
HEADING_RE = re.compile(r"^(#+)[ \t]*([^\n]+)", re.MULTILINE)
_WS_RE = re.compile(r"\s")
_TAG_RE = re.compile(r"[^a-z0-9/]")


@dataclass(frozen=True)
class Heading:
    text: str
    level: int
    anchor: str


@dataclass(frozen=True)
class Section:
    heading: Heading


def make_heading(text: str, level: int = 1) -> Heading:
    return Heading(text=text, level=level, anchor=_WS_RE.sub("_", text))


def section_from_heading_text(heading_text: str, level: int = 1) -> Section:
    return Section(heading=make_heading(heading_text, level=level))


def headings_of(text: str) -> List[Heading]:
    """Return the headings found in `text`, in document order."""
    try:
        return [
            make_heading(m.group(2).strip(), level=len(m.group(1)))
            for m in HEADING_RE.finditer(text)
        ]
    except (TypeError, AttributeError) as exc:
        raise MalformedHeadingError(f"cannot read headings: {exc}") from exc


def filter_by_min_level(headings: Iterable[Heading], min_level: int) -> List[Heading]:
    return [h for h in headings if h.level >= min_level and h.text.strip()]


def leaf_sections(headings: Sequence[Heading]) -> List[Heading]:
    """Headings without sub-headings: the next heading is not deeper.

    The last heading is always a leaf.
    """
    leaves: List[Heading] = []
    for current, following in zip(headings, headings[1:]):
        if following.level <= current.level:
            leaves.append(current)
    if headings:
        leaves.append(headings[-1])
    return leaves


def render_heading_line(heading: Heading) -> str:
    return f"{'#' * heading.level} {heading.text}\n"


def render_headings_as_text(headings: Iterable[Heading]) -> str:
    return "".join(render_heading_line(h) for h in headings)


def tag_name_from_text(text: Optional[str]) -> Optional[str]:
    """Lower-cased, dasherized tag name ("Sci Fi" -> "sci-fi")."""
    if not text:
        return None
    return _TAG_RE.sub("-", text.lower().strip())
