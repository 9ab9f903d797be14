from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional, Union

from notesync.markdown.headings import HEADING_RE, Heading, Section

logger = logging.getLogger(__name__)

_LEADING_HASHES_RE = re.compile(r"^#+\s*")

HeadingRef = Union[str, Heading, Section]


@dataclass(frozen=True)
class SectionRange:
    start_index: Optional[int]
    end_index: int

    @property
    def found(self) -> bool:
        return self.start_index is not None


def normalize_heading_name(heading: HeadingRef) -> str:
    """Heading text to match against; "## Title" loses its "#"s.

    Heading and Section text is used as is, so "#1 Favorite" stays intact.
    """
    if isinstance(heading, Section):
        heading = heading.heading
    if isinstance(heading, Heading):
        return heading.text.strip()
    return _LEADING_HASHES_RE.sub("", heading.strip()).strip()


def locate(text: str, heading: HeadingRef) -> SectionRange:
    """Range owned by `heading`: after its line, up to the next heading at the same or a shallower level.

    Duplicate headings resolve to the first occurrence.
    """
    name = normalize_heading_name(heading)
    matches = list(HEADING_RE.finditer(text))
    target = next((m for m in matches if m.group(2).strip() == name), None)
    if target is None:
        # Not always an error: callers decide whether absence matters
        logger.warning("Could not find section %r that was looked up", name)
        return SectionRange(start_index=None, end_index=len(text))

    level = len(target.group(1))
    following = next(
        (m for m in matches if m.start() > target.start() and len(m.group(1)) <= level),
        None,
    )
    end_index = following.start() if following else len(text)
    start_index = min(target.end() + 1, len(text))
    return SectionRange(start_index=start_index, end_index=end_index)


def extract_section(text: str, heading: HeadingRef) -> str:
    """Content of a section, or "" when the heading is absent (check with section_exists)."""
    rng = locate(text, heading)
    if not rng.found:
        return ""
    return text[rng.start_index:rng.end_index]


def section_exists(text: str, heading: HeadingRef) -> bool:
    name = normalize_heading_name(heading)
    return any(m.group(2).strip() == name for m in HEADING_RE.finditer(text))
