from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from notesync.journal.logger import FlushJournal
from notesync.markdown.headings import (
    Heading,
    Section,
    filter_by_min_level,
    headings_of,
    leaf_sections,
    render_headings_as_text,
    section_from_heading_text,
)
from notesync.markdown.ranges import HeadingRef, extract_section, locate, normalize_heading_name
from notesync.settings import Settings
from notesync.store.remote import NoteHandle, RemoteNoteStore, is_local_uuid
from notesync.utils.error_logger import ErrorLogger
from notesync.utils.errors import SectionNotFoundError

logger = logging.getLogger(__name__)

_LEADING_HASHES_RE = re.compile(r"^#*")


class BufferedNoteStore:
    """Working copy of notes standing between callers and the host's note storage.

    With buffering on, reads load a note once and section edits are spliced
    into the in-memory text. flush_local_notes() writes everything back: first
    the table of contents (headings only), then one write per leaf section, so
    no single write exceeds the host's limits.
    """

    def __init__(
        self,
        remote: RemoteNoteStore,
        settings: Optional[Settings] = None,
        buffered: bool = True,
        journal: Optional[FlushJournal] = None,
        error_logger: Optional[ErrorLogger] = None,
    ) -> None:
        self.remote = remote
        self.settings = settings or Settings()
        self.buffered = buffered
        self.journal = journal or FlushJournal()
        self.error_logger = error_logger or ErrorLogger()
        self._contents: Dict[str, str] = {}

    async def __aenter__(self) -> "BufferedNoteStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        # Не сбрасываем буфер, если блок завершился ошибкой
        if exc_type is None:
            await self.flush_local_notes()

    # Buffer bookkeeping

    def buffered_uuids(self) -> List[str]:
        return list(self._contents)

    def is_buffered(self, uuid: str) -> bool:
        return uuid in self._contents

    def rename(self, old_uuid: str, new_uuid: str) -> None:
        """Move a buffered note to its new uuid in one step."""
        if old_uuid == new_uuid or old_uuid not in self._contents:
            return
        self._contents[new_uuid] = self._contents.pop(old_uuid)

    # Reads

    async def note_content(self, note: NoteHandle) -> str:
        if not self.buffered:
            return await self.remote.fetch_content(note)
        if note.uuid not in self._contents:
            # Don't keep too many notes in memory
            if len(self._contents) >= self.settings.max_notes_in_memory:
                logger.info("buffer full (%d notes), flushing before loading %s", len(self._contents), note.uuid)
                await self.flush_local_notes()
            self._contents[note.uuid] = await self.remote.fetch_content(note)
        return self._contents[note.uuid]

    async def section_content(self, note: NoteHandle, heading: HeadingRef) -> str:
        return extract_section(await self.note_content(note), heading)

    async def sections(self, note: NoteHandle, min_level: Optional[int] = None) -> List[Section]:
        if self.buffered:
            content = await self.note_content(note)
            sections = [Section(heading=h) for h in headings_of(content)]
        else:
            sections = await self.remote.list_sections(note)
        if min_level is None:
            return sections
        kept = filter_by_min_level([s.heading for s in sections], min_level)
        return [Section(heading=h) for h in kept]

    # Writes

    @staticmethod
    def _resolve_level(heading: HeadingRef, level: Optional[int]) -> int:
        if isinstance(heading, Section):
            return heading.heading.level
        if isinstance(heading, Heading):
            return heading.level
        if level:
            return level
        return len(_LEADING_HASHES_RE.match(heading.strip()).group(0)) or 1

    async def replace_content(
        self,
        note: NoteHandle,
        heading: HeadingRef,
        new_content: str,
        level: Optional[int] = None,
    ) -> None:
        """Replace the body of a section, keeping its heading line."""
        name = normalize_heading_name(heading)
        target = section_from_heading_text(name, level=self._resolve_level(heading, level))
        logger.debug("replace_content(%s, %r) buffered=%s", note.uuid, name, self.buffered)
        if not self.buffered:
            await self.remote.replace_content(note, new_content, section=target)
            return

        body = await self.note_content(note)
        rng = locate(body, heading)
        if not rng.found:
            err = SectionNotFoundError(note.uuid, name, note_name=getattr(note, "name", None))
            self.error_logger.log(route="replace_content", err=err)
            raise err
        self._contents[note.uuid] = f"{body[:rng.start_index]}\n{new_content}{body[rng.end_index:]}"

    async def insert_content(self, note: NoteHandle, new_content: str, at_end: bool = False) -> None:
        if not self.buffered:
            await self.remote.insert_content(note, new_content, at_end=at_end)
            return
        old_content = await self.note_content(note)
        if at_end:
            self._contents[note.uuid] = f"{old_content.strip()}\n{new_content}"
        else:
            self._contents[note.uuid] = f"{new_content.strip()}\n{old_content}"

    # Flush

    async def flush_local_notes(self) -> int:
        """Write every buffered note back to the host and drop it from memory.

        Returns the number of notes flushed. A remote failure is logged and
        re-raised; notes not yet flushed stay buffered, so the call can be retried.
        """
        flushed = 0
        for uuid in list(self._contents):
            try:
                await self._flush_note(uuid)
            except Exception as exc:
                self.error_logger.log(route="flush_local_notes", err=exc, extra={"uuid": uuid})
                raise
            flushed += 1
        return flushed

    async def _flush_note(self, uuid: str) -> None:
        logger.info("Flushing %s...", uuid)
        note = await self.remote.find_note(uuid)
        content = self._contents[uuid]
        if not is_local_uuid(note.uuid):
            # The note may have been persisted meanwhile; its uuid changed
            self.rename(uuid, note.uuid)

        # Headings only first, so every section exists before it is written
        headings = headings_of(content)
        toc = render_headings_as_text(headings)
        await self.remote.replace_note_content(note.uuid, toc)
        self.journal.log(note.uuid, "toc", toc)

        for heading in leaf_sections(headings):
            body = extract_section(content, heading)
            await self.remote.replace_note_content(note.uuid, body, section=Section(heading=heading))
            self.journal.log(note.uuid, "section", body, section=heading.text)

        self._contents.pop(uuid, None)
        self._contents.pop(note.uuid, None)
