from __future__ import annotations

import uuid as uuid_lib
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, runtime_checkable

from notesync.markdown.headings import Section, headings_of
from notesync.markdown.ranges import locate

LOCAL_UUID_MARKER = "local-"


def is_local_uuid(uuid: str) -> bool:
    """Notes that were never persisted to the server carry a "local-" uuid."""
    return LOCAL_UUID_MARKER in uuid


@runtime_checkable
class NoteHandle(Protocol):
    uuid: str
    name: str


@dataclass(frozen=True)
class NoteRef:
    uuid: str
    name: str = ""


@runtime_checkable
class RemoteNoteStore(Protocol):
    async def fetch_content(self, note: NoteHandle) -> str:
        ...

    async def list_sections(self, note: NoteHandle) -> List[Section]:
        ...

    async def replace_content(self, note: NoteHandle, text: str, section: Optional[Section] = None) -> None:
        ...

    async def insert_content(self, note: NoteHandle, text: str, at_end: bool = False) -> None:
        ...

    async def find_note(self, uuid: str) -> NoteHandle:
        ...

    async def replace_note_content(self, uuid: str, text: str, section: Optional[Section] = None) -> None:
        ...


@dataclass
class _StoredNote:
    name: str
    content: str


def _splice(content: str, text: str, section: Optional[Section]) -> str:
    if section is None:
        return text
    rng = locate(content, section)
    if not rng.found:
        raise KeyError(section.heading.text)
    return f"{content[:rng.start_index]}{text}{content[rng.end_index:]}"


@dataclass
class InMemoryNoteStore:
    """Dict-backed stand-in for the host's note storage.

    Every write is recorded in `writes` as (operation, uuid, text, section text).
    `persist()` mimics the host assigning a server uuid to a local note.
    """

    notes: Dict[str, _StoredNote] = field(default_factory=dict)
    aliases: Dict[str, str] = field(default_factory=dict)
    writes: List[tuple] = field(default_factory=list)
    fetches: List[str] = field(default_factory=list)

    def add(self, uuid: str, content: str = "", name: str = "") -> NoteRef:
        self.notes[uuid] = _StoredNote(name=name or uuid, content=content)
        return NoteRef(uuid=uuid, name=name or uuid)

    def persist(self, local_uuid: str, new_uuid: Optional[str] = None) -> str:
        new_uuid = new_uuid or str(uuid_lib.uuid4())
        self.notes[new_uuid] = self.notes.pop(local_uuid)
        self.aliases[local_uuid] = new_uuid
        return new_uuid

    def content_of(self, uuid: str) -> str:
        return self._get(uuid).content

    def _resolve(self, uuid: str) -> str:
        return self.aliases.get(uuid, uuid)

    def _get(self, uuid: str) -> _StoredNote:
        return self.notes[self._resolve(uuid)]

    async def fetch_content(self, note: NoteHandle) -> str:
        self.fetches.append(note.uuid)
        return self._get(note.uuid).content

    async def list_sections(self, note: NoteHandle) -> List[Section]:
        return [Section(heading=h) for h in headings_of(self._get(note.uuid).content)]

    async def replace_content(self, note: NoteHandle, text: str, section: Optional[Section] = None) -> None:
        await self.replace_note_content(note.uuid, text, section=section)

    async def insert_content(self, note: NoteHandle, text: str, at_end: bool = False) -> None:
        stored = self._get(note.uuid)
        self.writes.append(("insert", note.uuid, text, None))
        stored.content = f"{stored.content}{text}" if at_end else f"{text}{stored.content}"

    async def find_note(self, uuid: str) -> NoteRef:
        resolved = self._resolve(uuid)
        return NoteRef(uuid=resolved, name=self.notes[resolved].name)

    async def replace_note_content(self, uuid: str, text: str, section: Optional[Section] = None) -> None:
        stored = self._get(uuid)
        self.writes.append(("replace", uuid, text, section.heading.text if section else None))
        stored.content = _splice(stored.content, text, section)
