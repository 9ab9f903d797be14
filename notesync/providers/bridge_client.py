from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import httpx

from notesync.markdown.headings import Section, make_heading
from notesync.store.remote import NoteHandle, NoteRef
from notesync.utils.errors import RemoteStoreError

NOTESYNC_BRIDGE_URL = os.getenv("NOTESYNC_BRIDGE_URL", "http://127.0.0.1:8765")


class BridgeClient:
    """Host note storage reached over the plugin's HTTP bridge."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = NOTESYNC_BRIDGE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.token = token if token is not None else os.getenv("NOTESYNC_BRIDGE_TOKEN")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Any:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            r = await client.request(method, path, headers=self._headers(), json=json)
            try:
                r.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise RemoteStoreError(e.response.status_code, e.response.text) from e
            if not r.content:
                return None
            return r.json()

    @staticmethod
    def _section_payload(section: Optional[Section]) -> Optional[Dict[str, Any]]:
        if section is None:
            return None
        h = section.heading
        return {"heading": {"text": h.text, "level": h.level, "anchor": h.anchor}}

    async def find_note(self, uuid: str) -> NoteRef:
        data = await self._request("GET", f"/notes/{uuid}")
        return NoteRef(uuid=data["uuid"], name=data.get("name") or "")

    async def fetch_content(self, note: NoteHandle) -> str:
        data = await self._request("GET", f"/notes/{note.uuid}/content")
        return (data or {}).get("content") or ""

    async def list_sections(self, note: NoteHandle) -> List[Section]:
        data = await self._request("GET", f"/notes/{note.uuid}/sections") or []
        sections: List[Section] = []
        for item in data:
            heading = item.get("heading") or {}
            # Тело секции до первого заголовка приходит без heading
            if not heading.get("text"):
                continue
            sections.append(Section(heading=make_heading(heading["text"], level=int(heading.get("level") or 1))))
        return sections

    async def replace_note_content(self, uuid: str, text: str, section: Optional[Section] = None) -> None:
        payload: Dict[str, Any] = {"content": text}
        target = self._section_payload(section)
        if target:
            payload["section"] = target
        await self._request("PUT", f"/notes/{uuid}/content", json=payload)

    async def replace_content(self, note: NoteHandle, text: str, section: Optional[Section] = None) -> None:
        await self.replace_note_content(note.uuid, text, section=section)

    async def insert_content(self, note: NoteHandle, text: str, at_end: bool = False) -> None:
        await self._request("POST", f"/notes/{note.uuid}/insert", json={"content": text, "at_end": at_end})
