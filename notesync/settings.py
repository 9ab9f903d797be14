from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    # Notes kept in memory before a forced flush
    max_notes_in_memory: int = Field(default=10, ge=1)


def load_settings() -> Settings:
    load_dotenv()
    raw = os.getenv("NOTESYNC_MAX_NOTES_IN_MEMORY")
    if raw:
        return Settings(max_notes_in_memory=raw)
    return Settings()
