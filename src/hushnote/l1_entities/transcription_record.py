"""Transcription record entity — the only persisted object."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class RecordSource(enum.Enum):
    FILE = 'file'
    RECORDING = 'recording'


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TranscriptionRecord(BaseModel):
    """A transcribed audio file and its derived text.

    Frozen: changes are made with ``model_copy(update=...)`` and written back
    through ``RecordStore.update`` so every mutation has a single path.
    ``audio_filename`` is a logical name resolved by the audio blob store,
    never an absolute path.
    """

    model_config = {'frozen': True}

    id: str = Field(default_factory=_new_id)
    audio_filename: str = Field(min_length=1)
    title: str | None = None
    original_filename: str | None = None
    text: str | None = None
    language: str | None = None
    duration: float | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    is_transcribing: bool = False
    source: RecordSource = RecordSource.FILE
    summary: str | None = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def display_title(self) -> str:
        return self.title or self.original_filename or self.audio_filename
