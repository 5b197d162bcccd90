"""Transcript segment entity and duration formatting."""

from __future__ import annotations

from pydantic import BaseModel, Field


def format_duration(seconds: float | None) -> str:
    """Format seconds as HH:MM:SS. Unknown durations render as --:--:--."""
    if seconds is None:
        return '--:--:--'
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f'{hours:02d}:{minutes:02d}:{secs:02d}'


class TranscriptSegment(BaseModel):
    """One ordered piece of speech-recognition output."""

    text: str
    language: str | None = None
    audio_seconds: float = Field(default=0.0, ge=0.0, description='Seconds of input audio covered by this segment')
