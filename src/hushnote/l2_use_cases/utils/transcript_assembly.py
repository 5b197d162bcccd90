"""Fold ordered recognition segments into record fields."""

from __future__ import annotations

from dataclasses import dataclass

from hushnote.l1_entities.transcript import TranscriptSegment


@dataclass(frozen=True)
class AssembledTranscript:
    text: str
    language: str | None
    duration: float


def assemble_transcript(segments: list[TranscriptSegment]) -> AssembledTranscript:
    """Join segment texts with single spaces, take the first reported language, sum audio seconds."""
    texts = [seg.text.strip() for seg in segments if seg.text.strip()]
    language = next((seg.language for seg in segments if seg.language), None)
    return AssembledTranscript(
        text=' '.join(texts).strip(),
        language=language,
        duration=sum(seg.audio_seconds for seg in segments),
    )
