"""Port: speech-to-text transcription engine."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from hushnote.l1_entities.transcript import TranscriptSegment


class Transcriber(Protocol):
    """Abstract speech-recognition capability. Zero framework types leak through.

    Not reentrant: callers must not overlap ``transcribe`` calls on one instance.
    """

    def load_model(self, model_path: str) -> None:
        """Load the transcription model from the given path."""
        ...

    def transcribe(self, audio_path: Path) -> list[TranscriptSegment]:
        """Transcribe an audio file into ordered segments."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
