"""Gateway: whisper.cpp transcriber — implements Transcriber port."""

from __future__ import annotations

import contextlib
import os
from pathlib import Path

import numpy as np
from pywhispercpp.model import Model

from hushnote.l1_entities.audio_constants import SAMPLE_RATE
from hushnote.l1_entities.transcript import TranscriptSegment
from hushnote.l3_interface_adapters.gateways.audio_file_loader import load_audio_file

AUTO_LANGUAGE = 'auto'


@contextlib.contextmanager
def _suppress_c_stdout():
    """Redirect C-level stdout and stderr to /dev/null.

    whisper.cpp prints init/progress messages directly via C fprintf,
    bypassing Python's sys.stdout and cluttering CLI output.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    old_stdout = os.dup(1)
    old_stderr = os.dup(2)
    try:
        os.dup2(devnull, 1)
        os.dup2(devnull, 2)
        yield
    finally:
        os.dup2(old_stdout, 1)
        os.dup2(old_stderr, 2)
        os.close(devnull)
        os.close(old_stdout)
        os.close(old_stderr)


def split_windows(audio: np.ndarray, window_duration: float) -> list[np.ndarray]:
    """Cut decoded audio into consecutive windows of *window_duration* seconds."""
    window = max(int(SAMPLE_RATE * window_duration), 1)
    return [audio[start : start + window] for start in range(0, len(audio), window)]


class WhisperTranscriber:
    """pywhispercpp adapter. Decodes the file, transcribes it window by window,
    and reports one segment per window with its audio seconds and language."""

    def __init__(self, language: str = AUTO_LANGUAGE, window_duration: float = 30.0) -> None:
        self._language = language
        self._window_duration = window_duration
        self._model: Model | None = None

    def close(self) -> None:
        """Explicitly release the model, suppressing C-level teardown noise."""
        if self._model is not None:
            with _suppress_c_stdout():
                del self._model
                self._model = None

    def load_model(self, model_path: str) -> None:
        with _suppress_c_stdout():
            self._model = Model(model_path, print_progress=False, print_realtime=False)

    def transcribe(self, audio_path: Path) -> list[TranscriptSegment]:
        if self._model is None:
            raise RuntimeError('Model not loaded. Call load_model() first.')

        audio = load_audio_file(audio_path)
        return [self._transcribe_window(window) for window in split_windows(audio, self._window_duration)]

    def _transcribe_window(self, window: np.ndarray) -> TranscriptSegment:
        language = self._language
        with _suppress_c_stdout():
            if language == AUTO_LANGUAGE:
                (language, _prob), _ = self._model.auto_detect_language(window)
            raw_segments = self._model.transcribe(window, language=language)

        text = ' '.join(seg.text.strip() for seg in raw_segments if seg.text.strip())
        return TranscriptSegment(
            text=text,
            language=language or None,
            audio_seconds=len(window) / SAMPLE_RATE,
        )
