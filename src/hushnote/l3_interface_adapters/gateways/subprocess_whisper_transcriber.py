"""Gateway: whisper transcriber in a subprocess — avoids GIL contention."""

from __future__ import annotations

import multiprocessing as mp
import os
from multiprocessing.connection import Connection
from pathlib import Path
from typing import Any

from hushnote.l1_entities.transcript import TranscriptSegment

_LOAD_TIMEOUT = 300  # seconds; large models take a while to map
_TRANSCRIBE_TIMEOUT = 3600


def _subprocess_entry(model_path: str, language: str, window_duration: float, conn: Any) -> None:
    """Subprocess main: load model via WhisperTranscriber, loop on requests.

    Permanently redirects C-level stdout/stderr to /dev/null so whisper.cpp's
    fprintf() calls do not reach the parent's terminal.
    """
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, 1)
    os.dup2(devnull, 2)
    os.close(devnull)

    try:
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import (  # noqa: PLC0415 -- deferred: subprocess only
            WhisperTranscriber,
        )

        transcriber = WhisperTranscriber(language=language, window_duration=window_duration)
        transcriber.load_model(model_path)
    except Exception as e:
        conn.send({'status': 'error', 'error': str(e)})
        conn.close()
        return

    conn.send({'status': 'ready'})

    while True:
        req = conn.recv()
        if req is None:
            break
        try:
            segments = transcriber.transcribe(Path(req['audio_path']))
            conn.send({'status': 'ok', 'segments': [seg.model_dump() for seg in segments]})
        except Exception as e:
            conn.send({'status': 'error', 'error': str(e)})

    transcriber.close()
    conn.close()


class SubprocessWhisperTranscriber:
    """Whisper transcriber that runs inference in a child process.

    whisper.cpp's C extension holds the Python GIL for the full duration of
    inference. Running it in a subprocess keeps the parent's event loop
    responsive while a long file is transcribed.
    """

    def __init__(self, language: str = 'auto', window_duration: float = 30.0) -> None:
        self._language = language
        self._window_duration = window_duration
        self._process: Any = None  # SpawnProcess; the context returns a subclass
        self._conn: Connection | None = None

    def load_model(self, model_path: str) -> None:
        ctx = mp.get_context('spawn')
        parent_conn, child_conn = ctx.Pipe(duplex=True)
        self._process = ctx.Process(
            target=_subprocess_entry,
            args=(model_path, self._language, self._window_duration, child_conn),
            daemon=True,
        )
        self._process.start()
        child_conn.close()  # parent only needs its own end
        self._conn = parent_conn

        try:
            if not self._conn.poll(timeout=_LOAD_TIMEOUT):
                raise RuntimeError('Timeout waiting for model load')
            result = self._conn.recv()
        except EOFError as e:
            raise RuntimeError('Whisper subprocess exited unexpectedly during model load') from e

        if result.get('status') != 'ready':
            raise RuntimeError(f'Whisper subprocess failed to init: {result.get("error", "unknown")}')

    def transcribe(self, audio_path: Path) -> list[TranscriptSegment]:
        if self._conn is None:
            raise RuntimeError('Model not loaded. Call load_model() first.')
        self._conn.send({'audio_path': str(audio_path)})
        try:
            if not self._conn.poll(timeout=_TRANSCRIBE_TIMEOUT):
                raise RuntimeError('Timeout waiting for transcription result')
            result = self._conn.recv()
        except EOFError as e:
            raise RuntimeError('Whisper subprocess exited unexpectedly during transcription') from e

        if result.get('status') == 'error':
            raise RuntimeError(result['error'])
        return [TranscriptSegment.model_validate(seg) for seg in result.get('segments', [])]

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.send(None)
            except Exception:  # noqa: S110 pipe may already be closed
                pass
            try:
                self._conn.close()
            except Exception:  # noqa: S110 already closed
                pass
            self._conn = None
        if self._process is not None:
            self._process.join(timeout=5)
            if self._process.is_alive():
                self._process.terminate()
                self._process.join(timeout=1)  # reap zombie after SIGTERM
            self._process = None
