"""Gateway: audio decoder — reads any ffmpeg-supported format into 16 kHz mono PCM."""

from __future__ import annotations

import shutil
import subprocess  # noqa: S404 -- intentional: shells out to ffmpeg with a fixed arg list, not shell=True
from pathlib import Path

import numpy as np

from hushnote.l1_entities.audio_constants import SAMPLE_RATE

_FFMPEG_TIMEOUT = 600  # seconds; long recordings decode slowly on small machines


def _ffmpeg_command(path: Path) -> list[str]:
    return ['ffmpeg', '-nostdin', '-i', str(path), '-ar', str(SAMPLE_RATE), '-ac', '1', '-f', 'f32le', '-v', 'quiet', 'pipe:1']


def load_audio_file(path: Path) -> np.ndarray:
    """Decode *path* with ffmpeg, returning float32 mono samples at SAMPLE_RATE.

    Raises:
        FileNotFoundError: the audio file does not exist.
        RuntimeError: ffmpeg is missing, failed, timed out, or decoded nothing.
    """
    if not path.exists():
        raise FileNotFoundError(f'Audio file not found: {path}')

    if shutil.which('ffmpeg') is None:
        raise RuntimeError(
            'ffmpeg is required but not found on PATH.\n  macOS:  brew install ffmpeg\n  Debian: apt install ffmpeg'
        )

    try:
        result = subprocess.run(_ffmpeg_command(path), capture_output=True, timeout=_FFMPEG_TIMEOUT)  # noqa: S603
    except subprocess.TimeoutExpired as exc:
        raise RuntimeError(f'ffmpeg timed out after {_FFMPEG_TIMEOUT}s decoding: {path.name}') from exc
    except OSError as exc:
        raise RuntimeError(f'Failed to launch ffmpeg: {exc}') from exc

    if result.returncode != 0:
        stderr = result.stderr.decode('utf-8', errors='replace').strip()
        raise RuntimeError(f'ffmpeg exited with code {result.returncode} for: {path.name}\n{stderr}')

    audio = np.frombuffer(result.stdout, dtype=np.float32)
    if audio.size == 0:
        raise RuntimeError(f'No decodable audio in: {path.name}')
    return audio
