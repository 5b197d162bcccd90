"""Gateway: HuggingFace model resolver — implements ModelResolver port."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from huggingface_hub import hf_hub_download
from pywhispercpp.constants import MODELS_DIR

from hushnote.l1_entities.errors import ModelResolutionError

log = logging.getLogger('hn.models')

WHISPER_CPP_REPO = 'ggerganov/whisper.cpp'
WHISPER_CPP_MODELS = {
    'base': 'ggml-base.bin',
    'base.en': 'ggml-base.en.bin',
    'small': 'ggml-small.bin',
    'small.en': 'ggml-small.en.bin',
    'small-q8_0': 'ggml-small-q8_0.bin',
    'medium': 'ggml-medium.bin',
    'medium.en': 'ggml-medium.en.bin',
    'medium-q8_0': 'ggml-medium-q8_0.bin',
    'large-v2': 'ggml-large-v2.bin',
    'large-v3': 'ggml-large-v3.bin',
    'large-v3-q5_0': 'ggml-large-v3-q5_0.bin',
    'large-v3-turbo': 'ggml-large-v3-turbo.bin',
    'large-v3-turbo-q8_0': 'ggml-large-v3-turbo-q8_0.bin',
}


def _make_progress_class(callback: Callable[[int], None]) -> type:
    """Create a tqdm-compatible class that reports download progress via *callback*."""

    class _ProgressReporter:
        def __init__(self, *args, **kwargs):
            self.total: int = kwargs.get('total', 0) or 0
            self.n: int = 0
            if self.total > 0:
                callback(0)

        def update(self, n: int = 1) -> None:
            self.n += n
            if self.total > 0:
                callback(min(int(self.n / self.total * 100), 100))

        def close(self) -> None:
            pass

        def set_description(self, *a, **kw) -> None:
            pass

        def set_description_str(self, *a, **kw) -> None:
            pass

        def refresh(self) -> None:
            pass

        def __enter__(self):
            return self

        def __exit__(self, *args):
            self.close()

    return _ProgressReporter


class HfModelResolver:
    """Resolves whisper model names to local ggml files, downloading from HF on first use."""

    def __init__(self, on_progress: Callable[[int], None] | None = None, cache_dir: Path | None = None) -> None:
        self._on_progress = on_progress
        self._cache_dir = cache_dir or Path(MODELS_DIR) / 'whisper-cpp'

    @staticmethod
    def available_models() -> list[str]:
        return list(WHISPER_CPP_MODELS)

    def resolve(self, model_name: str) -> str:
        if Path(model_name).is_absolute():
            if not Path(model_name).exists():
                raise ModelResolutionError(f'Model file not found: {model_name}')
            return model_name

        if model_name not in WHISPER_CPP_MODELS:
            raise ModelResolutionError(
                f'Unknown whisper model {model_name!r}. Choose one of: {", ".join(WHISPER_CPP_MODELS)}'
            )

        filename = WHISPER_CPP_MODELS[model_name]
        local_path = self._cache_dir / filename
        if local_path.exists():
            return str(local_path)

        log.info('Downloading %s from %s', filename, WHISPER_CPP_REPO)
        kwargs: dict = dict(repo_id=WHISPER_CPP_REPO, filename=filename, local_dir=self._cache_dir)
        if self._on_progress is not None:
            kwargs['tqdm_class'] = _make_progress_class(self._on_progress)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            return hf_hub_download(**kwargs)
        except Exception as exc:
            raise ModelResolutionError(f'Failed to download {model_name}: {exc}') from exc
