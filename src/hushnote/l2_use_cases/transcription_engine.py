"""Transcription engine — model lifecycle state machine with single-flight inference."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from hushnote.l1_entities.engine_state import EngineState, EngineStatus
from hushnote.l1_entities.errors import (
    ModelLoadError,
    NotInitializedError,
    NotReadyError,
    TranscriptionFailedError,
)
from hushnote.l1_entities.transcription_record import TranscriptionRecord
from hushnote.l2_use_cases.ports.audio_blob_store import AudioBlobStore
from hushnote.l2_use_cases.ports.model_resolver import ModelResolver
from hushnote.l2_use_cases.ports.transcriber import Transcriber
from hushnote.l2_use_cases.utils.transcript_assembly import assemble_transcript

log = logging.getLogger('hn.engine')


class TranscriptionEngine:
    """Owns one loaded speech model and runs at most one inference at a time.

    States: IDLE -> LOADING -> READY <-> TRANSCRIBING, LOADING -> FAILED.
    ``unload()`` returns to IDLE from anywhere.

    All public methods must be called from the coordinating event loop; the
    blocking model load and inference run in worker threads. State checks and
    transitions happen between awaits, so a second ``transcribe()`` arriving
    while one is in flight sees TRANSCRIBING and fails fast with NotReadyError.
    """

    def __init__(
        self,
        model_name: str,
        resolver: ModelResolver,
        transcriber_factory: Callable[[], Transcriber],
        blob_store: AudioBlobStore,
    ) -> None:
        self._model_name = model_name
        self._resolver = resolver
        self._transcriber_factory = transcriber_factory
        self._blob_store = blob_store

        self._state = EngineState.idle()
        self._transcriber: Transcriber | None = None
        self._generation = 0  # bumped by unload(); stale loads/runs compare against it

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def model_name(self) -> str:
        return self._model_name

    def _transition(self, new_state: EngineState) -> None:
        if not self._state.can_transition_to(new_state.status):
            raise RuntimeError(f'Illegal engine transition {self._state.status.value} -> {new_state.status.value}')
        log.debug('Engine %s -> %s', self._state.status.value, new_state)
        self._state = new_state

    # -- Lifecycle --

    async def load(self) -> None:
        """Load the configured model. No-op unless IDLE; failures leave the engine FAILED."""
        if self._state.status is not EngineStatus.IDLE:
            return

        generation = self._generation
        model_name = self._model_name
        self._transition(EngineState(EngineStatus.LOADING))
        log.info('Loading whisper model %s', model_name)

        try:
            transcriber = await asyncio.to_thread(self._load_blocking, model_name)
        except Exception as exc:
            if generation != self._generation:
                log.info('Discarding failed load of %s after unload', model_name)
                return
            log.error('Model load failed: %s', exc, exc_info=True)
            self._transition(EngineState.failed(_load_error(model_name, exc)))
            return

        if generation != self._generation:
            log.info('Discarding load of %s after unload', model_name)
            await asyncio.to_thread(transcriber.close)
            return

        self._transcriber = transcriber
        self._transition(EngineState(EngineStatus.READY))
        log.info('Whisper model %s ready', model_name)

    def _load_blocking(self, model_name: str) -> Transcriber:
        model_path = self._resolver.resolve(model_name)
        transcriber = self._transcriber_factory()
        try:
            transcriber.load_model(model_path)
        except Exception:
            transcriber.close()
            raise
        return transcriber

    def unload(self) -> None:
        """Release the model and reset to IDLE. An in-flight run finishes but the engine stays IDLE."""
        self._generation += 1
        transcriber = self._transcriber
        self._transcriber = None
        was_transcribing = self._state.status is EngineStatus.TRANSCRIBING
        self._transition(EngineState.idle())
        if transcriber is not None and not was_transcribing:
            transcriber.close()
        log.info('Engine unloaded (model %s)', self._model_name)

    def select_model(self, model_name: str) -> None:
        """Switch models. The new one loads on the next load() or transcribe()."""
        if model_name == self._model_name:
            return
        log.info('Switching whisper model %s -> %s', self._model_name, model_name)
        self._model_name = model_name
        self.unload()

    # -- Inference --

    async def transcribe(self, record: TranscriptionRecord) -> TranscriptionRecord:
        """Transcribe the record's audio. Returns a copy with text, language and duration set."""
        if self._state.status is EngineStatus.IDLE:
            await self.load()

        status = self._state.status
        if status in (EngineStatus.LOADING, EngineStatus.TRANSCRIBING, EngineStatus.FAILED):
            raise NotReadyError(f'The transcription engine is not ready ({self._state}).') from self._state.error
        transcriber = self._transcriber
        if transcriber is None:
            raise NotInitializedError()

        generation = self._generation
        self._transition(EngineState(EngineStatus.TRANSCRIBING))
        try:
            audio_path = self._blob_store.resolve(record.audio_filename)
            log.info('Transcribing record %s (%s)', record.id, audio_path.name)
            segments = await asyncio.to_thread(transcriber.transcribe, audio_path)
        except Exception as exc:
            log.error('Transcription of record %s failed: %s', record.id, exc, exc_info=True)
            raise TranscriptionFailedError(f'Transcription failed: {exc}') from exc
        finally:
            self._finish_run(generation, transcriber)

        assembled = assemble_transcript(segments)
        log.info(
            'Record %s transcribed: %d segments, %.1fs audio, language=%s',
            record.id,
            len(segments),
            assembled.duration,
            assembled.language,
        )
        return record.model_copy(
            update={
                'text': assembled.text,
                'language': assembled.language,
                'duration': assembled.duration,
            }
        )

    def _finish_run(self, generation: int, transcriber: Transcriber) -> None:
        if generation == self._generation:
            self._transition(EngineState(EngineStatus.READY))
            return
        # unload() happened mid-run: the model it dropped is released now
        log.debug('Releasing model unloaded during inference')
        transcriber.close()


def _load_error(model_name: str, cause: Exception) -> ModelLoadError:
    err = ModelLoadError(f'Could not load model {model_name!r}: {cause}')
    err.__cause__ = cause
    return err
