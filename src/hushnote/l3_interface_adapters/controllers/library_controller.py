"""LibraryController — coordinates user commands over the record library."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from hushnote.l1_entities.errors import (
    ModelLoadError,
    NotInitializedError,
    NotReadyError,
    PersistenceError,
    SummarizationError,
    TranscriptionFailedError,
)
from hushnote.l1_entities.transcription_record import RecordSource, TranscriptionRecord
from hushnote.l2_use_cases.ports.record_store import RecordStore
from hushnote.l2_use_cases.summarize_use_case import SummarizeRecordUseCase
from hushnote.l2_use_cases.transcription_engine import TranscriptionEngine
from hushnote.l2_use_cases.transcription_pipeline import TranscriptionPipeline

log = logging.getLogger('hn.controller')

_SUMMARY_BUSY = 'A summary is already being generated. Please try again.'


def describe_error(error: BaseException, *, action: str = '') -> str:
    """Human-readable message for a failure. Never exposes raw exception reprs."""
    if isinstance(error, NotInitializedError):
        return 'The transcription model has not been initialized. Check the model name in your configuration.'
    if isinstance(error, NotReadyError) and isinstance(error.__cause__, ModelLoadError):
        error = error.__cause__
    if isinstance(error, ModelLoadError):
        return f'The transcription model could not be loaded: {error.__cause__ or error}'
    if isinstance(error, NotReadyError):
        return 'The transcription model is not ready. Please try again.'
    if isinstance(error, TranscriptionFailedError):
        return f'Transcription failed: {error.__cause__ or error}'
    if isinstance(error, SummarizationError):
        return f'Summary generation failed: {error}'
    if action:
        return f'{action.capitalize()} failed: {error}'
    if isinstance(error, PersistenceError):
        return f'Could not save changes: {error}'
    return f'Operation failed: {error}'


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a user command — the affected record, and a message when it failed."""

    record: TranscriptionRecord | None = None
    message: str = ''

    @property
    def ok(self) -> bool:
        return not self.message


class LibraryController:
    """Central orchestrator between the drivers (CLI) and the use cases.

    Owns no durable state: records live in the store, model state in the engine.
    """

    def __init__(
        self,
        store: RecordStore,
        engine: TranscriptionEngine,
        pipeline: TranscriptionPipeline,
        summarizer: SummarizeRecordUseCase,
    ) -> None:
        self._store = store
        self._engine = engine
        self._pipeline = pipeline
        self._summarizer = summarizer

    @property
    def engine(self) -> TranscriptionEngine:
        return self._engine

    def startup(self) -> int:
        """Recover records left transcribing by a previous run."""
        return self._pipeline.recover_stale()

    # -- Queries --

    def records(self) -> list[TranscriptionRecord]:
        return self._store.fetch_all()

    def search(self, query: str) -> list[TranscriptionRecord]:
        return self._store.search(query)

    def find(self, record_id: str) -> TranscriptionRecord | None:
        """Look up by full id or by an unambiguous id prefix."""
        record = self._store.fetch_by_id(record_id)
        if record is not None or not record_id:
            return record
        matches = [r for r in self._store.fetch_all() if r.id.startswith(record_id)]
        return matches[0] if len(matches) == 1 else None

    # -- Commands --

    async def import_file(
        self,
        path: Path,
        *,
        title: str | None = None,
        source: RecordSource = RecordSource.FILE,
    ) -> ActionResult:
        try:
            record = self._pipeline.import_audio(path, title=title, source=source)
        except PersistenceError as e:
            log.error('Import of %s failed: %s', path, e)
            return ActionResult(message=describe_error(e, action='import'))
        return await self._run_transcription(record)

    async def retry(self, record_id: str) -> ActionResult:
        record = self.find(record_id)
        if record is None:
            return ActionResult(message=f'No transcription with id {record_id!r}.')
        if record.is_transcribing:
            return ActionResult(record=record, message='This recording is already being transcribed.')
        return await self._run_transcription(record)

    async def summarize(self, record_id: str) -> ActionResult:
        record = self.find(record_id)
        if record is None:
            return ActionResult(message=f'No transcription with id {record_id!r}.')
        if self._summarizer.is_running:
            return ActionResult(record=record, message=_SUMMARY_BUSY)
        try:
            result = await self._summarizer.execute(record)
        except NotReadyError:
            return ActionResult(record=record, message=_SUMMARY_BUSY)
        except PersistenceError as e:
            log.error('Could not save summary state for %s: %s', record.id, e)
            return ActionResult(record=record, message=describe_error(e))
        if result.skipped:
            if result.error:
                return ActionResult(record=result.record, message=f'Summarization is not available: {result.error}')
            if not result.record.has_text:
                return ActionResult(record=result.record, message='There is no transcript to summarize yet.')
            return ActionResult(record=result.record, message='Summarization is not available.')
        if not result.ok:
            return ActionResult(record=result.record, message=f'Summary generation failed: {result.error}')
        return ActionResult(record=result.record)

    def rename(self, record_id: str, title: str) -> ActionResult:
        record = self.find(record_id)
        if record is None:
            return ActionResult(message=f'No transcription with id {record_id!r}.')
        renamed = record.model_copy(update={'title': title.strip() or None})
        try:
            self._store.update(renamed)
        except PersistenceError as e:
            return ActionResult(record=record, message=describe_error(e))
        return ActionResult(record=renamed)

    def delete(self, record_id: str) -> ActionResult:
        record = self.find(record_id)
        if record is None:
            return ActionResult(message=f'No transcription with id {record_id!r}.')
        try:
            self._pipeline.delete(record)
        except PersistenceError as e:
            return ActionResult(record=record, message=describe_error(e, action='delete'))
        return ActionResult(record=record)

    def switch_model(self, model_name: str) -> None:
        """Select a different whisper model; it loads on the next transcription."""
        self._engine.select_model(model_name)

    async def _run_transcription(self, record: TranscriptionRecord) -> ActionResult:
        try:
            result = await self._pipeline.transcribe(record)
        except PersistenceError as e:
            log.error('Could not save transcription state for %s: %s', record.id, e)
            return ActionResult(record=record, message=describe_error(e))
        if result.error is not None:
            return ActionResult(record=result.record, message=describe_error(result.error))
        return ActionResult(record=result.record)
