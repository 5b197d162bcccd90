"""Use case: chunked summarization of a record's transcript."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from hushnote.l1_entities.errors import NotReadyError, SummarizationError
from hushnote.l1_entities.transcription_record import TranscriptionRecord
from hushnote.l2_use_cases.ports.record_store import RecordStore
from hushnote.l2_use_cases.ports.summarization_engine import SummarizationEngine
from hushnote.l2_use_cases.utils.prompt_builder import (
    CHUNK_INSTRUCTIONS,
    MERGE_INSTRUCTIONS,
    build_chunk_prompt,
    build_merge_prompt,
)
from hushnote.l2_use_cases.utils.text_splitter import split_text

log = logging.getLogger('hn.summary')

DEFAULT_CHUNK_SIZE = 10_000  # ~4 chars/token under a 4k-token context, minus instruction headroom


@dataclass(frozen=True)
class SummaryResult:
    """Outcome of a summarization attempt: summary text, a failure reason, or skipped."""

    record: TranscriptionRecord
    summary: str | None = None
    error: str = ''
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.summary is not None


class SummarizeRecordUseCase:
    """Splits the transcript, summarizes each chunk sequentially, merges the parts.

    Chunk calls are never issued in parallel: the engine session is only
    assumed safe with one request outstanding.
    """

    def __init__(
        self,
        engine: SummarizationEngine,
        store: RecordStore,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self._engine = engine
        self._store = store
        self._chunk_size = chunk_size
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def execute(self, record: TranscriptionRecord) -> SummaryResult:
        """Summarize the stored version of *record*.

        Persists the summary on success; leaves it None on any failure.
        """
        if not self._engine.is_available():
            log.info('Summarization unavailable; skipping record %s', record.id)
            return SummaryResult(record=record, skipped=True, error=self._engine.unavailable_reason)
        if self._running:
            raise NotReadyError('A summary is already being generated. Please try again.')

        stored = self._store.fetch_by_id(record.id) or record
        text = stored.text
        if stored.is_transcribing or not text or not text.strip():
            return SummaryResult(record=stored, skipped=True)

        self._running = True
        try:
            cleared = stored.model_copy(update={'summary': None})
            self._store.update(cleared)

            try:
                summary = await self._summarize(text)
            except Exception as e:
                err = f'{type(e).__name__}: {e}'
                log.error('Summarization of record %s failed: %s', record.id, err, exc_info=True)
                return SummaryResult(record=cleared, error=err)

            current = self._store.fetch_by_id(record.id)
            if current is None:
                return SummaryResult(record=cleared, error='Record was deleted during summarization')
            if current.text != text:
                log.warning('Record %s was re-transcribed during summarization; discarding summary', record.id)
                return SummaryResult(record=current, error='Transcript changed during summarization')

            updated = current.model_copy(update={'summary': summary})
            self._store.update(updated)
            log.info('Record %s summarized (%d chars)', record.id, len(summary))
            return SummaryResult(record=updated, summary=summary)
        finally:
            self._running = False

    async def _summarize(self, text: str) -> str:
        chunks = split_text(text, self._chunk_size)
        log.info('Summarizing %d chunk(s) for transcript of %d characters', len(chunks), len(text))

        partials: list[str] = []
        for index, chunk in enumerate(chunks, start=1):
            log.debug('Summarizing chunk %d/%d (%d chars)', index, len(chunks), len(chunk))
            partials.append(await self._respond(CHUNK_INSTRUCTIONS, build_chunk_prompt(chunk), f'chunk {index}'))

        if len(partials) == 1:
            return partials[0]
        return await self._respond(MERGE_INSTRUCTIONS, build_merge_prompt(partials), 'merge')

    async def _respond(self, instructions: str, prompt: str, step: str) -> str:
        raw = await self._engine.respond(instructions, prompt)
        if not raw.strip():
            raise SummarizationError(f'Empty response from model at {step}')
        return raw.strip()
