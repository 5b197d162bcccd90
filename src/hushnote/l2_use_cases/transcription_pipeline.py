"""Use case: import audio, run transcription, keep the record's flags consistent."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from hushnote.l1_entities.errors import NotInitializedError, NotReadyError, PersistenceError, TranscriptionError
from hushnote.l1_entities.transcription_record import RecordSource, TranscriptionRecord
from hushnote.l2_use_cases.ports.audio_blob_store import AudioBlobStore
from hushnote.l2_use_cases.ports.record_store import RecordStore
from hushnote.l2_use_cases.transcription_engine import TranscriptionEngine

log = logging.getLogger('hn.pipeline')

_RESULT_FIELDS = ('text', 'language', 'duration', 'summary')


@dataclass(frozen=True)
class TranscribeResult:
    """Outcome of one transcription run — the persisted record plus an error if it failed."""

    record: TranscriptionRecord
    error: TranscriptionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TranscriptionPipeline:
    """Glues import, inference and persistence. Holds no state of its own.

    Every record change goes through ``RecordStore.update``; ``is_transcribing``
    is cleared on every outcome so a record is never left stuck.
    """

    def __init__(
        self,
        engine: TranscriptionEngine,
        store: RecordStore,
        blob_store: AudioBlobStore,
    ) -> None:
        self._engine = engine
        self._store = store
        self._blobs = blob_store

    def import_audio(
        self,
        source_path: Path,
        *,
        title: str | None = None,
        source: RecordSource = RecordSource.FILE,
    ) -> TranscriptionRecord:
        """Copy *source_path* into the blob store and persist a new record flagged as transcribing."""
        audio_filename = self._blobs.import_blob(source_path)
        record = TranscriptionRecord(
            audio_filename=audio_filename,
            title=title or source_path.stem,
            original_filename=source_path.name,
            source=source,
            is_transcribing=True,
        )
        try:
            self._store.create(record)
        except PersistenceError:
            log.error('Could not persist record for %s; removing copied audio', source_path.name)
            self._blobs.delete(audio_filename)
            raise
        log.info('Imported %s as record %s (%s)', source_path.name, record.id, audio_filename)
        return record

    async def transcribe(self, record: TranscriptionRecord) -> TranscribeResult:
        """Run inference for *record* and persist the outcome.

        Re-transcribing clears the previous text, language, duration and summary
        first so nothing downstream reads a transcript that is being replaced.
        If the engine refuses the run, the previous results are put back.
        """
        pending = record.model_copy(
            update={
                'is_transcribing': True,
                **dict.fromkeys(_RESULT_FIELDS),
            }
        )
        if pending != record:
            self._store.update(pending)

        try:
            transcribed = await self._engine.transcribe(pending)
        except (NotReadyError, NotInitializedError) as e:
            log.warning('Engine refused record %s: %s', record.id, e)
            previous = {field: getattr(record, field) for field in _RESULT_FIELDS}
            return TranscribeResult(record=self._finish(pending, previous), error=e)
        except TranscriptionError as e:
            log.warning('Record %s not transcribed: %s', record.id, e)
            return TranscribeResult(record=self._finish(pending, {}), error=e)
        except BaseException:
            self._finish(pending, {})
            raise

        done = self._finish(
            pending,
            {'text': transcribed.text, 'language': transcribed.language, 'duration': transcribed.duration},
        )
        return TranscribeResult(record=done)

    async def import_and_transcribe(
        self,
        source_path: Path,
        *,
        title: str | None = None,
        source: RecordSource = RecordSource.FILE,
    ) -> TranscribeResult:
        record = self.import_audio(source_path, title=title, source=source)
        return await self.transcribe(record)

    def delete(self, record: TranscriptionRecord) -> None:
        """Delete the record, then the audio blob it references."""
        self._store.delete(record)
        self._blobs.delete(record.audio_filename)
        log.info('Deleted record %s and audio %s', record.id, record.audio_filename)

    def recover_stale(self) -> int:
        """Clear is_transcribing on records left behind by a previous process.

        Their text stays empty, so they show up as retryable.
        """
        stale = self._store.fetch_transcribing()
        for record in stale:
            self._store.update(record.model_copy(update={'is_transcribing': False}))
        if stale:
            log.warning('Reset %d record(s) stuck in transcribing state', len(stale))
        return len(stale)

    def _finish(self, pending: TranscriptionRecord, fields: dict) -> TranscriptionRecord:
        # re-read so title edits made during inference survive
        current = self._store.fetch_by_id(pending.id)
        finished = (current or pending).model_copy(update={**fields, 'is_transcribing': False})
        if current is None:
            log.info('Record %s was deleted during transcription; result dropped', pending.id)
            return finished
        self._store.update(finished)
        return finished
