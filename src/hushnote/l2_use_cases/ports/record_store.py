"""Port: persistence and search over transcription records."""

from __future__ import annotations

from typing import Protocol

from hushnote.l1_entities.transcription_record import TranscriptionRecord


class RecordStore(Protocol):
    """Durable collection of records keyed by id, newest first.

    The store is the serialization point for record mutations: every change
    goes through ``update``. Failures raise ``PersistenceError``.
    """

    def fetch_all(self) -> list[TranscriptionRecord]:
        """All records, created_at descending."""
        ...

    def fetch_by_id(self, record_id: str) -> TranscriptionRecord | None:
        """The record with *record_id*, or None."""
        ...

    def fetch_transcribing(self) -> list[TranscriptionRecord]:
        """Records whose is_transcribing flag is set."""
        ...

    def create(self, record: TranscriptionRecord) -> None:
        """Insert a new record."""
        ...

    def update(self, record: TranscriptionRecord) -> None:
        """Write all mutable fields of an existing record. Idempotent."""
        ...

    def delete(self, record: TranscriptionRecord) -> None:
        """Remove a record. Missing records are ignored."""
        ...

    def search(self, text: str) -> list[TranscriptionRecord]:
        """Records whose title or text contains *text*, case-insensitively, newest first."""
        ...
