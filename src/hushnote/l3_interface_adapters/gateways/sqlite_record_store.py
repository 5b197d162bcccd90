"""Gateway: SQLite-backed record store — implements RecordStore port."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path

from hushnote.l1_entities.errors import PersistenceError
from hushnote.l1_entities.transcription_record import RecordSource, TranscriptionRecord

log = logging.getLogger('hn.store')

SCHEMA_VERSION = 1

_COLUMNS = (
    'id',
    'title',
    'original_filename',
    'audio_filename',
    'text',
    'language',
    'duration',
    'created_at',
    'is_transcribing',
    'source',
    'summary',
)
_MUTABLE_COLUMNS = ('title', 'original_filename', 'audio_filename', 'text', 'language', 'duration', 'is_transcribing', 'summary')
_ORDER = 'ORDER BY created_at DESC, rowid DESC'


def _casefold_contains(haystack: str | None, needle: str) -> int:
    if not haystack:
        return 0
    return int(needle.casefold() in haystack.casefold())


class SqliteRecordStore:
    """Persists transcription records in a single SQLite table.

    One short-lived connection per operation; writes are serialized by a lock
    so the store is the single point through which record mutations pass.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._write_lock = threading.Lock()
        self._ensure_initialised()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                conn.row_factory = sqlite3.Row
                conn.create_function('casefold_contains', 2, _casefold_contains, deterministic=True)
                with conn:
                    yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(f'Record store error ({self.db_path.name}): {exc}') from exc

    def _ensure_initialised(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f'Cannot create data directory {self.db_path.parent}: {exc}') from exc
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS transcriptions (
                    id TEXT PRIMARY KEY,
                    title TEXT,
                    original_filename TEXT,
                    audio_filename TEXT NOT NULL UNIQUE,
                    text TEXT,
                    language TEXT,
                    duration REAL,
                    created_at TEXT NOT NULL,
                    is_transcribing INTEGER NOT NULL DEFAULT 0,
                    source TEXT NOT NULL,
                    summary TEXT
                )
                """
            )
            conn.execute('CREATE INDEX IF NOT EXISTS idx_transcriptions_created_at ON transcriptions(created_at)')
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS metadata (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            row = conn.execute('SELECT value FROM metadata WHERE key = ?', ('schema_version',)).fetchone()
            if row is None:
                conn.execute(
                    'INSERT INTO metadata(key, value) VALUES(?, ?)',
                    ('schema_version', str(SCHEMA_VERSION)),
                )
        log.info('Opened record store %s (schema v%d)', self.db_path, SCHEMA_VERSION)

    # -- Queries --

    def fetch_all(self) -> list[TranscriptionRecord]:
        with self._connect() as conn:
            return [_row_to_record(row) for row in conn.execute(f'SELECT * FROM transcriptions {_ORDER}')]

    def fetch_by_id(self, record_id: str) -> TranscriptionRecord | None:
        with self._connect() as conn:
            row = conn.execute('SELECT * FROM transcriptions WHERE id = ?', (record_id,)).fetchone()
        return _row_to_record(row) if row is not None else None

    def fetch_transcribing(self) -> list[TranscriptionRecord]:
        with self._connect() as conn:
            rows = conn.execute(f'SELECT * FROM transcriptions WHERE is_transcribing = 1 {_ORDER}')
            return [_row_to_record(row) for row in rows]

    def search(self, text: str) -> list[TranscriptionRecord]:
        if not text.strip():
            return self.fetch_all()
        with self._connect() as conn:
            rows = conn.execute(
                'SELECT * FROM transcriptions '
                f'WHERE casefold_contains(title, ?) OR casefold_contains(text, ?) {_ORDER}',
                (text, text),
            )
            return [_row_to_record(row) for row in rows]

    # -- Mutations --

    def create(self, record: TranscriptionRecord) -> None:
        values = _record_to_row(record)
        placeholders = ', '.join('?' for _ in _COLUMNS)
        with self._write_lock, self._connect() as conn:
            conn.execute(
                f'INSERT INTO transcriptions({", ".join(_COLUMNS)}) VALUES({placeholders})',
                tuple(values[col] for col in _COLUMNS),
            )
        log.debug('Created record %s', record.id)

    def update(self, record: TranscriptionRecord) -> None:
        values = _record_to_row(record)
        assignments = ', '.join(f'{col} = ?' for col in _MUTABLE_COLUMNS)
        with self._write_lock, self._connect() as conn:
            cur = conn.execute(
                f'UPDATE transcriptions SET {assignments} WHERE id = ?',
                (*(values[col] for col in _MUTABLE_COLUMNS), record.id),
            )
            if cur.rowcount == 0:
                raise PersistenceError(f'Record {record.id} does not exist')
        log.debug('Updated record %s (transcribing=%s)', record.id, record.is_transcribing)

    def delete(self, record: TranscriptionRecord) -> None:
        with self._write_lock, self._connect() as conn:
            conn.execute('DELETE FROM transcriptions WHERE id = ?', (record.id,))
        log.debug('Deleted record %s', record.id)


def _record_to_row(record: TranscriptionRecord) -> dict:
    return {
        'id': record.id,
        'title': record.title,
        'original_filename': record.original_filename,
        'audio_filename': record.audio_filename,
        'text': record.text,
        'language': record.language,
        'duration': record.duration,
        'created_at': record.created_at.isoformat(),
        'is_transcribing': int(record.is_transcribing),
        'source': record.source.value,
        'summary': record.summary,
    }


def _row_to_record(row: sqlite3.Row) -> TranscriptionRecord:
    return TranscriptionRecord(
        id=row['id'],
        title=row['title'],
        original_filename=row['original_filename'],
        audio_filename=row['audio_filename'],
        text=row['text'],
        language=row['language'],
        duration=row['duration'],
        created_at=datetime.fromisoformat(row['created_at']),
        is_transcribing=bool(row['is_transcribing']),
        source=RecordSource(row['source']),
        summary=row['summary'],
    )
