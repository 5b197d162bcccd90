"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path

import pytest

from hushnote.l1_entities.chat_message import ChatMessage
from hushnote.l1_entities.config import AppConfig
from hushnote.l1_entities.errors import ModelResolutionError, PersistenceError
from hushnote.l1_entities.transcript import TranscriptSegment
from hushnote.l1_entities.transcription_record import TranscriptionRecord
from hushnote.l2_use_cases.ports.llm_client import ChatResponse
from hushnote.l2_use_cases.transcription_engine import TranscriptionEngine
from hushnote.l3_interface_adapters.gateways.file_audio_blob_store import FileAudioBlobStore
from hushnote.l4_frameworks_and_drivers.infra_config import build_app_config

_GATE_TIMEOUT = 5  # seconds; a stuck gate fails the test instead of hanging it

# --- Protocol-conforming Fakes ---


class FakeLLMClient:
    """Fake LLM client for gateway tests above the SDK boundary."""

    def __init__(self, response: str = 'Fake LLM response', prompt_tokens: int = 100):
        self._response = response
        self._prompt_tokens = prompt_tokens
        self.chat_calls: list[tuple[str, list[ChatMessage]]] = []
        self._connectivity = (True, '')
        self._missing_models: list[str] = []
        self.connectivity_checks = 0

    async def chat(self, model: str, messages: list[ChatMessage]) -> ChatResponse:
        self.chat_calls.append((model, list(messages)))
        return ChatResponse(content=self._response, prompt_tokens=self._prompt_tokens)

    def check_connectivity(self) -> tuple[bool, str]:
        self.connectivity_checks += 1
        return self._connectivity

    def check_models(self, models: list[str]) -> list[str]:
        return [m for m in models if m in self._missing_models]

    def set_connectivity(self, ok: bool, msg: str = '') -> None:
        self._connectivity = (ok, msg)

    def set_missing_models(self, models: list[str]) -> None:
        self._missing_models = list(models)


class FakeTranscriber:
    """Fake transcriber for engine and pipeline tests.

    ``gate`` blocks ``transcribe`` until set, holding the engine in TRANSCRIBING.
    """

    def __init__(
        self,
        segments: list[TranscriptSegment] | None = None,
        *,
        load_error: Exception | None = None,
        transcribe_error: Exception | None = None,
        gate: threading.Event | None = None,
    ):
        if segments is None:
            segments = [TranscriptSegment(text='hello world', language='en', audio_seconds=2.5)]
        self._segments = segments
        self._load_error = load_error
        self._transcribe_error = transcribe_error
        self._gate = gate
        self.started = threading.Event()
        self.load_model_calls: list[str] = []
        self.transcribe_calls: list[Path] = []
        self.close_calls = 0

    def load_model(self, model_path: str) -> None:
        self.load_model_calls.append(model_path)
        if self._load_error is not None:
            raise self._load_error

    def transcribe(self, audio_path: Path) -> list[TranscriptSegment]:
        self.transcribe_calls.append(audio_path)
        self.started.set()
        if self._gate is not None and not self._gate.wait(timeout=_GATE_TIMEOUT):
            raise TimeoutError('test gate never opened')
        if self._transcribe_error is not None:
            raise self._transcribe_error
        return self._segments

    def close(self) -> None:
        self.close_calls += 1


class FakeModelResolver:
    """Maps model names to fake paths. ``gate`` blocks resolution, holding the engine in LOADING."""

    def __init__(self, *, error: Exception | None = None, gate: threading.Event | None = None):
        self._error = error
        self._gate = gate
        self.calls: list[str] = []

    def resolve(self, model_name: str) -> str:
        self.calls.append(model_name)
        if self._gate is not None and not self._gate.wait(timeout=_GATE_TIMEOUT):
            raise ModelResolutionError('test gate never opened')
        if self._error is not None:
            raise self._error
        return f'/models/{model_name}.bin'


class FakeSummarizationEngine:
    """Fake summarization engine: answers from a list of responses or a callable."""

    def __init__(
        self,
        responses: list[str] | Callable[[str, str], str] | None = None,
        *,
        available: bool = True,
        unavailable_reason: str = '',
        error: Exception | None = None,
    ):
        self._responses = responses if responses is not None else []
        self._available = available
        self.unavailable_reason = unavailable_reason
        self._error = error
        self.calls: list[tuple[str, str]] = []
        self.on_respond: Callable[[], None] | None = None

    async def respond(self, instructions: str, prompt: str) -> str:
        self.calls.append((instructions, prompt))
        if self.on_respond is not None:
            self.on_respond()
        if self._error is not None:
            raise self._error
        if callable(self._responses):
            return self._responses(instructions, prompt)
        if self._responses:
            return self._responses.pop(0)
        return f'summary {len(self.calls)}'

    def is_available(self) -> bool:
        return self._available


class InMemoryRecordStore:
    """Dict-backed RecordStore with the same contract as the SQLite gateway."""

    def __init__(self, *, fail_create: bool = False, fail_update: bool = False):
        self._records: dict[str, TranscriptionRecord] = {}
        self._fail_create = fail_create
        self._fail_update = fail_update
        self.update_calls: list[TranscriptionRecord] = []

    def fetch_all(self) -> list[TranscriptionRecord]:
        return sorted(self._records.values(), key=lambda r: r.created_at, reverse=True)

    def fetch_by_id(self, record_id: str) -> TranscriptionRecord | None:
        return self._records.get(record_id)

    def fetch_transcribing(self) -> list[TranscriptionRecord]:
        return [r for r in self.fetch_all() if r.is_transcribing]

    def create(self, record: TranscriptionRecord) -> None:
        if self._fail_create:
            raise PersistenceError('disk full')
        if record.id in self._records:
            raise PersistenceError(f'Record {record.id} already exists')
        self._records[record.id] = record

    def update(self, record: TranscriptionRecord) -> None:
        if self._fail_update:
            raise PersistenceError('database is locked')
        if record.id not in self._records:
            raise PersistenceError(f'Record {record.id} does not exist')
        self.update_calls.append(record)
        self._records[record.id] = record

    def delete(self, record: TranscriptionRecord) -> None:
        self._records.pop(record.id, None)

    def search(self, text: str) -> list[TranscriptionRecord]:
        if not text.strip():
            return self.fetch_all()
        needle = text.casefold()
        return [
            r
            for r in self.fetch_all()
            if needle in (r.title or '').casefold() or needle in (r.text or '').casefold()
        ]


# --- Standard Fixtures ---


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def blob_store(tmp_path: Path) -> FileAudioBlobStore:
    return FileAudioBlobStore(tmp_path / 'audio')


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    p = tmp_path / 'incoming' / 'standup.wav'
    p.parent.mkdir()
    p.write_bytes(b'RIFF\x24\x00\x00\x00WAVEfmt fake-audio-payload')
    return p


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def fake_resolver() -> FakeModelResolver:
    return FakeModelResolver()


@pytest.fixture
def make_engine(fake_resolver: FakeModelResolver, blob_store: FileAudioBlobStore):
    """Factory: an engine over *transcriber* (or the default fake) and the tmp blob store."""

    def _make(
        transcriber: FakeTranscriber | None = None,
        *,
        resolver: FakeModelResolver | None = None,
        model_name: str = 'base',
    ) -> TranscriptionEngine:
        instance = transcriber or FakeTranscriber()
        return TranscriptionEngine(
            model_name=model_name,
            resolver=resolver or fake_resolver,
            transcriber_factory=lambda: instance,
            blob_store=blob_store,
        )

    return _make


@pytest.fixture
def stored_record(memory_store: InMemoryRecordStore, blob_store: FileAudioBlobStore, audio_file: Path):
    """A record whose audio is in the blob store and which is persisted, not yet transcribed."""
    record = TranscriptionRecord(
        audio_filename=blob_store.import_blob(audio_file),
        title='standup',
        original_filename=audio_file.name,
    )
    memory_store.create(record)
    return record
