"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from pathlib import Path

from hushnote.l1_entities.config import AppConfig
from hushnote.l2_use_cases.ports.audio_blob_store import AudioBlobStore
from hushnote.l2_use_cases.ports.llm_client import LLMClient
from hushnote.l2_use_cases.ports.model_resolver import ModelResolver
from hushnote.l2_use_cases.ports.record_store import RecordStore
from hushnote.l2_use_cases.ports.transcriber import Transcriber
from hushnote.l2_use_cases.summarize_use_case import SummarizeRecordUseCase
from hushnote.l2_use_cases.transcription_engine import TranscriptionEngine
from hushnote.l2_use_cases.transcription_pipeline import TranscriptionPipeline
from hushnote.l3_interface_adapters.controllers.library_controller import LibraryController
from hushnote.l3_interface_adapters.gateways.file_audio_blob_store import FileAudioBlobStore
from hushnote.l3_interface_adapters.gateways.hf_model_resolver import HfModelResolver
from hushnote.l3_interface_adapters.gateways.llm_summarization_engine import LLMSummarizationEngine
from hushnote.l3_interface_adapters.gateways.ollama_llm_client import OllamaLLMClient
from hushnote.l3_interface_adapters.gateways.openai_llm_client import OpenAICompatLLMClient
from hushnote.l3_interface_adapters.gateways.paths import AUDIO_DIRNAME, DB_FILENAME
from hushnote.l3_interface_adapters.gateways.sqlite_record_store import SqliteRecordStore
from hushnote.l3_interface_adapters.gateways.subprocess_whisper_transcriber import SubprocessWhisperTranscriber
from hushnote.l4_frameworks_and_drivers.infra_config import InfraConfig


class DependencyContainer:
    """Creates and wires all concrete instances once. Easy to override for testing.

    The engines are single-owner services: everything that needs one gets
    this container's instance injected.
    """

    def __init__(self, config: AppConfig, infra: InfraConfig | None = None) -> None:
        self.config = config
        _infra = infra or InfraConfig()

        self.data_dir = Path(config.storage.directory).expanduser()
        self.store: RecordStore = SqliteRecordStore(self.data_dir / DB_FILENAME)
        self.blob_store: AudioBlobStore = FileAudioBlobStore(lambda: self.data_dir / AUDIO_DIRNAME)
        self.model_resolver: ModelResolver = HfModelResolver()
        self.llm_client: LLMClient = self._build_llm_client(_infra)

        self.engine = TranscriptionEngine(
            model_name=config.transcription.model,
            resolver=self.model_resolver,
            transcriber_factory=self._build_transcriber,
            blob_store=self.blob_store,
        )
        self.summarization_engine = LLMSummarizationEngine(self.llm_client, config.summary.model)
        self.pipeline = TranscriptionPipeline(self.engine, self.store, self.blob_store)
        self.summarizer = SummarizeRecordUseCase(
            self.summarization_engine,
            self.store,
            chunk_size=config.summary.chunk_size,
        )
        self.controller = LibraryController(
            store=self.store,
            engine=self.engine,
            pipeline=self.pipeline,
            summarizer=self.summarizer,
        )

    def _build_transcriber(self) -> Transcriber:
        tc = self.config.transcription
        if tc.in_subprocess:
            return SubprocessWhisperTranscriber(language=tc.language, window_duration=tc.window_duration)
        from hushnote.l3_interface_adapters.gateways.whisper_transcriber import (  # noqa: PLC0415 -- deferred: in-process mode only
            WhisperTranscriber,
        )

        return WhisperTranscriber(language=tc.language, window_duration=tc.window_duration)

    @staticmethod
    def _build_llm_client(infra: InfraConfig) -> LLMClient:
        if infra.llm_provider == 'openai':
            return OpenAICompatLLMClient(
                api_key=infra.openai.api_key,
                base_url=infra.openai.base_url,
                timeout=infra.openai.timeout,
            )
        return OllamaLLMClient(host=infra.ollama.host, timeout=infra.ollama.timeout)
