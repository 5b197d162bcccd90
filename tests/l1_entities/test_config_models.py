"""Tests for configuration models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from hushnote.l1_entities.config import AppConfig, SummaryConfig, TranscriptionConfig


class TestConfigModels:
    def test_default_config_values(self, default_config: AppConfig):
        assert default_config.transcription.model == 'large-v3-turbo-q8_0'
        assert default_config.transcription.language == 'auto'
        assert default_config.transcription.window_duration == 30.0
        assert default_config.transcription.in_subprocess is True
        assert default_config.summary.model == 'gpt-oss:20b'
        assert default_config.summary.chunk_size == 10_000

    def test_chunk_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            SummaryConfig(model='m', chunk_size=0)

    def test_window_duration_must_be_positive(self):
        with pytest.raises(ValidationError):
            TranscriptionConfig(model='base', language='en', window_duration=0)

    def test_missing_section_rejected(self):
        with pytest.raises(ValidationError):
            AppConfig.model_validate({'transcription': {'model': 'base', 'language': 'en', 'window_duration': 5}})
