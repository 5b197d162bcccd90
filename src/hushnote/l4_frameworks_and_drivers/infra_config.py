"""Infrastructure provider configs and application defaults — lives in L4, not domain."""

from __future__ import annotations

import copy
from typing import Literal

from pydantic import BaseModel, Field

from hushnote.l1_entities.config import AppConfig
from hushnote.l3_interface_adapters.gateways.paths import DATA_DIR
from hushnote.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'transcription': {
        'model': 'large-v3-turbo-q8_0',
        'language': 'auto',
        'window_duration': 30.0,
        'in_subprocess': True,
    },
    'summary': {
        'model': 'gpt-oss:20b',
        'chunk_size': 10_000,
    },
    'storage': {
        'directory': str(DATA_DIR),
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)


class OllamaProviderConfig(BaseModel):
    host: str = 'http://localhost:11434'
    timeout: float = Field(default=600.0, gt=0)  # seconds per summary request


class OpenAIProviderConfig(BaseModel):
    api_key: str | None = None  # None → SDK reads OPENAI_API_KEY env
    base_url: str = 'https://api.openai.com/v1'
    timeout: float = Field(default=600.0, gt=0)


class InfraConfig(BaseModel):
    """Groups all provider-specific settings outside the domain layer."""

    llm_provider: Literal['ollama', 'openai'] = 'ollama'
    ollama: OllamaProviderConfig = Field(default_factory=OllamaProviderConfig)
    openai: OpenAIProviderConfig = Field(default_factory=OpenAIProviderConfig)
