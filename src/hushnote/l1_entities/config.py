"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TranscriptionConfig(BaseModel):
    model: str
    language: str  # 'auto' lets whisper detect it per window
    window_duration: float = Field(gt=0)
    in_subprocess: bool = True


class SummaryConfig(BaseModel):
    model: str
    chunk_size: int = Field(gt=0)  # characters per chunk, sized below the model context


class StorageConfig(BaseModel):
    directory: str


class AppConfig(BaseModel):
    transcription: TranscriptionConfig
    summary: SummaryConfig
    storage: StorageConfig
