"""Tests for the domain error hierarchy."""

from __future__ import annotations

from hushnote.l1_entities.errors import (
    ModelLoadError,
    NotInitializedError,
    NotReadyError,
    PersistenceError,
    TranscriptionError,
    TranscriptionFailedError,
)


class TestErrors:
    def test_engine_errors_share_base(self):
        for cls in (NotInitializedError, NotReadyError, ModelLoadError, TranscriptionFailedError):
            assert issubclass(cls, TranscriptionError)

    def test_not_initialized_default_message(self):
        assert 'not been initialized' in str(NotInitializedError())

    def test_persistence_error_is_os_error(self):
        assert issubclass(PersistenceError, OSError)
