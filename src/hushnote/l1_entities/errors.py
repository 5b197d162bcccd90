"""Domain error types."""


class ModelResolutionError(Exception):
    """Raised when a whisper model cannot be resolved to a local path."""


class TranscriptionError(Exception):
    """Base class for transcription engine failures."""


class NotInitializedError(TranscriptionError):
    """Raised when inference is requested but no model has been loaded."""

    def __init__(self, message: str = 'The transcription model has not been initialized.') -> None:
        super().__init__(message)


class NotReadyError(TranscriptionError):
    """Raised when an engine is busy or in a failed state. Never queued."""


class ModelLoadError(TranscriptionError):
    """Raised when model initialization fails. Terminal for that load attempt."""


class TranscriptionFailedError(TranscriptionError):
    """Raised when inference on a single record fails. The model stays usable."""


class SummarizationError(Exception):
    """Raised when a chunk or merge summarization call fails."""


class PersistenceError(OSError):
    """Raised when a record or an audio blob cannot be read or written."""
