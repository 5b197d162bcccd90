"""hushnote: local audio transcription library with LLM summaries."""

__version__ = '0.1.0'
