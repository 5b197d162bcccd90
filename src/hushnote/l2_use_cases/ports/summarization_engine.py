"""Port: language-generation capability used by the summarizer."""

from __future__ import annotations

from typing import Protocol


class SummarizationEngine(Protocol):
    """Given instructions and a prompt, produce response text."""

    unavailable_reason: str

    async def respond(self, instructions: str, prompt: str) -> str:
        """Run one stateless request. Raises on failure."""
        ...

    def is_available(self) -> bool:
        """Whether the capability can be used at all."""
        ...
