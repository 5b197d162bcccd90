"""Chat message entity sent to the language-generation engine."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    """One turn of a summarization request: the instructions or the prompt."""

    role: Literal['system', 'user', 'assistant']
    content: str
