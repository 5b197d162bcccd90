"""Gateway: summarization engine over an LLM client — implements SummarizationEngine port."""

from __future__ import annotations

import logging

from hushnote.l1_entities.chat_message import ChatMessage
from hushnote.l2_use_cases.ports.llm_client import LLMClient

log = logging.getLogger('hn.llm')


class LLMSummarizationEngine:
    """Turns (instructions, prompt) into a fresh two-message chat with one model.

    Each call is stateless: no conversation history is carried between chunks.
    Availability is probed once and cached until ``refresh_availability()``.
    """

    def __init__(self, llm_client: LLMClient, model: str) -> None:
        self._llm = llm_client
        self._model = model
        self._available: bool | None = None
        self.unavailable_reason = ''

    @property
    def model(self) -> str:
        return self._model

    async def respond(self, instructions: str, prompt: str) -> str:
        messages = [
            ChatMessage(role='system', content=instructions),
            ChatMessage(role='user', content=prompt),
        ]
        resp = await self._llm.chat(model=self._model, messages=messages)
        log.debug('LLM response (%d chars, prompt_tokens=%d)', len(resp.content), resp.prompt_tokens)
        return resp.content

    def is_available(self) -> bool:
        if self._available is None:
            self.refresh_availability()
        return bool(self._available)

    def refresh_availability(self) -> bool:
        ok, err = self._llm.check_connectivity()
        if ok and self._llm.check_models([self._model]):
            ok, err = False, f'Model {self._model!r} is not available'
        self._available = ok
        self.unavailable_reason = err
        if not ok:
            log.warning('Summarization unavailable: %s', err)
        return ok
