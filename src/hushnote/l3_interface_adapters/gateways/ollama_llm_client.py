"""Gateway: Ollama LLM client — implements LLMClient port."""

from __future__ import annotations

import logging

import ollama as ollama_sync

from hushnote.l1_entities.chat_message import ChatMessage
from hushnote.l2_use_cases.ports.llm_client import ChatResponse

log = logging.getLogger('hn.llm.ollama')


class OllamaLLMClient:
    """Wraps ollama.AsyncClient for summary requests; sync client for preflight checks."""

    def __init__(self, host: str = 'http://localhost:11434', timeout: float = 600.0) -> None:
        self._host = host
        self._timeout = timeout

    async def chat(self, model: str, messages: list[ChatMessage]) -> ChatResponse:
        client = ollama_sync.AsyncClient(host=self._host, timeout=self._timeout)
        resp = await client.chat(model=model, messages=[m.model_dump() for m in messages])
        return ChatResponse(
            content=resp.message.content or '',
            prompt_tokens=getattr(resp, 'prompt_eval_count', 0) or 0,
        )

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            ollama_sync.Client(host=self._host).list()
        except Exception as e:
            return False, f'Cannot connect to Ollama at {self._host}: {e}'
        return True, ''

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names that are not pulled locally. Empty if Ollama is unreachable."""
        try:
            client = ollama_sync.Client(host=self._host)
            missing = []
            for model in models:
                try:
                    client.show(model)
                except ollama_sync.ResponseError:
                    missing.append(model)
            return missing
        except Exception as e:
            log.debug('Model check skipped: %s', e)
            return []
