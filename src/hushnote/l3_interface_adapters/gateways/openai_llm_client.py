"""Gateway: OpenAI-compatible LLM client — implements LLMClient port.

Works with any OpenAI-compatible server, including local ones (llama.cpp, vLLM, LM Studio).
"""

from __future__ import annotations

import logging

import openai

from hushnote.l1_entities.chat_message import ChatMessage
from hushnote.l2_use_cases.ports.llm_client import ChatResponse

log = logging.getLogger('hn.llm.openai')


class OpenAICompatLLMClient:
    """Wraps openai.AsyncOpenAI for summary requests; sync client for preflight checks."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = 'https://api.openai.com/v1',
        timeout: float = 600.0,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url
        self._timeout = timeout

    def _sync_client(self) -> openai.OpenAI:
        return openai.OpenAI(api_key=self._api_key, base_url=self._base_url, timeout=self._timeout)

    async def chat(self, model: str, messages: list[ChatMessage]) -> ChatResponse:
        client = openai.AsyncOpenAI(api_key=self._api_key, base_url=self._base_url, timeout=self._timeout)
        resp = await client.chat.completions.create(
            model=model,
            messages=[m.model_dump() for m in messages],  # ty: ignore[invalid-argument-type] -- dict satisfies ChatCompletionMessageParam at runtime
        )
        if not resp.choices:
            log.warning('%s returned no choices', model)
            return ChatResponse(content='')
        content = resp.choices[0].message.content or ''
        prompt_tokens = resp.usage.prompt_tokens if resp.usage else 0
        return ChatResponse(content=content, prompt_tokens=prompt_tokens)

    def check_connectivity(self) -> tuple[bool, str]:
        try:
            self._sync_client().models.list()
        except openai.AuthenticationError as e:
            return False, f'Authentication failed: {e}'
        except Exception as e:
            return False, f'Cannot connect to OpenAI-compatible API at {self._base_url}: {e}'
        return True, ''

    def check_models(self, models: list[str]) -> list[str]:
        """Return model names the server does not know.

        Empty when the models endpoint is unsupported (common with local servers).
        """
        try:
            client = self._sync_client()
            missing = []
            for model in models:
                try:
                    client.models.retrieve(model)
                except openai.NotFoundError:
                    missing.append(model)
            return missing
        except Exception as e:
            log.debug('Model check skipped: %s', e)
            return []
