"""Tests for Ollama LLM client gateway — mocks ollama here (L3 boundary)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import ollama as ollama_lib
import pytest

from hushnote.l1_entities.chat_message import ChatMessage
from hushnote.l3_interface_adapters.gateways.ollama_llm_client import OllamaLLMClient

_MODULE = 'hushnote.l3_interface_adapters.gateways.ollama_llm_client'


class TestOllamaLLMClient:
    @pytest.mark.asyncio
    @patch(f'{_MODULE}.ollama_sync.AsyncClient')
    async def test_chat_success(self, mock_client_cls):
        mock_client = AsyncMock()
        mock_client_cls.return_value = mock_client
        mock_resp = MagicMock()
        mock_resp.message.content = 'Test response'
        mock_resp.prompt_eval_count = 42
        mock_client.chat.return_value = mock_resp

        client = OllamaLLMClient(host='http://gpu-box:11434')
        result = await client.chat(
            'gpt-oss:20b',
            [ChatMessage(role='system', content='be brief'), ChatMessage(role='user', content='hi')],
        )

        assert result.content == 'Test response'
        assert result.prompt_tokens == 42
        mock_client_cls.assert_called_once_with(host='http://gpu-box:11434', timeout=600.0)
        sent = mock_client.chat.call_args.kwargs['messages']
        assert sent == [{'role': 'system', 'content': 'be brief'}, {'role': 'user', 'content': 'hi'}]

    @pytest.mark.asyncio
    @patch(f'{_MODULE}.ollama_sync.AsyncClient')
    async def test_chat_missing_content_is_empty(self, mock_client_cls):
        mock_client = AsyncMock()
        mock_client_cls.return_value = mock_client
        mock_resp = MagicMock()
        mock_resp.message.content = None
        mock_resp.prompt_eval_count = None
        mock_client.chat.return_value = mock_resp

        result = await OllamaLLMClient().chat('m', [ChatMessage(role='user', content='hi')])

        assert result.content == ''
        assert result.prompt_tokens == 0

    @patch(f'{_MODULE}.ollama_sync.Client')
    def test_check_connectivity_success(self, mock_client_cls):
        mock_client_cls.return_value = MagicMock()
        assert OllamaLLMClient().check_connectivity() == (True, '')

    @patch(f'{_MODULE}.ollama_sync.Client')
    def test_check_connectivity_failure(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client_cls.return_value = mock_client
        mock_client.list.side_effect = ConnectionError('nope')

        ok, err = OllamaLLMClient().check_connectivity()
        assert ok is False
        assert 'Cannot connect' in err

    @patch(f'{_MODULE}.ollama_sync.Client')
    def test_check_models_some_missing(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client_cls.return_value = mock_client

        def _show(model):
            if model == 'missing-model':
                raise ollama_lib.ResponseError('model not found')
            return MagicMock()

        mock_client.show.side_effect = _show

        assert OllamaLLMClient().check_models(['gpt-oss:20b', 'missing-model']) == ['missing-model']

    @patch(f'{_MODULE}.ollama_sync.Client')
    def test_check_models_unreachable_returns_empty(self, mock_client_cls):
        mock_client = MagicMock()
        mock_client_cls.return_value = mock_client
        mock_client.show.side_effect = ConnectionError('cannot connect')

        assert OllamaLLMClient().check_models(['gpt-oss:20b']) == []
