"""Tests for the OpenAI-compatible chat generator."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from conftest import make_completion
from tldrbot.text_generators import OpenRouterChatGenerator

_REQUEST = httpx.Request("POST", "https://openrouter.example/api/v1/chat/completions")


@pytest.fixture
def mock_client():
    """Create a mock AsyncOpenAI client."""
    mock = MagicMock()
    mock.chat.completions.create = AsyncMock(return_value=make_completion("ok"))
    return mock


class TestInit:

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            OpenRouterChatGenerator("some/model", api_key="")

    def test_builds_client_without_retries(self):
        gen = OpenRouterChatGenerator(
            "some/model", api_key="sk-test", base_url="https://llm.example/v1"
        )
        client = gen._get_client()
        assert isinstance(client, openai.AsyncOpenAI)
        assert client.max_retries == 0
        assert str(client.base_url).startswith("https://llm.example/v1")

    def test_injected_client_is_used(self, mock_client):
        gen = OpenRouterChatGenerator("some/model", api_key="", client=mock_client)
        assert gen._get_client() is mock_client


class TestComplete:

    @pytest.mark.asyncio
    async def test_passes_model_and_messages(self, mock_client):
        gen = OpenRouterChatGenerator("some/model", api_key="sk-test", client=mock_client)
        messages = [
            {"role": "system", "content": "Base"},
            {"role": "user", "content": "A: hi"},
        ]

        resp = await gen.complete(messages)

        assert resp.choices[0].message.content == "ok"
        mock_client.chat.completions.create.assert_awaited_once()
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "some/model"
        assert kwargs["messages"] == messages

    @pytest.mark.asyncio
    async def test_errors_are_traced_and_reraised(self, mock_client, caplog):
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=_REQUEST)
        )
        gen = OpenRouterChatGenerator("some/model", api_key="sk-test", client=mock_client)

        with caplog.at_level(logging.DEBUG, logger="tldrbot.text_generators.openrouter"):
            with pytest.raises(openai.APIConnectionError):
                await gen.complete([{"role": "user", "content": "x"}])

        assert "connection error" in caplog.text
        assert [r for r in caplog.records if r.levelno >= logging.WARNING] == []
        mock_client.chat.completions.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_client_patch(self, mock_client):
        gen = OpenRouterChatGenerator("some/model", api_key="sk-test")
        with patch.object(gen, "_get_client", return_value=mock_client):
            await gen.complete([{"role": "user", "content": "x"}])
        mock_client.chat.completions.create.assert_awaited_once()
