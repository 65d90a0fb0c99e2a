# text_generators/openrouter.py
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from openai import APIConnectionError, APIError, AsyncOpenAI, RateLimitError

from .base import ChatCompletionAPI

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion

    from tldrbot.summarization.prompt import ChatMessage

_LOG = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterChatGenerator(ChatCompletionAPI):
    """Chat-completions backend for any OpenAI-compatible endpoint.

    Defaults to OpenRouter. The endpoint, key and model are passed in
    explicitly; nothing is read from the environment here. The client never
    retries, so one failed request surfaces straight to the caller.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        client: AsyncOpenAI | None = None,
    ) -> None:
        if not api_key and client is None:
            raise ValueError("api_key is required for the chat-completions endpoint")
        self.model = model
        self.base_url = base_url
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)

    def _get_client(self) -> AsyncOpenAI:
        return self._client

    async def complete(self, messages: Sequence[ChatMessage]) -> ChatCompletion:
        """Send one chat-completions request and return the raw response."""
        client = self._get_client()

        _LOG.info("OpenRouter request: model=%s, messages=%d", self.model, len(messages))

        # Failures are traced only; the caller writes the error log entry.
        try:
            resp = await client.chat.completions.create(
                model=self.model,
                messages=list(messages),  # type: ignore[arg-type]
            )
        except RateLimitError as e:
            _LOG.debug("OpenRouter rate limit hit for model %s: %s", self.model, e)
            raise
        except APIConnectionError as e:
            _LOG.debug("OpenRouter connection error for model %s: %s", self.model, e)
            raise
        except APIError as e:
            _LOG.debug("OpenRouter API error for model %s (status %s): %s", self.model, getattr(e, 'status_code', 'unknown'), e)
            raise

        _LOG.debug("OpenRouter response: %s", resp)
        return resp
