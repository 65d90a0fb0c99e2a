"""Summary generation against a chat-completions provider."""

from __future__ import annotations

import logging

from openai import OpenAIError

from tldrbot.text_generators.base import ChatCompletionAPI

from .prompt import SummaryPrompt

_LOG = logging.getLogger(__name__)


class GenerationError(RuntimeError):
    """The provider call failed or returned nothing usable."""


class Summarizer:
    """Handles summary generation using a chat-completions provider."""

    def __init__(self, generator: ChatCompletionAPI):
        """
        Initialize summarizer.

        Args:
            generator: Provider client. It is called exactly once per
                ``summarize`` call and never retried.
        """
        self.generator = generator

    async def summarize(self, prompt: SummaryPrompt) -> str:
        """
        Request a summary for ``prompt``.

        Returns:
            The first choice's refusal text if the provider refused,
            otherwise its content.

        Raises:
            GenerationError: on transport failure, a non-success status, or
                a response without a usable first choice.
        """
        try:
            completion = await self.generator.complete(prompt.to_messages())
        except OpenAIError as e:
            raise GenerationError(f"request to model {self.generator.model} failed") from e

        choices = getattr(completion, "choices", None)
        if not choices:
            raise GenerationError("provider returned no completion choices")
        message = getattr(choices[0], "message", None)
        if message is None:
            raise GenerationError("first completion choice has no message")

        refusal = getattr(message, "refusal", None)
        if refusal and refusal.strip():
            _LOG.info("Model %s refused the summary request", self.generator.model)
            return refusal

        content = getattr(message, "content", None)
        if not content or not content.strip():
            raise GenerationError("first completion choice has neither content nor refusal")
        return content
