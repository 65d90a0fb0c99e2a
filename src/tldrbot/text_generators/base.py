from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from openai.types.chat import ChatCompletion

    from tldrbot.summarization.prompt import ChatMessage


class ChatCompletionAPI(ABC):
    """Abstract base class for chat-completion providers."""

    model: str

    @abstractmethod
    async def complete(self, messages: Sequence[ChatMessage]) -> ChatCompletion:
        """Return the raw completion for the given role-tagged messages."""
        raise NotImplementedError
