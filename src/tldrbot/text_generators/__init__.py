# text_generators/__init__.py
from .base import ChatCompletionAPI
from .openrouter import OpenRouterChatGenerator

__all__ = [
    "ChatCompletionAPI",
    "OpenRouterChatGenerator",
]
