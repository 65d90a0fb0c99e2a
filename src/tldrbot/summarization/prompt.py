"""Prompt assembly for chat-log summaries."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple, TypedDict

from .content import flatten
from .window import StoredMessage


class ChatMessage(TypedDict):
    role: str
    content: str


class FlattenedLine(NamedTuple):
    username: str
    text: str

    def render(self) -> str:
        return f"{self.username}: {self.text}"


@dataclass(frozen=True)
class SummaryPrompt:
    """System instruction plus the chronological transcript."""

    system: str
    transcript: tuple[FlattenedLine, ...]

    @property
    def transcript_text(self) -> str:
        return "\n".join(line.render() for line in self.transcript)

    def to_messages(self) -> list[ChatMessage]:
        """Render as role-tagged blocks: one system block, one user block."""
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.transcript_text},
        ]


def flatten_message(message: StoredMessage) -> FlattenedLine:
    return FlattenedLine(message.username, flatten(message.content))


def assemble_prompt(
    base_instruction: str,
    extra: str | None,
    messages: Sequence[StoredMessage],
) -> SummaryPrompt:
    """
    Build the summary prompt.

    Args:
        base_instruction: Configured system instruction. It is written so
            that free text can follow it directly.
        extra: Caller's extra instruction or question, appended with no
            separator. None is treated as empty.
        messages: Selected window, newest first as returned by
            ``select_window``.

    Returns:
        SummaryPrompt whose transcript is oldest first.
    """
    system = base_instruction + (extra or "")
    transcript = tuple(flatten_message(m) for m in reversed(messages))
    return SummaryPrompt(system=system, transcript=transcript)
