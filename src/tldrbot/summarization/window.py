"""Message window selection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class StoredMessage:
    """One persisted chat message as read back from the message log."""

    platform: str
    guild_id: str
    user_id: str
    username: str
    content: str  # encoded element list, see summarization.content
    timestamp: int  # epoch milliseconds
    message_id: str = ""
    channel_id: str = ""


@dataclass(frozen=True)
class SelectionCriteria:
    """Filter for one window query.

    ``user_id`` of None means every participant; ``min_timestamp`` is an
    inclusive lower bound taken from the anchor message.
    """

    platform: str
    guild_id: str
    limit: int
    user_id: Optional[str] = None
    min_timestamp: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.guild_id:
            raise ValueError("guild_id is required")
        if self.limit <= 0:
            raise ValueError(f"limit must be positive, got {self.limit}")


class MessageStore(Protocol):
    """Query side of the message log."""

    def query(self, criteria: SelectionCriteria) -> list[StoredMessage]:
        """Return matching messages ordered by timestamp descending, at most ``criteria.limit``."""
        ...


def select_window(store: MessageStore, criteria: SelectionCriteria) -> list[StoredMessage]:
    """Return the window for ``criteria``, newest first.

    With an anchor this keeps the most recent ``limit`` messages at or after
    the anchor, not the ``limit`` messages directly following it.
    The result is materialised once so later steps see a stable tie order.
    """
    return list(store.query(criteria))[: criteria.limit]
