"""Grouped reply composition."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GroupedReply:
    """Status line and summary delivered together as one unit."""

    status: str
    summary: str


def status_notice(count: int, anchored: bool) -> str:
    """Text sent while the summary is being generated."""
    if anchored:
        return f"Summarizing {count} messages starting from the selected message…"
    return f"Summarizing the {count} most recent messages…"


def compose_reply(count: int, summary: str, anchored: bool) -> GroupedReply:
    if anchored:
        status = f"Summarized {count} messages starting from the selected message."
    else:
        status = f"Summarized the {count} most recent messages."
    return GroupedReply(status=status, summary=summary)
