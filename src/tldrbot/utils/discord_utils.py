"""Discord utility functions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tldrbot.summarization.content import Element, Other, Text, encode_content
from tldrbot.summarization.window import StoredMessage

if TYPE_CHECKING:
    from datetime import datetime

    import discord

PLATFORM = "discord"


def get_display_name(user: discord.User | discord.Member) -> str:
    """Get user's display name with proper fallback hierarchy.

    Priority: server nickname > global display name > username
    """
    if getattr(user, "nick", None):
        return user.nick  # type: ignore[union-attr]
    if getattr(user, "global_name", None):
        return user.global_name  # type: ignore[return-value]
    return user.name


def to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _attachment_type(attachment: discord.Attachment) -> str:
    ctype = (attachment.content_type or "").lower()
    for prefix in ("image", "video", "audio"):
        if ctype.startswith(prefix + "/"):
            return prefix
    return "file"


def message_elements(message: discord.Message) -> list[Element]:
    """Break a Discord message into content elements.

    Mentions are already resolved to names by ``clean_content``.
    """
    elements: list[Element] = []
    text = message.clean_content
    if text:
        elements.append(Text(text))
    for attachment in message.attachments:
        elements.append(Other(_attachment_type(attachment), {"url": attachment.url}))
    for sticker in message.stickers:
        elements.append(Other("sticker", {"name": sticker.name}))
    for _ in getattr(message, "message_snapshots", None) or ():
        elements.append(Other("forward"))
    for embed in message.embeds:
        elements.append(Other("embed", {"url": embed.url}))
    return elements


def message_to_stored(message: discord.Message) -> StoredMessage:
    """Map a guild message onto the message-log record.

    The text channel (or thread) is the conversation group the log is
    keyed by.
    """
    return StoredMessage(
        platform=PLATFORM,
        guild_id=str(message.channel.id),
        user_id=str(message.author.id),
        username=get_display_name(message.author),
        content=encode_content(message_elements(message)),
        timestamp=to_millis(message.created_at),
        message_id=str(message.id),
        channel_id=str(message.channel.id),
    )
