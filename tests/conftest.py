"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from tldrbot.message_db import MessageDB
from tldrbot.summarization.window import StoredMessage


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_db(temp_dir):
    """Create a temporary database file path."""
    db_file = temp_dir / "test.db"
    yield str(db_file)


@pytest.fixture
def message_db(temp_db):
    """An initialized MessageDB backed by a temporary file."""
    db = MessageDB(temp_db)
    db.init_db()
    return db


def text_content(text: str) -> str:
    return json.dumps([{"type": "text", "text": text}])


def make_message(
    n: int,
    *,
    user_id: str = "1",
    username: str | None = None,
    guild_id: str = "100",
    platform: str = "discord",
    text: str | None = None,
    timestamp: int | None = None,
) -> StoredMessage:
    """Build the n-th message of a test conversation (timestamps grow with n)."""
    return StoredMessage(
        platform=platform,
        guild_id=guild_id,
        user_id=user_id,
        username=username or f"User{user_id}",
        content=text_content(text if text is not None else f"message {n}"),
        timestamp=timestamp if timestamp is not None else 1_000_000 + n * 1000,
        message_id=f"{platform}-{guild_id}-{n}",
        channel_id=guild_id,
    )


def make_completion(content: str | None = "summary", refusal: str | None = None):
    """Shape-compatible stand-in for an openai ChatCompletion."""
    message = SimpleNamespace(content=content, refusal=refusal, role="assistant")
    return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason="stop")])


class FakeGenerator:
    """ChatCompletionAPI stand-in that records calls."""

    def __init__(self, completion=None, error: Exception | None = None):
        self.model = "test/model"
        self.completion = completion if completion is not None else make_completion()
        self.error = error
        self.calls: list[list[dict]] = []

    async def complete(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.completion


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def mock_discord_ctx():
    """Create a mock Discord command context inside a guild channel."""
    ctx = MagicMock()
    ctx.author = MagicMock()
    ctx.author.id = 111222333
    ctx.author.name = "TestUser"
    ctx.guild = MagicMock()
    ctx.guild.id = 555
    ctx.channel = MagicMock()
    ctx.channel.id = 100
    ctx.message = MagicMock()
    ctx.message.reference = None
    ctx.send = AsyncMock()
    ctx.reply = AsyncMock()
    return ctx
