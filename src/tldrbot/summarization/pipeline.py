"""The tldr invocation pipeline.

One ``run`` call walks a single invocation through
Validating -> Selecting -> Flattening -> Requesting -> Composing -> Delivered,
or ends in Failed after sending exactly one plain-text message.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Optional, Protocol

from .prompt import assemble_prompt
from .reply import GroupedReply, compose_reply, status_notice
from .summarizer import GenerationError, Summarizer
from .window import MessageStore, SelectionCriteria, select_window

if TYPE_CHECKING:
    from tldrbot.settings import TldrConfig

_LOG = logging.getLogger(__name__)

NO_GUILD_MESSAGE = "Please use this command in a server channel."
NOT_ENABLED_MESSAGE = "TL;DR is not enabled in this server."
WRONG_PLATFORM_MESSAGE = "That user is not on this platform."
NOTHING_FOUND_MESSAGE = "No messages found to summarize."
REQUEST_FAILED_MESSAGE = "Request failed, please try again later."


def over_limit_message(max_count: int) -> str:
    return f"The maximum number of messages is {max_count}."


class PipelineState(enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SELECTING = "selecting"
    FLATTENING = "flattening"
    REQUESTING = "requesting"
    COMPOSING = "composing"
    DELIVERED = "delivered"
    FAILED = "failed"


class InvocationContext(Protocol):
    """What the chat host tells the pipeline about one command call."""

    platform: str
    guild_id: Optional[str]
    # (platform, user_id) of the -u target, if any
    target_user: Optional[tuple[str, str]]
    # timestamp (ms) of the replied-to message, if any
    anchor_timestamp: Optional[int]
    instruction: Optional[str]
    count: Optional[int]

    async def send_text(self, text: str) -> None:
        ...

    async def send_reply(self, reply: GroupedReply) -> None:
        ...


class TldrPipeline:
    """Turns one invocation into a summary reply.

    Holds only the immutable config and the injected store and summarizer,
    so a single instance serves concurrent invocations.
    """

    def __init__(self, config: TldrConfig, store: MessageStore, summarizer: Summarizer) -> None:
        self.config = config
        self.store = store
        self.summarizer = summarizer

    def _validate(self, context: InvocationContext) -> tuple[Optional[str], Optional[SelectionCriteria]]:
        """Return (usage error text, None) or (None, criteria)."""
        if not context.guild_id:
            return NO_GUILD_MESSAGE, None
        if not self.config.is_guild_enabled(context.guild_id):
            return NOT_ENABLED_MESSAGE, None

        count = context.count or self.config.default_count
        if count > self.config.max_count:
            return over_limit_message(self.config.max_count), None

        user_id = None
        if context.target_user is not None:
            user_platform, user_id = context.target_user
            if user_platform != context.platform:
                return WRONG_PLATFORM_MESSAGE, None

        criteria = SelectionCriteria(
            platform=context.platform,
            guild_id=context.guild_id,
            limit=count,
            user_id=user_id,
            min_timestamp=context.anchor_timestamp,
        )
        return None, criteria

    async def _fail(self, context: InvocationContext, text: str) -> PipelineState:
        await context.send_text(text)
        return self._enter(context, PipelineState.FAILED)

    @staticmethod
    def _enter(context: InvocationContext, state: PipelineState) -> PipelineState:
        _LOG.debug("tldr in guild %s: %s", context.guild_id, state.value)
        return state

    async def run(self, context: InvocationContext) -> PipelineState:
        """Run one invocation and return the terminal state."""
        self._enter(context, PipelineState.VALIDATING)
        error, criteria = self._validate(context)
        if error is not None or criteria is None:
            return await self._fail(context, error or NO_GUILD_MESSAGE)

        self._enter(context, PipelineState.SELECTING)
        messages = select_window(self.store, criteria)
        if not messages:
            return await self._fail(context, NOTHING_FOUND_MESSAGE)

        self._enter(context, PipelineState.FLATTENING)
        anchored = criteria.min_timestamp is not None
        prompt = assemble_prompt(self.config.prompt, context.instruction, messages)

        self._enter(context, PipelineState.REQUESTING)
        await context.send_text(status_notice(len(messages), anchored))
        try:
            summary = await self.summarizer.summarize(prompt)
        except GenerationError:
            _LOG.exception(
                "Summary generation failed for guild %s (%d messages)",
                criteria.guild_id,
                len(messages),
            )
            return await self._fail(context, REQUEST_FAILED_MESSAGE)

        self._enter(context, PipelineState.COMPOSING)
        reply = compose_reply(len(messages), summary, anchored)
        await context.send_reply(reply)
        return self._enter(context, PipelineState.DELIVERED)
