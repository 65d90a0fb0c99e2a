from __future__ import annotations

import logging
import re
from typing import Optional

import discord
from discord.ext import commands

from tldrbot.message_db import MessageDB
from tldrbot.settings import TldrConfig, load_config
from tldrbot.summarization import GroupedReply, Summarizer, TldrPipeline
from tldrbot.text_generators import OpenRouterChatGenerator
from tldrbot.utils.discord_utils import PLATFORM, message_to_stored, to_millis

__all__ = ["Tldr", "parse_options"]

_LOG = logging.getLogger(__name__)

EMBED_DESCRIPTION_LIMIT = 4096
_SUMMARY_COLOUR = discord.Colour.blurple()

# -u <user> and -i <instruction...>; the instruction runs to the end of the text.
_USER_OPT = re.compile(r"(?:^|\s)(?:-u|--user)\s+(\S+)")
_INSTRUCTION_OPT = re.compile(r"(?:^|\s)(?:-i|--instruction)\s+(.+)$", re.DOTALL)
_PLATFORM_USER = re.compile(r"^([a-z][\w-]*):(\S+)$")


def parse_options(raw: str) -> tuple[Optional[str], Optional[str]]:
    """Split the option text into (user token, instruction)."""
    raw = raw or ""
    instruction = None
    match = _INSTRUCTION_OPT.search(raw)
    if match:
        instruction = match.group(1).strip() or None
        raw = raw[: match.start()]
    user_match = _USER_OPT.search(raw)
    user_token = user_match.group(1) if user_match else None
    return user_token, instruction


def split_summary(text: str, limit: int = EMBED_DESCRIPTION_LIMIT) -> list[str]:
    """Split text into chunks of at most ``limit`` chars, preferring line breaks."""
    if not text:
        return [""]
    chunks: list[str] = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    chunks.append(text)
    return chunks


class DiscordInvocation:
    """One tldr command call, seen through the pipeline's InvocationContext."""

    platform = PLATFORM

    def __init__(
        self,
        ctx: commands.Context,
        *,
        count: Optional[int],
        target_user: Optional[tuple[str, str]],
        instruction: Optional[str],
        anchor_timestamp: Optional[int],
    ) -> None:
        self._ctx = ctx
        self.guild_id = str(ctx.channel.id) if ctx.guild is not None else None
        self.count = count
        self.target_user = target_user
        self.instruction = instruction
        self.anchor_timestamp = anchor_timestamp

    async def send_text(self, text: str) -> None:
        await self._ctx.send(text)

    async def send_reply(self, reply: GroupedReply) -> None:
        chunks = split_summary(reply.summary)
        first = discord.Embed(description=chunks[0], colour=_SUMMARY_COLOUR)
        await self._ctx.send(reply.status, embed=first)
        for chunk in chunks[1:]:
            await self._ctx.send(embed=discord.Embed(description=chunk, colour=_SUMMARY_COLOUR))


class Tldr(commands.Cog):
    """Summarize recent channel messages with an LLM."""

    def __init__(
        self,
        bot: commands.Bot,
        config: TldrConfig | None = None,
        db: MessageDB | None = None,
        summarizer: Summarizer | None = None,
    ) -> None:
        self.bot = bot
        self.config = config or load_config()
        if db is None:
            db = MessageDB(self.config.db_path)
            db.init_db()
        self.db = db
        if summarizer is None:
            summarizer = Summarizer(
                OpenRouterChatGenerator(
                    self.config.model,
                    api_key=self.config.api_key,
                    base_url=self.config.endpoint,
                )
            )
        self.pipeline = TldrPipeline(self.config, self.db, summarizer)

    # ==================== Message logging ====================

    async def _is_tldr_invocation(self, message: discord.Message) -> bool:
        ctx = await self.bot.get_context(message)
        return ctx.valid and ctx.command is not None and ctx.command.qualified_name == "tldr"

    @commands.Cog.listener("on_message")
    async def record_message(self, message: discord.Message) -> None:
        if message.guild is None:
            return
        if message.author.id == getattr(self.bot.user, "id", None):
            return
        if await self._is_tldr_invocation(message):
            return
        try:
            self.db.log_message(message_to_stored(message))
        except Exception:  # noqa: BLE001
            _LOG.exception("Failed to record message %s", message.id)

    # ==================== Command ====================

    @staticmethod
    def _resolve_anchor(message: discord.Message) -> Optional[int]:
        """Timestamp (ms) of the message the command replies to, if any."""
        reference = message.reference
        if reference is None or reference.message_id is None:
            return None
        resolved = reference.resolved
        if isinstance(resolved, discord.Message):
            return to_millis(resolved.created_at)
        # Deleted or uncached: the snowflake still encodes the creation time.
        return to_millis(discord.utils.snowflake_time(reference.message_id))

    async def _resolve_user(self, ctx: commands.Context, token: str) -> Optional[tuple[str, str]]:
        """Turn a -u token into (platform, user id); None if it names nobody."""
        match = _PLATFORM_USER.match(token)
        if match and not token.startswith("<"):
            return match.group(1), match.group(2)
        try:
            user = await commands.UserConverter().convert(ctx, token)
        except commands.BadArgument:
            return None
        return PLATFORM, str(user.id)

    @commands.command(name="tldr", usage="[count] [-u <user>] [-i <instruction>]")
    async def tldr(
        self,
        ctx: commands.Context,
        count: Optional[int] = None,
        *,
        options: str = "",
    ) -> None:
        """Summarize the last [count] messages (reply to a message to start from it)."""
        if count is not None and count <= 0:
            await ctx.send("Count must be a positive number.")
            return

        user_token, instruction = parse_options(options)
        target_user = None
        if user_token:
            target_user = await self._resolve_user(ctx, user_token)
            if target_user is None:
                await ctx.send(f"Could not find user `{user_token}`.")
                return

        anchor = self._resolve_anchor(ctx.message)
        invocation = DiscordInvocation(
            ctx,
            count=count,
            target_user=target_user,
            instruction=instruction,
            anchor_timestamp=anchor,
        )
        await self.pipeline.run(invocation)


async def setup(bot: commands.Bot) -> None:
    await bot.add_cog(Tldr(bot))
