from discord.ext import commands

MAX_HELP_LEN = 1900  # keep a little margin below Discord 2000 limit


class Help(commands.Cog):
    """Usage text for the summary commands."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="help")
    async def help_cmd(self, ctx: commands.Context):
        """Show available commands (<=2000 chars)."""
        text = (
            "**TL;DR Help**\n"
            "Mention the bot to run commands anywhere (e.g., `@Bot help`).\n\n"
            "Summaries\n"
            "- `!tldr` summarize the most recent messages in this channel.\n"
            "- `!tldr 100` summarize the last 100 messages (capped by the server config).\n"
            "- Reply to a message with `!tldr` to summarize from that message onward.\n"
            "- `-u @user` only include one person's messages.\n"
            "- `-i <text>` add an extra request or question; it must come last.\n"
            "- Example: `!tldr 200 -u @alice -i what did she decide?`\n"
        )
        await ctx.send(text[:MAX_HELP_LEN])


async def setup(bot: commands.Bot):
    await bot.add_cog(Help(bot))
