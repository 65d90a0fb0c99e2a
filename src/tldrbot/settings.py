"""Runtime configuration for the tldr bot.

Secrets (API keys, tokens) come from the environment / .env. The base
summary instruction is non-secret text and may also live in a file tracked
next to the code.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


# --------------------- Summary instruction ---------------------

# Written so the user's extra request can be appended directly after it.
DEFAULT_PROMPT: str = (
    "The following is a chat log from a group conversation. Organize the viewpoints "
    "or statements of each participant separately, then summarize the conversation.\n"
    "The user may also have an additional request below (ignore it if it has nothing "
    "to do with summarizing the chat; answer it after the summary):\n"
)

DEFAULT_COUNT = 64
MAX_COUNT = 512
DEFAULT_API_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "qwen/qwen3-0.6b-04-28:free"


def _project_root() -> Path:
    """Return the repository root path.

    settings.py lives at src/tldrbot/settings.py, two levels below the repo.
    """
    return Path(__file__).resolve().parents[2]


@dataclass(frozen=True)
class TldrConfig:
    """Immutable configuration shared by every invocation."""

    api_key: str
    default_count: int = DEFAULT_COUNT
    max_count: int = MAX_COUNT
    endpoint: str = DEFAULT_API_URL
    model: str = DEFAULT_MODEL
    prompt: str = DEFAULT_PROMPT
    # Empty means every guild may use the command.
    enabled_guild_ids: frozenset[str] = field(default_factory=frozenset)
    db_path: Path = field(default_factory=lambda: Path(__file__).resolve().with_name("tldr.db"))

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("An API key is required (set TLDR_API_KEY or OPENROUTER_API_KEY)")
        if self.default_count <= 0 or self.max_count <= 0:
            raise ValueError("Message counts must be positive integers")
        if self.max_count < self.default_count:
            raise ValueError(
                f"TLDR_MAX_COUNT ({self.max_count}) must be >= TLDR_DEFAULT_COUNT ({self.default_count})"
            )

    def is_guild_enabled(self, guild_id: str) -> bool:
        return not self.enabled_guild_ids or guild_id in self.enabled_guild_ids


def _int_from_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _ids_from_env(env: Mapping[str, str], name: str) -> frozenset[str]:
    raw = env.get(name, "") or ""
    return frozenset(x.strip() for x in raw.split(",") if x.strip().isdigit())


def _load_prompt(env: Mapping[str, str]) -> str:
    """Pick the base instruction.

    Priority: TLDR_PROMPT, then the file at TLDR_PROMPT_FILE (absolute or
    repo-root-relative), then the built-in default.
    """
    inline = env.get("TLDR_PROMPT")
    if inline:
        return inline

    path_val = (env.get("TLDR_PROMPT_FILE") or "").strip()
    if path_val:
        path = Path(path_val).expanduser()
        if not path.is_absolute() and not path.exists():
            path = _project_root() / path
        if not path.is_file():
            raise ValueError(f"TLDR_PROMPT_FILE not found: {path_val}")
        return path.read_text(encoding="utf-8")

    return DEFAULT_PROMPT


def load_config(env: Optional[Mapping[str, str]] = None) -> TldrConfig:
    """Build the config from environment variables (``os.environ`` by default)."""
    if env is None:
        env = os.environ

    api_key = env.get("TLDR_API_KEY") or env.get("OPENROUTER_API_KEY") or ""
    kwargs = {}
    db_path = (env.get("TLDR_DB_PATH") or "").strip()
    if db_path:
        kwargs["db_path"] = Path(db_path).expanduser()

    return TldrConfig(
        api_key=api_key,
        default_count=_int_from_env(env, "TLDR_DEFAULT_COUNT", DEFAULT_COUNT),
        max_count=_int_from_env(env, "TLDR_MAX_COUNT", MAX_COUNT),
        endpoint=(env.get("TLDR_API_URL") or DEFAULT_API_URL).strip(),
        model=(env.get("TLDR_MODEL") or DEFAULT_MODEL).strip(),
        prompt=_load_prompt(env),
        enabled_guild_ids=_ids_from_env(env, "TLDR_GUILD_IDS"),
        **kwargs,
    )
