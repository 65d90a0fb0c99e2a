"""Structured message content and plain-text flattening.

Stored message bodies are a JSON array of elements such as
``[{"type": "text", "text": "hi"}, {"type": "image", "url": "..."}]``.
The flattener only ever sees the parsed element variants below.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class Text:
    """Plain-text element."""

    text: str


@dataclass(frozen=True)
class Other:
    """Any non-text element (image, sticker, embed, forward, ...)."""

    type: str
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)


Element = Union[Text, Other]


def _element_from_dict(raw: object) -> Element | None:
    if not isinstance(raw, dict):
        return None
    kind = raw.get("type")
    if not isinstance(kind, str) or not kind:
        return None
    if kind == "text":
        text = raw.get("text")
        return Text(text) if isinstance(text, str) else None
    attrs = {k: v for k, v in raw.items() if k != "type"}
    return Other(kind, attrs)


def parse_content(raw: str | None) -> list[Element]:
    """Parse an encoded message body into elements.

    Never raises: anything that is not a JSON array yields an empty list and
    malformed entries are dropped.
    """
    if not raw:
        return []
    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return []
    if not isinstance(decoded, list):
        return []
    elements: list[Element] = []
    for item in decoded:
        element = _element_from_dict(item)
        if element is not None:
            elements.append(element)
    return elements


def encode_content(elements: Iterable[Element]) -> str:
    """Encode elements into the stored JSON form."""
    payload: list[dict[str, Any]] = []
    for element in elements:
        if isinstance(element, Text):
            payload.append({"type": "text", "text": element.text})
        else:
            payload.append({**element.attrs, "type": element.type})
    return json.dumps(payload, ensure_ascii=False)


def flatten(content: str | Sequence[Element] | None) -> str:
    """Return the plain-text rendering of one message body.

    Text elements contribute their literal text; every other element
    contributes a ``[type]`` placeholder. Pieces are joined without a
    separator.
    """
    if content is None or isinstance(content, str):
        elements: Sequence[Element] = parse_content(content)
    else:
        elements = content

    pieces: list[str] = []
    for element in elements:
        if isinstance(element, Text):
            pieces.append(element.text)
        else:
            pieces.append(f"[{element.type}]")
    return "".join(pieces)
