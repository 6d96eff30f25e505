from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal


@dataclass(frozen=True)
class ParsedMessage:
    role: Literal["user", "assistant"]
    content: str


def parse_transcript(content: str) -> list[ParsedMessage]:
    """Turn a JSONL session transcript into user/assistant text messages.

    Lines that are not valid JSON are skipped. Tool calls, tool results and
    any other record types carry no text and are dropped.
    """
    messages: list[ParsedMessage] = []

    for line in content.split("\n"):
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except (ValueError, RecursionError):
            continue
        if not isinstance(entry, dict):
            continue

        message = entry.get("message")
        if not isinstance(message, dict):
            continue
        raw = message.get("content")
        if not raw:
            continue

        entry_type = entry.get("type")
        if entry_type == "user":
            text = _user_text(raw)
            if text:
                messages.append(ParsedMessage(role="user", content=text))
        elif entry_type == "assistant":
            text = _assistant_text(raw)
            if text:
                messages.append(ParsedMessage(role="assistant", content=text))

    return messages


def _user_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if not isinstance(raw, list):
        return ""
    return "".join(_block_text(block) for block in raw)


def _assistant_text(raw: Any) -> str:
    if not isinstance(raw, list):
        return ""
    return "".join(
        _block_text(block)
        for block in raw
        if isinstance(block, dict) and block.get("type") == "text"
    )


def _block_text(block: Any) -> str:
    if not isinstance(block, dict):
        return ""
    text = block.get("text")
    return text if isinstance(text, str) else ""
