from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime

from nanoclaw_agent_runner.archive.transcript import ParsedMessage

ASSISTANT_NAME = "Andy"
MAX_MESSAGE_CHARS = 2000
MAX_FILENAME_CHARS = 50

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")


def sanitize_filename(summary: str) -> str:
    slug = _NON_ALNUM_RUN.sub("-", summary.lower())
    return slug.strip("-")[:MAX_FILENAME_CHARS]


def generate_fallback_name(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"conversation-{now.hour:02d}{now.minute:02d}"


def format_archive_timestamp(moment: datetime) -> str:
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.strftime('%b')} {moment.day}, {hour}:{moment.minute:02d} {meridiem}"


def format_transcript_markdown(
    messages: Sequence[ParsedMessage],
    title: str | None = None,
    *,
    now: datetime | None = None,
) -> str:
    now = now or datetime.now()

    lines = [
        f"# {title or 'Conversation'}",
        "",
        f"Archived: {format_archive_timestamp(now)}",
        "",
        "---",
        "",
    ]

    for msg in messages:
        sender = "User" if msg.role == "user" else ASSISTANT_NAME
        body = msg.content
        if len(body) > MAX_MESSAGE_CHARS:
            body = body[:MAX_MESSAGE_CHARS] + "..."
        lines.append(f"**{sender}**: {body}")
        lines.append("")

    return "\n".join(lines)
