from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loguru import logger

from nanoclaw_agent_runner.archive.markdown import (
    format_transcript_markdown,
    generate_fallback_name,
    sanitize_filename,
)
from nanoclaw_agent_runner.archive.sessions_index import get_session_summary
from nanoclaw_agent_runner.archive.transcript import parse_transcript

PreCompactHook = Callable[[Any, str | None, Any], Awaitable[dict[str, Any]]]


def archive_transcript(
    transcript_path: str | None,
    session_id: str | None,
    archive_dir: Path,
) -> Path | None:
    """Write the transcript as markdown under archive_dir before the engine compacts it.

    Never raises. Returns the written path, or None when nothing was archived.
    Same-day archives with the same title overwrite each other.
    """
    try:
        if not transcript_path or not Path(transcript_path).exists():
            logger.info("No transcript found for archiving")
            return None

        content = Path(transcript_path).read_text(encoding="utf-8")
        messages = parse_transcript(content)

        if not messages:
            logger.info("No messages to archive")
            return None

        summary = get_session_summary(session_id, transcript_path) if session_id else None
        name = sanitize_filename(summary) if summary else ""
        if not name:
            name = generate_fallback_name()

        archive_dir.mkdir(parents=True, exist_ok=True)

        date = datetime.now(UTC).date().isoformat()
        file_path = archive_dir / f"{date}-{name}.md"
        file_path.write_text(format_transcript_markdown(messages, summary), encoding="utf-8")

        logger.info(f"Archived conversation to {file_path}")
        return file_path
    except Exception as ex:
        logger.error(f"Failed to archive transcript: {ex}")
        return None


def create_pre_compact_hook(archive_dir: Path) -> PreCompactHook:
    async def pre_compact_hook(input_data: Any, tool_use_id: str | None, context: Any) -> dict[str, Any]:
        transcript_path = input_data.get("transcript_path") if isinstance(input_data, dict) else None
        session_id = input_data.get("session_id") if isinstance(input_data, dict) else None
        archive_transcript(transcript_path, session_id, archive_dir)
        return {}

    return pre_compact_hook
