from nanoclaw_agent_runner.archive.hook import archive_transcript, create_pre_compact_hook
from nanoclaw_agent_runner.archive.markdown import (
    format_transcript_markdown,
    generate_fallback_name,
    sanitize_filename,
)
from nanoclaw_agent_runner.archive.sessions_index import SessionEntry, SessionsIndex, get_session_summary
from nanoclaw_agent_runner.archive.transcript import ParsedMessage, parse_transcript

__all__ = [
    "ParsedMessage",
    "SessionEntry",
    "SessionsIndex",
    "archive_transcript",
    "create_pre_compact_hook",
    "format_transcript_markdown",
    "generate_fallback_name",
    "get_session_summary",
    "parse_transcript",
    "sanitize_filename",
]
