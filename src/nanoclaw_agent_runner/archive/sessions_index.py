from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

SESSIONS_INDEX_FILENAME = "sessions-index.json"


@dataclass(frozen=True)
class SessionEntry:
    session_id: str
    full_path: str = ""
    summary: str = ""
    first_prompt: str = ""


@dataclass(frozen=True)
class SessionsIndex:
    entries: list[SessionEntry] = field(default_factory=list)

    def find(self, session_id: str) -> SessionEntry | None:
        for entry in self.entries:
            if entry.session_id == session_id:
                return entry
        return None

    @classmethod
    def from_dict(cls, data: dict) -> SessionsIndex:
        entries: list[SessionEntry] = []
        raw_entries = data.get("entries") or []
        if not isinstance(raw_entries, list):
            raise ValueError("sessions index entries is not a list")
        for raw in raw_entries:
            if not isinstance(raw, dict) or not isinstance(raw.get("sessionId"), str):
                continue
            entries.append(
                SessionEntry(
                    session_id=raw["sessionId"],
                    full_path=str(raw.get("fullPath") or ""),
                    summary=str(raw.get("summary") or ""),
                    first_prompt=str(raw.get("firstPrompt") or ""),
                )
            )
        return cls(entries=entries)


def sessions_index_path(transcript_path: str | Path) -> Path:
    # The engine keeps the index next to the transcripts of the same project.
    return Path(transcript_path).parent / SESSIONS_INDEX_FILENAME


def get_session_summary(session_id: str, transcript_path: str | Path) -> str | None:
    index_path = sessions_index_path(transcript_path)
    if not index_path.exists():
        logger.info(f"Sessions index not found at {index_path}")
        return None

    try:
        data = json.loads(index_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("sessions index root is not an object")
        entry = SessionsIndex.from_dict(data).find(session_id)
    except (OSError, ValueError) as ex:
        logger.warning(f"Failed to read sessions index: {ex}")
        return None

    if entry is not None and entry.summary:
        return entry.summary
    return None
