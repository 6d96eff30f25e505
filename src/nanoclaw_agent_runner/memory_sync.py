from __future__ import annotations

from pathlib import Path

from loguru import logger


def read_file_if_exists(path: Path) -> str | None:
    """Return the trimmed text of path, or None if it is missing or unreadable."""
    try:
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as ex:
        logger.warning(f"Failed to read file {path}: {ex}")
        return None


def ensure_file_synced(source: Path, target: Path) -> bool:
    """Copy source over target unless target already holds the same bytes.

    Returns True only when target was written.
    """
    try:
        if not source.exists():
            return False
        content = source.read_bytes()
        if target.exists() and target.read_bytes() == content:
            return False
        target.write_bytes(content)
        logger.info(f"Synced memory file {source} -> {target}")
        return True
    except OSError as ex:
        logger.warning(f"Failed to prepare global memory file: {ex}")
        return False
