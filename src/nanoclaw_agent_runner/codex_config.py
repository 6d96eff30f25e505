from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

APPROVAL_POLICY_KEY = "approval_policy"
SANDBOX_MODE_KEY = "sandbox_mode"


@dataclass(frozen=True)
class CodexPolicy:
    approval: str
    sandbox: str


_POLICIES: dict[str, CodexPolicy] = {
    "readonly": CodexPolicy(approval="never", sandbox="read-only"),
    "full": CodexPolicy(approval="never", sandbox="danger-full-access"),
    "auto": CodexPolicy(approval="on-request", sandbox="workspace-write"),
}


def resolve_codex_policy(approval_policy: str | None) -> CodexPolicy:
    return _POLICIES.get(approval_policy or "auto", _POLICIES["auto"])


def upsert_config_value(contents: str, key: str, value: str) -> str:
    """Set `key = "value"` in a TOML-ish document, leaving every other line alone.

    The first existing assignment of key is rewritten in place; otherwise the
    line is appended after the trailing whitespace of the document.
    """
    line = f'{key} = "{value}"'
    pattern = re.compile(rf'^[ \t]*{re.escape(key)}[ \t]*=[ \t]*".*"[ \t]*$', re.MULTILINE)
    if pattern.search(contents):
        return pattern.sub(lambda _: line, contents, count=1)

    trimmed = contents.rstrip()
    separator = "\n" if trimmed else ""
    return f"{trimmed}{separator}{line}\n"


def render_minimal_config(policy: CodexPolicy) -> str:
    return "\n".join([
        f'{APPROVAL_POLICY_KEY} = "{policy.approval}"',
        f'{SANDBOX_MODE_KEY} = "{policy.sandbox}"',
        "",
    ])


def ensure_codex_config(config_path: Path, approval_policy: str | None) -> CodexPolicy:
    """Patch the approval and sandbox keys of the codex config file.

    If reading or patching fails, the file is replaced by a document holding
    only the two managed keys, dropping anything else it contained.
    """
    policy = resolve_codex_policy(approval_policy)

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        existing = config_path.read_text(encoding="utf-8") if config_path.exists() else ""
        updated = upsert_config_value(existing, APPROVAL_POLICY_KEY, policy.approval)
        updated = upsert_config_value(updated, SANDBOX_MODE_KEY, policy.sandbox)
        if updated != existing:
            config_path.write_text(updated, encoding="utf-8")
    except Exception as ex:
        logger.warning(f"Failed to update Codex config: {ex}")
        try:
            config_path.write_text(render_minimal_config(policy), encoding="utf-8")
        except OSError as write_ex:
            logger.error(f"Failed to write fallback Codex config: {write_ex}")

    return policy
