from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RunnerPaths:
    group_dir: Path = Path("/workspace/group")
    archive_dir: Path = Path("/workspace/group/conversations")
    group_memory: Path = Path("/workspace/group/CLAUDE.md")
    main_global_memory: Path = Path("/workspace/project/groups/global/CLAUDE.md")
    shared_global_memory: Path = Path("/workspace/global/CLAUDE.md")
    claude_memory_target: Path = Path("/workspace/CLAUDE.md")
    ipc_dir: Path = Path("/workspace/ipc")
    codex_home: Path = Path("/home/node/.codex")

    def global_memory(self, is_main: bool) -> Path:
        # The main group mounts the whole project, other groups get a read-only copy.
        return self.main_global_memory if is_main else self.shared_global_memory

    @property
    def codex_config(self) -> Path:
        return self.codex_home / "config.toml"

    @property
    def codex_auth(self) -> Path:
        return self.codex_home / "auth.json"

    @property
    def ipc_messages_dir(self) -> Path:
        return self.ipc_dir / "messages"

    @property
    def ipc_tasks_dir(self) -> Path:
        return self.ipc_dir / "tasks"


@dataclass(frozen=True)
class RuntimeEnv:
    codex_api_key: str | None = None
    log_level: str = "INFO"
    log_file: str | None = None


API_KEY_ENV_VARS = ("CODEX_API_KEY", "OPENAI_API_KEY")


def resolve_runtime_env(environ: Mapping[str, str] | None = None) -> RuntimeEnv:
    if environ is None:
        environ = os.environ

    api_key: str | None = None
    for name in API_KEY_ENV_VARS:
        value = environ.get(name, "").strip()
        if value:
            api_key = value
            break

    return RuntimeEnv(
        codex_api_key=api_key,
        log_level=environ.get("NANOCLAW_LOG_LEVEL", "INFO").strip().upper() or "INFO",
        log_file=environ.get("NANOCLAW_LOG_FILE", "").strip() or None,
    )
