from __future__ import annotations

import sys
from typing import Any

from nanoclaw_agent_runner.app_config import RunnerPaths

IPC_SERVER_NAME = "nanoclaw"
IPC_SERVER_MODULE = "nanoclaw_agent_runner.mcp.ipc_server"

ENV_CHAT_JID = "NANOCLAW_CHAT_JID"
ENV_GROUP_FOLDER = "NANOCLAW_GROUP_FOLDER"
ENV_IS_MAIN = "NANOCLAW_IS_MAIN"
ENV_IPC_DIR = "NANOCLAW_IPC_DIR"


def ipc_tool_pattern() -> str:
    return f"mcp__{IPC_SERVER_NAME}__*"


def create_ipc_mcp(
    *,
    chat_jid: str,
    group_folder: str,
    is_main: bool,
    paths: RunnerPaths | None = None,
) -> dict[str, Any]:
    """Stdio server config for the engine's `mcp_servers` option."""
    paths = paths or RunnerPaths()
    return {
        "type": "stdio",
        "command": sys.executable,
        "args": ["-m", IPC_SERVER_MODULE],
        "env": {
            ENV_CHAT_JID: chat_jid,
            ENV_GROUP_FOLDER: group_folder,
            ENV_IS_MAIN: "1" if is_main else "0",
            ENV_IPC_DIR: str(paths.ipc_dir),
        },
    }
