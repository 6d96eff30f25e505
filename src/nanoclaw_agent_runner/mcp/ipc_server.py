from __future__ import annotations

import json
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from uuid import uuid4

from mcp.server.fastmcp import FastMCP

from nanoclaw_agent_runner.mcp.ipc_mcp import (
    ENV_CHAT_JID,
    ENV_GROUP_FOLDER,
    ENV_IPC_DIR,
    ENV_IS_MAIN,
    IPC_SERVER_NAME,
)

SCHEDULE_TYPES = ("cron", "interval", "once")
CONTEXT_MODES = ("group", "isolated")

mcp = FastMCP(IPC_SERVER_NAME)


@dataclass(frozen=True)
class IpcContext:
    chat_jid: str
    group_folder: str
    is_main: bool
    ipc_dir: Path

    @property
    def messages_dir(self) -> Path:
        return self.ipc_dir / "messages"

    @property
    def tasks_dir(self) -> Path:
        return self.ipc_dir / "tasks"


def load_context(environ: dict[str, str] | None = None) -> IpcContext:
    env = os.environ if environ is None else environ
    return IpcContext(
        chat_jid=env.get(ENV_CHAT_JID, ""),
        group_folder=env.get(ENV_GROUP_FOLDER, ""),
        is_main=env.get(ENV_IS_MAIN, "0") == "1",
        ipc_dir=Path(env.get(ENV_IPC_DIR, "/workspace/ipc")),
    )


def write_ipc_file(directory: Path, payload: dict[str, Any]) -> Path:
    """Drop payload as a JSON file; the rename keeps the host from reading a partial file."""
    directory.mkdir(parents=True, exist_ok=True)
    filename = f"{int(time.time() * 1000)}-{uuid4().hex[:8]}.json"
    final_path = directory / filename
    temp_path = directory / f".{filename}.tmp"
    temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    temp_path.rename(final_path)
    return final_path


def queue_message(ctx: IpcContext, text: str) -> Path:
    return write_ipc_file(
        ctx.messages_dir,
        {
            "type": "message",
            "chatJid": ctx.chat_jid,
            "text": text,
            "groupFolder": ctx.group_folder,
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        },
    )


def queue_task(
    ctx: IpcContext,
    *,
    prompt: str,
    schedule_type: str,
    schedule_value: str,
    context_mode: str = "group",
    target_group: str | None = None,
) -> Path:
    if schedule_type not in SCHEDULE_TYPES:
        raise ValueError(f"schedule_type must be one of {', '.join(SCHEDULE_TYPES)}")
    if context_mode not in CONTEXT_MODES:
        raise ValueError(f"context_mode must be one of {', '.join(CONTEXT_MODES)}")

    group_folder = ctx.group_folder
    if target_group and target_group != ctx.group_folder:
        if not ctx.is_main:
            raise ValueError("Only the main group can schedule tasks for other groups")
        group_folder = target_group

    return write_ipc_file(
        ctx.tasks_dir,
        {
            "type": "schedule_task",
            "prompt": prompt,
            "schedule_type": schedule_type,
            "schedule_value": schedule_value,
            "context_mode": context_mode,
            "groupFolder": group_folder,
            "chatJid": ctx.chat_jid,
            "createdBy": ctx.group_folder,
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        },
    )


@mcp.tool(description="Send a message to the current chat. Use this for progress updates or results of scheduled tasks.")
def send_message(text: str) -> str:
    path = queue_message(load_context(), text)
    return f"Message queued for delivery ({path.name})"


@mcp.tool(
    description=(
        "Schedule a recurring or one-time task. schedule_type is cron, interval (milliseconds) "
        "or once (local ISO timestamp). context_mode 'group' keeps chat history, 'isolated' starts fresh."
    )
)
def schedule_task(
    prompt: str,
    schedule_type: str,
    schedule_value: str,
    context_mode: str = "group",
    target_group: str | None = None,
) -> str:
    path = queue_task(
        load_context(),
        prompt=prompt,
        schedule_type=schedule_type,
        schedule_value=schedule_value,
        context_mode=context_mode,
        target_group=target_group,
    )
    return f"Task scheduled ({path.name}): {schedule_type} - {schedule_value}"


if __name__ == "__main__":
    mcp.run()
