from __future__ import annotations

from collections.abc import Callable
from typing import Any

from claude_agent_sdk import ClaudeAgentOptions, ClaudeSDKClient, HookMatcher, ResultMessage, SystemMessage
from loguru import logger

from nanoclaw_agent_runner.app_config import RunnerPaths
from nanoclaw_agent_runner.archive import create_pre_compact_hook
from nanoclaw_agent_runner.errors import BackendExecutionError
from nanoclaw_agent_runner.mcp.ipc_mcp import IPC_SERVER_NAME, create_ipc_mcp, ipc_tool_pattern
from nanoclaw_agent_runner.memory_sync import ensure_file_synced
from nanoclaw_agent_runner.protocol import Request, Response

BUILTIN_TOOLS = [
    "Bash",
    "Read", "Write", "Edit", "Glob", "Grep",
    "WebSearch", "WebFetch",
]


class ClaudeBackend:
    """Interactive engine session, streamed to completion."""

    def __init__(
        self,
        paths: RunnerPaths,
        *,
        client_factory: Callable[..., Any] = ClaudeSDKClient,
    ):
        self._paths = paths
        self._client_factory = client_factory

    def build_options(self, request: Request) -> ClaudeAgentOptions:
        ipc_mcp = create_ipc_mcp(
            chat_jid=request.chat_jid,
            group_folder=request.group_folder,
            is_main=request.is_main,
            paths=self._paths,
        )
        return ClaudeAgentOptions(
            cwd=str(self._paths.group_dir),
            resume=request.session_id,
            allowed_tools=[*BUILTIN_TOOLS, ipc_tool_pattern()],
            permission_mode="bypassPermissions",
            setting_sources=["project"],
            mcp_servers={IPC_SERVER_NAME: ipc_mcp},
            hooks={
                "PreCompact": [HookMatcher(hooks=[create_pre_compact_hook(self._paths.archive_dir)])],
            },
        )

    async def run(self, request: Request, prompt: str) -> Response:
        ensure_file_synced(
            self._paths.global_memory(request.is_main),
            self._paths.claude_memory_target,
        )

        options = self.build_options(request)
        new_session_id: str | None = None
        result: str | None = None

        try:
            async with self._client_factory(options=options) as client:
                await client.query(prompt)
                async for message in client.receive_response():
                    if isinstance(message, SystemMessage) and message.subtype == "init":
                        if new_session_id is None:
                            new_session_id = message.data.get("session_id")
                            logger.info(f"Session initialized: {new_session_id}")
                    elif isinstance(message, ResultMessage) and message.result:
                        result = message.result
        except Exception as ex:
            logger.error(f"Agent error: {ex}")
            raise BackendExecutionError(str(ex) or type(ex).__name__, new_session_id=new_session_id) from ex

        logger.info("Agent completed successfully")
        return Response.success(result, new_session_id=new_session_id)
