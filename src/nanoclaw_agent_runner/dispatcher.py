from __future__ import annotations

from loguru import logger

from nanoclaw_agent_runner.app_config import RunnerPaths, RuntimeEnv
from nanoclaw_agent_runner.backend import Backend, create_backend
from nanoclaw_agent_runner.protocol import Request, Response

_SCHEDULED_TASK_PREFIXES = {
    "claude": (
        "[SCHEDULED TASK - You are running automatically, not in response to a user message. "
        "Use mcp__nanoclaw__send_message if needed to communicate with the user.]"
    ),
    "codex": (
        "[SCHEDULED TASK - You are running automatically, not in response to a user message. "
        "To reply, write a JSON file to /workspace/ipc/messages.]"
    ),
}


def build_prompt(request: Request) -> str:
    if not request.is_scheduled_task:
        return request.prompt
    return f"{_SCHEDULED_TASK_PREFIXES[request.provider]}\n\n{request.prompt}"


async def dispatch(
    request: Request,
    *,
    paths: RunnerPaths,
    env: RuntimeEnv,
    backend: Backend | None = None,
) -> Response:
    """Run the request on exactly one backend and return its normalized response."""
    prompt = build_prompt(request)
    backend = backend or create_backend(request.provider, paths, env)
    logger.info(f"Starting agent ({request.provider})...")
    return await backend.run(request, prompt)
