from typing import Protocol, runtime_checkable

from nanoclaw_agent_runner.app_config import RunnerPaths, RuntimeEnv
from nanoclaw_agent_runner.protocol import Request, Response


@runtime_checkable
class Backend(Protocol):
    async def run(self, request: Request, prompt: str) -> Response:
        """Run the prompt to completion and normalize the outcome.

        Raises BackendExecutionError when the backend fails after starting.
        """
        ...


def create_backend(provider: str, paths: RunnerPaths, env: RuntimeEnv) -> Backend:
    """Factory: create a Backend by provider name."""
    name = provider.strip().lower()
    if name == "claude":
        from nanoclaw_agent_runner.backends.claude_backend import ClaudeBackend
        return ClaudeBackend(paths)
    if name == "codex":
        from nanoclaw_agent_runner.backends.codex_backend import CodexBackend
        return CodexBackend(paths, env)
    raise ValueError(f"Unknown provider: {provider!r}. Supported: 'claude', 'codex'")
