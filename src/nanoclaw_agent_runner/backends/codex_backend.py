from __future__ import annotations

import asyncio
import subprocess

from loguru import logger

from nanoclaw_agent_runner.app_config import RunnerPaths, RuntimeEnv
from nanoclaw_agent_runner.codex_config import ensure_codex_config
from nanoclaw_agent_runner.errors import BackendExecutionError
from nanoclaw_agent_runner.memory_sync import read_file_if_exists
from nanoclaw_agent_runner.protocol import Request, Response

CODEX_BINARY = "codex"
MAX_ARGV_PROMPT_CHARS = 8000
STDERR_TAIL_CHARS = 500

_CHATGPT_AUTH_MISSING = (
    "Codex auth.json not found. Run `codex login` on the host and copy "
    "~/.codex/auth.json to data/codex/<group>/.codex/auth.json."
)
_API_KEY_MISSING = "OPENAI_API_KEY or CODEX_API_KEY is missing. Add one to .env to use Codex API key auth."
_NO_AUTH = "Codex authentication not found. Run `codex login` or set OPENAI_API_KEY in .env."


def validate_codex_auth(auth_method: str | None, *, has_auth_file: bool, api_key: str | None) -> str | None:
    """Return a remediation message when the requested auth is unavailable."""
    if auth_method == "chatgpt":
        return None if has_auth_file else _CHATGPT_AUTH_MISSING
    if auth_method == "api_key":
        return None if api_key else _API_KEY_MISSING
    if not has_auth_file and not api_key:
        return _NO_AUTH
    return None


def build_codex_prelude(request: Request, paths: RunnerPaths) -> str:
    global_path = paths.global_memory(request.is_main)
    lines = [
        "You are NanoClaw, an assistant operating in WhatsApp.",
        "Respond with plain text only.",
        "",
        "## Tools (Filesystem IPC)",
        f"To send a message, write a JSON file to `{paths.ipc_messages_dir}/`.",
        'Example: {"type":"message","chatJid":"<jid>","text":"hello"}',
        f"To schedule tasks, write a JSON file to `{paths.ipc_tasks_dir}/`.",
        'Example: {"type":"schedule_task","prompt":"...","schedule_type":"cron",'
        '"schedule_value":"0 9 * * 1","groupFolder":"<group-folder>","context_mode":"isolated"}',
        "",
        "## Skills",
        "If the user asks for `/setup`, treat it as a request to run the `$setup` skill.",
        "",
        "## Memory",
    ]

    global_memory = read_file_if_exists(global_path)
    group_memory = read_file_if_exists(paths.group_memory)

    if global_memory:
        lines.extend(["### Global Memory", global_memory, ""])
    if group_memory:
        lines.extend(["### Group Memory", group_memory, ""])
    if not global_memory and not group_memory:
        lines.extend(["No memory files found.", ""])

    lines.append("## Memory Updates")
    lines.append(f'If the user says "remember this", update `{paths.group_memory}`.')
    if request.is_main:
        lines.append(f'If the user says "remember this globally", update `{global_path}`.')
    else:
        lines.append("Never write to global memory in non-main groups.")

    return "\n".join(lines)


class CodexBackend:
    """One-shot `codex exec` subprocess."""

    def __init__(self, paths: RunnerPaths, env: RuntimeEnv, *, binary: str = CODEX_BINARY):
        self._paths = paths
        self._env = env
        self._binary = binary

    async def run(self, request: Request, prompt: str) -> Response:
        options = request.codex
        auth_error = validate_codex_auth(
            options.auth_method if options else None,
            has_auth_file=self._paths.codex_auth.exists(),
            api_key=self._env.codex_api_key,
        )
        if auth_error:
            logger.warning(f"Codex auth check failed: {auth_error}")
            return Response.failure(auth_error)

        ensure_codex_config(self._paths.codex_config, options.approval_policy if options else None)

        full_prompt = f"{build_codex_prelude(request, self._paths)}\n\n{prompt}"
        return await self._exec(full_prompt)

    async def _exec(self, full_prompt: str) -> Response:
        use_stdin = len(full_prompt) > MAX_ARGV_PROMPT_CHARS
        args = ["exec"] if use_stdin else ["exec", full_prompt]
        logger.info(f"Spawning {self._binary} exec (prompt via {'stdin' if use_stdin else 'argument'}, {len(full_prompt):,} chars)")

        try:
            proc = await asyncio.create_subprocess_exec(
                self._binary,
                *args,
                stdin=asyncio.subprocess.PIPE if use_stdin else subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(self._paths.group_dir),
            )
        except OSError as ex:
            raise BackendExecutionError(f"Failed to start Codex: {ex}") from ex

        stdout, stderr = await proc.communicate(full_prompt.encode("utf-8") if use_stdin else None)

        if proc.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").strip()[-STDERR_TAIL_CHARS:]
            raise BackendExecutionError(f"Codex exited with code {proc.returncode}: {tail}")

        return Response.success(stdout.decode("utf-8", errors="replace").strip() or None)
