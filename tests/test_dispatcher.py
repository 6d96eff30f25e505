import asyncio
import unittest

from nanoclaw_agent_runner.app_config import RunnerPaths, RuntimeEnv
from nanoclaw_agent_runner.backend import create_backend
from nanoclaw_agent_runner.backends.claude_backend import ClaudeBackend
from nanoclaw_agent_runner.backends.codex_backend import CodexBackend
from nanoclaw_agent_runner.dispatcher import build_prompt, dispatch
from nanoclaw_agent_runner.protocol import Request, Response


class _RecordingBackend:
    def __init__(self):
        self.calls: list[tuple[Request, str]] = []

    async def run(self, request: Request, prompt: str) -> Response:
        self.calls.append((request, prompt))
        return Response.success("ok")


class BuildPromptTests(unittest.TestCase):
    def test_plain_prompt_is_unchanged(self) -> None:
        request = Request(prompt="hello", group_folder="g", chat_jid="j", is_main=False)
        self.assertEqual("hello", build_prompt(request))

    def test_scheduled_claude_prompt_mentions_send_message_tool(self) -> None:
        request = Request(prompt="daily digest", group_folder="g", chat_jid="j", is_main=False, is_scheduled_task=True)
        prompt = build_prompt(request)
        self.assertTrue(prompt.startswith("[SCHEDULED TASK"))
        self.assertIn("mcp__nanoclaw__send_message", prompt)
        self.assertTrue(prompt.endswith("\n\ndaily digest"))

    def test_scheduled_codex_prompt_mentions_ipc_directory(self) -> None:
        request = Request(
            prompt="daily digest", group_folder="g", chat_jid="j", is_main=False,
            is_scheduled_task=True, provider="codex",
        )
        prompt = build_prompt(request)
        self.assertIn("/workspace/ipc/messages", prompt)
        self.assertNotIn("mcp__nanoclaw__send_message", prompt)


class DispatchTests(unittest.TestCase):
    def test_runs_backend_with_rewritten_prompt(self) -> None:
        backend = _RecordingBackend()
        request = Request(prompt="p", group_folder="g", chat_jid="j", is_main=True, is_scheduled_task=True)
        response = asyncio.run(dispatch(request, paths=RunnerPaths(), env=RuntimeEnv(), backend=backend))
        self.assertEqual("ok", response.result)
        self.assertEqual(1, len(backend.calls))
        self.assertTrue(backend.calls[0][1].startswith("[SCHEDULED TASK"))

    def test_factory_selects_backend_by_provider(self) -> None:
        self.assertIsInstance(create_backend("claude", RunnerPaths(), RuntimeEnv()), ClaudeBackend)
        self.assertIsInstance(create_backend("codex", RunnerPaths(), RuntimeEnv()), CodexBackend)
        with self.assertRaises(ValueError):
            create_backend("gemini", RunnerPaths(), RuntimeEnv())


if __name__ == "__main__":
    unittest.main()
