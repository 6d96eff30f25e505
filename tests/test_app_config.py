import unittest
from pathlib import Path

from nanoclaw_agent_runner.app_config import RunnerPaths, resolve_runtime_env


class ResolveRuntimeEnvTests(unittest.TestCase):
    def test_codex_key_takes_precedence(self) -> None:
        env = resolve_runtime_env({"CODEX_API_KEY": "c", "OPENAI_API_KEY": "o"})
        self.assertEqual("c", env.codex_api_key)

    def test_openai_key_is_accepted(self) -> None:
        self.assertEqual("o", resolve_runtime_env({"CODEX_API_KEY": " ", "OPENAI_API_KEY": "o"}).codex_api_key)

    def test_defaults(self) -> None:
        env = resolve_runtime_env({})
        self.assertIsNone(env.codex_api_key)
        self.assertEqual("INFO", env.log_level)
        self.assertIsNone(env.log_file)

    def test_logging_overrides(self) -> None:
        env = resolve_runtime_env({"NANOCLAW_LOG_LEVEL": "debug", "NANOCLAW_LOG_FILE": "/tmp/runner.log"})
        self.assertEqual("DEBUG", env.log_level)
        self.assertEqual("/tmp/runner.log", env.log_file)


class RunnerPathsTests(unittest.TestCase):
    def test_global_memory_depends_on_main_flag(self) -> None:
        paths = RunnerPaths()
        self.assertEqual(Path("/workspace/project/groups/global/CLAUDE.md"), paths.global_memory(True))
        self.assertEqual(Path("/workspace/global/CLAUDE.md"), paths.global_memory(False))

    def test_codex_files_live_in_codex_home(self) -> None:
        paths = RunnerPaths()
        self.assertEqual(Path("/home/node/.codex/config.toml"), paths.codex_config)
        self.assertEqual(Path("/home/node/.codex/auth.json"), paths.codex_auth)


if __name__ == "__main__":
    unittest.main()
