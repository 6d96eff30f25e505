import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from nanoclaw_agent_runner.codex_config import (
    ensure_codex_config,
    resolve_codex_policy,
    upsert_config_value,
)


class UpsertConfigValueTests(unittest.TestCase):
    def test_appends_to_empty_document(self) -> None:
        self.assertEqual('approval_policy = "never"\n', upsert_config_value("", "approval_policy", "never"))

    def test_appends_after_trimmed_content(self) -> None:
        updated = upsert_config_value('model = "o3"\n\n\n', "sandbox_mode", "read-only")
        self.assertEqual('model = "o3"\nsandbox_mode = "read-only"\n', updated)

    def test_replaces_existing_value_in_place(self) -> None:
        contents = '# header\n\n  approval_policy   =  "on-request"  \nmodel = "o3"\n'
        updated = upsert_config_value(contents, "approval_policy", "never")
        self.assertEqual('# header\n\napproval_policy = "never"\nmodel = "o3"\n', updated)

    def test_second_application_is_byte_identical(self) -> None:
        contents = 'model = "o3"\n[profiles.fast]\nmodel = "o4-mini"\n'
        once = upsert_config_value(contents, "sandbox_mode", "workspace-write")
        twice = upsert_config_value(once, "sandbox_mode", "workspace-write")
        self.assertEqual(once, twice)

    def test_unrelated_lines_keep_their_order(self) -> None:
        contents = 'b = "2"\na = "1"\nsandbox_mode = "read-only"\nc = "3"\n'
        updated = upsert_config_value(contents, "sandbox_mode", "danger-full-access")
        self.assertEqual('b = "2"\na = "1"\nsandbox_mode = "danger-full-access"\nc = "3"\n', updated)

    def test_does_not_match_longer_key(self) -> None:
        contents = 'approval_policy_extra = "x"\n'
        updated = upsert_config_value(contents, "approval_policy", "never")
        self.assertEqual('approval_policy_extra = "x"\napproval_policy = "never"\n', updated)


class ResolveCodexPolicyTests(unittest.TestCase):
    def test_policy_mapping(self) -> None:
        readonly = resolve_codex_policy("readonly")
        self.assertEqual(("never", "read-only"), (readonly.approval, readonly.sandbox))
        full = resolve_codex_policy("full")
        self.assertEqual(("never", "danger-full-access"), (full.approval, full.sandbox))
        for selector in (None, "auto"):
            auto = resolve_codex_policy(selector)
            self.assertEqual(("on-request", "workspace-write"), (auto.approval, auto.sandbox))


class EnsureCodexConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self._config = Path(self._tmp.name) / ".codex" / "config.toml"

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_creates_file_and_directory(self) -> None:
        ensure_codex_config(self._config, "readonly")
        self.assertEqual(
            'approval_policy = "never"\nsandbox_mode = "read-only"\n',
            self._config.read_text(encoding="utf-8"),
        )

    def test_preserves_unrelated_content(self) -> None:
        self._config.parent.mkdir(parents=True)
        self._config.write_text('model = "o3"\nsandbox_mode = "read-only"\n', encoding="utf-8")
        ensure_codex_config(self._config, "full")
        self.assertEqual(
            'model = "o3"\nsandbox_mode = "danger-full-access"\napproval_policy = "never"\n',
            self._config.read_text(encoding="utf-8"),
        )

    def test_unchanged_config_is_not_rewritten(self) -> None:
        ensure_codex_config(self._config, None)
        with patch.object(Path, "write_text") as write_text:
            ensure_codex_config(self._config, "auto")
        write_text.assert_not_called()

    def test_patch_failure_falls_back_to_minimal_document(self) -> None:
        self._config.parent.mkdir(parents=True)
        self._config.write_text('model = "o3"\n', encoding="utf-8")
        with patch("nanoclaw_agent_runner.codex_config.upsert_config_value", side_effect=RuntimeError("boom")):
            ensure_codex_config(self._config, "full")
        self.assertEqual(
            'approval_policy = "never"\nsandbox_mode = "danger-full-access"\n',
            self._config.read_text(encoding="utf-8"),
        )


if __name__ == "__main__":
    unittest.main()
