from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from typing import Any, Literal, TextIO

from nanoclaw_agent_runner.errors import RequestParseError

OUTPUT_START_MARKER = "---NANOCLAW_OUTPUT_START---"
OUTPUT_END_MARKER = "---NANOCLAW_OUTPUT_END---"

Provider = Literal["claude", "codex"]
ApprovalPolicy = Literal["auto", "readonly", "full"]
AuthMethod = Literal["chatgpt", "api_key"]
Status = Literal["success", "error"]

PROVIDERS: tuple[str, ...] = ("claude", "codex")
APPROVAL_POLICIES: tuple[str, ...] = ("auto", "readonly", "full")
AUTH_METHODS: tuple[str, ...] = ("chatgpt", "api_key")


@dataclass(frozen=True)
class CodexOptions:
    approval_policy: ApprovalPolicy | None = None
    auth_method: AuthMethod | None = None


@dataclass(frozen=True)
class Request:
    prompt: str
    group_folder: str
    chat_jid: str
    is_main: bool
    session_id: str | None = None
    is_scheduled_task: bool = False
    provider: Provider = "claude"
    codex: CodexOptions | None = None


@dataclass(frozen=True)
class Response:
    status: Status
    result: str | None = None
    new_session_id: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.status not in ("success", "error"):
            raise ValueError(f"Unknown response status: {self.status!r}")
        if self.status == "error" and not self.error:
            raise ValueError("Error responses must carry an error message")
        if self.status == "success" and self.error is not None:
            raise ValueError("Successful responses cannot carry an error message")
        if self.status == "error" and self.result is not None:
            raise ValueError("Error responses cannot carry a result")

    @classmethod
    def success(cls, result: str | None, new_session_id: str | None = None) -> Response:
        return cls(status="success", result=result, new_session_id=new_session_id)

    @classmethod
    def failure(cls, error: str, new_session_id: str | None = None) -> Response:
        return cls(status="error", result=None, new_session_id=new_session_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status, "result": self.result}
        if self.new_session_id:
            payload["newSessionId"] = self.new_session_id
        if self.error is not None:
            payload["error"] = self.error
        return payload


def write_output(response: Response, stream: TextIO | None = None) -> None:
    """Frame one response between the sentinel lines on stdout."""
    out = stream if stream is not None else sys.stdout
    out.write(OUTPUT_START_MARKER + "\n")
    out.write(json.dumps(response.to_dict()) + "\n")
    out.write(OUTPUT_END_MARKER + "\n")
    out.flush()


def decode_input(raw: bytes) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as ex:
        raise RequestParseError(f"input is not valid UTF-8: {ex}") from ex


def parse_request(text: str) -> Request:
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as ex:
        raise RequestParseError(str(ex) or type(ex).__name__) from ex

    if not isinstance(data, dict):
        raise RequestParseError(f"expected a JSON object, got {type(data).__name__}")

    provider = _optional_choice(data, "provider", PROVIDERS) or "claude"

    return Request(
        prompt=_required_str(data, "prompt"),
        group_folder=_required_str(data, "groupFolder"),
        chat_jid=_required_str(data, "chatJid"),
        is_main=_required_bool(data, "isMain"),
        session_id=_optional_str(data, "sessionId"),
        is_scheduled_task=_optional_bool(data, "isScheduledTask", default=False),
        provider=provider,
        codex=_parse_codex_options(data.get("providerConfig")),
    )


def _parse_codex_options(provider_config: Any) -> CodexOptions | None:
    if provider_config is None:
        return None
    if not isinstance(provider_config, dict):
        raise RequestParseError("providerConfig must be an object")
    codex = provider_config.get("codex")
    if codex is None:
        return None
    if not isinstance(codex, dict):
        raise RequestParseError("providerConfig.codex must be an object")
    return CodexOptions(
        approval_policy=_optional_choice(codex, "approvalPolicy", APPROVAL_POLICIES, prefix="providerConfig.codex."),
        auth_method=_optional_choice(codex, "authMethod", AUTH_METHODS, prefix="providerConfig.codex."),
    )


def _required_str(data: dict, key: str) -> str:
    if key not in data:
        raise RequestParseError(f"missing required field {key!r}")
    value = data[key]
    if not isinstance(value, str):
        raise RequestParseError(f"{key} must be a string, got {type(value).__name__}")
    return value


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RequestParseError(f"{key} must be a string, got {type(value).__name__}")
    return value or None


def _required_bool(data: dict, key: str) -> bool:
    if key not in data:
        raise RequestParseError(f"missing required field {key!r}")
    value = data[key]
    if not isinstance(value, bool):
        raise RequestParseError(f"{key} must be a boolean, got {type(value).__name__}")
    return value


def _optional_bool(data: dict, key: str, *, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise RequestParseError(f"{key} must be a boolean, got {type(value).__name__}")
    return value


def _optional_choice(data: dict, key: str, choices: tuple[str, ...], *, prefix: str = "") -> Any:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str) or value not in choices:
        allowed = ", ".join(repr(c) for c in choices)
        raise RequestParseError(f"{prefix}{key} must be one of {allowed}, got {value!r}")
    return value
