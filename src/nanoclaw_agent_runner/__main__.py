import asyncio
import sys
from typing import BinaryIO, TextIO

from dotenv import load_dotenv
from loguru import logger

from nanoclaw_agent_runner.app_config import RunnerPaths, resolve_runtime_env
from nanoclaw_agent_runner.dispatcher import dispatch
from nanoclaw_agent_runner.errors import BackendExecutionError, RequestParseError
from nanoclaw_agent_runner.logging_config import default_consumers, setup_logging
from nanoclaw_agent_runner.protocol import Response, decode_input, parse_request, write_output


async def main(
    stdin: BinaryIO | None = None,
    stdout: TextIO | None = None,
    paths: RunnerPaths | None = None,
    environ: dict[str, str] | None = None,
) -> int:
    """Read one request, run it, write one framed response. Returns the exit code."""
    env = resolve_runtime_env(environ)
    setup_logging(level=env.log_level, consumers=default_consumers(env.log_file))

    raw = (stdin or sys.stdin.buffer).read()
    try:
        request = parse_request(decode_input(raw))
    except RequestParseError as ex:
        logger.error(f"Failed to parse input: {ex}")
        write_output(Response.failure(f"Failed to parse input: {ex}"), stdout)
        return 1

    logger.info(f"Received input for group: {request.group_folder}")

    try:
        response = await dispatch(request, paths=paths or RunnerPaths(), env=env)
    except BackendExecutionError as ex:
        logger.error(f"Backend failed: {ex}")
        write_output(Response.failure(str(ex), new_session_id=ex.new_session_id), stdout)
        return 1
    except Exception as ex:
        logger.exception(f"Unhandled runner error: {ex}")
        write_output(Response.failure(str(ex) or type(ex).__name__), stdout)
        return 1

    write_output(response, stdout)
    return 0


def run() -> None:
    load_dotenv()
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
