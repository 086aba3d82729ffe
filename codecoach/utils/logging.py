"""Centralized logging configuration using Loguru with Pino-compatible output.

The analysis pipeline is embedded in a Node.js service, so machine logs are
emitted as NDJSON that Pino tooling can read alongside the service's own logs.

Usage:
    from codecoach.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if CODECOACH_LOG_LEVEL=DEBUG

Environment Variables:
    CODECOACH_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    CODECOACH_LOG_JSON: 0|1 (default: 0, human-readable)
    CODECOACH_LOG_FILE: path to log file (optional)
    CODECOACH_REQUEST_ID: correlation ID for cross-language tracing
"""

import json
import os
import sys
import uuid

from loguru import logger

logger.remove()

PINO_LEVELS = {
    "TRACE": 10,
    "DEBUG": 20,
    "INFO": 30,
    "WARNING": 40,
    "ERROR": 50,
    "CRITICAL": 60,
}

_log_level = os.environ.get("CODECOACH_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("CODECOACH_LOG_JSON", "0") == "1"
_log_file = os.environ.get("CODECOACH_LOG_FILE")
_request_id = os.environ.get("CODECOACH_REQUEST_ID") or str(uuid.uuid4())


def _pino_record(record) -> dict:
    """Build the Pino field layout for a loguru record."""
    pino_log = {
        "level": PINO_LEVELS.get(record["level"].name, 30),
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "pid": record["process"].id,
        "request_id": record["extra"].get("request_id", _request_id),
    }

    for key, value in record["extra"].items():
        if key != "request_id":
            pino_log[key] = value

    if record["exception"]:
        pino_log["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }

    return pino_log


def pino_compatible_sink(message):
    """Format log records as Pino-compatible NDJSON on stdout.

    {"level":30,"time":1715629847123,"msg":"...","pid":12345,"request_id":"..."}
    """
    # Never call logger.* inside a sink
    sys.stdout.write(json.dumps(_pino_record(message.record), default=str) + "\n")
    sys.stdout.flush()


_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")
logger.level("CRITICAL", color="<red><bold>")

if _json_mode:
    logger.add(
        pino_compatible_sink,
        level=_log_level,
        colorize=False,
    )
else:
    logger.add(
        sys.stderr,
        level=_log_level,
        format=_human_format,
        colorize=None,
    )

if _log_file:

    def _file_pino_sink(message):
        """Write Pino-format JSON to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(_pino_record(message.record), default=str) + "\n")

    logger.add(
        _file_pino_sink,
        level="DEBUG",
    )


def get_request_id() -> str:
    """Get the process-wide request ID used when a call does not supply one."""
    return _request_id


def new_request_id() -> str:
    """Return a fresh correlation ID for a single analysis call."""
    return str(uuid.uuid4())


def get_subprocess_env(request_id: str | None = None) -> dict:
    """Get environment dict with REQUEST_ID for subprocess calls.

    The call's own ID is passed when given, otherwise the process-wide one.

    Example:
        env = get_subprocess_env(request_id)
        subprocess.run(["eslint", "--stdin"], env=env)
    """
    env = os.environ.copy()
    env["CODECOACH_REQUEST_ID"] = request_id or _request_id
    return env


__all__ = [
    "logger",
    "get_request_id",
    "new_request_id",
    "get_subprocess_env",
]
