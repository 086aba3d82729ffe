"""Centralized constants for codecoach utils package."""

from pathlib import Path

# Working directory for codecoach artifacts
STATE_DIR = Path("./.codecoach")

ERROR_LOG_FILE = STATE_DIR / "error.log"
