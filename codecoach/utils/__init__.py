"""codecoach utilities package."""

from .constants import ERROR_LOG_FILE, STATE_DIR
from .error_handler import handle_exceptions

__all__ = [
    "ERROR_LOG_FILE",
    "STATE_DIR",
    "handle_exceptions",
]
