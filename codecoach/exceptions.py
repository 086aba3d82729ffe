"""Custom exceptions for codecoach.

Analysis itself never raises; these cover misuse of the library surface,
such as a broken curriculum catalog.
"""


class CodeCoachError(Exception):
    """Base class for codecoach errors.

    Attributes:
        message: Human-readable error description
        details: Dict containing context for debugging
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class CurriculumError(CodeCoachError):
    """Raised when the curriculum catalog is missing or malformed."""
