"""
Error handling for storyboard scene tools.

Provides structured errors with:
- Categorized error codes
- User-friendly error messages
- Detailed error context for debugging

The scene reconciler itself never raises; these errors come from the
surrounding flows (loading snapshots, applying AI structure updates,
checking identifiers before a save).
"""

from enum import Enum
from typing import Optional, Dict, Any

import structlog

logger = structlog.get_logger()


class ErrorCode(Enum):
    """
    Enumeration of error codes.

    - Input Errors: snapshot files and payloads supplied by the caller
    - Structure Errors: AI structure updates and identifier checks
    """

    # Input Errors
    INVALID_INPUT = "INVALID_INPUT"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"

    # Structure Errors
    INVALID_STRUCTURE_UPDATE = "INVALID_STRUCTURE_UPDATE"
    INVALID_SCENE_IDS = "INVALID_SCENE_IDS"


CLIENT_ERROR_CODES = [
    ErrorCode.INVALID_INPUT,
    ErrorCode.FILE_NOT_FOUND,
    ErrorCode.UNSUPPORTED_FORMAT,
]


class StoryboardError(Exception):
    """
    Base exception for storyboard errors.

    Example:
        >>> raise StoryboardError(
        ...     ErrorCode.INVALID_SCENE_IDS,
        ...     "Invalid scene IDs detected",
        ...     {"scene_id": "abc"}
        ... )
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        user_message: Optional[str] = None
    ):
        """
        Initialize storyboard error.

        Args:
            code: Error code from ErrorCode enum
            message: Detailed error message for logging
            details: Additional context (file paths, scene ids, etc.)
            user_message: Optional override for user-friendly message
        """
        self.code = code
        self.message = message
        self.details = details or {}
        self._user_message = user_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary.

        Example:
            >>> error = StoryboardError(ErrorCode.INVALID_INPUT, "Missing sections")
            >>> error.to_dict()["error_code"]
            'INVALID_INPUT'
        """
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
            "user_message": self.get_user_friendly_message()
        }

    def get_user_friendly_message(self) -> str:
        """
        Returns user-friendly error message.

        If a custom user message was provided, returns that.
        Otherwise, returns a predefined friendly message based on error code.
        """
        if self._user_message:
            return self._user_message

        friendly_messages = {
            ErrorCode.INVALID_INPUT: "Please check your input and try again.",
            ErrorCode.FILE_NOT_FOUND: "Storyboard file not found. Please check the path.",
            ErrorCode.UNSUPPORTED_FORMAT: "File format not supported. Please use JSON or YAML.",
            ErrorCode.INVALID_STRUCTURE_UPDATE: "The AI reply did not contain a usable structure update.",
            ErrorCode.INVALID_SCENE_IDS: "Invalid scene IDs detected. Please refresh and try again.",
        }

        return friendly_messages.get(
            self.code,
            "An error occurred. Please try again."
        )

    def log_error(self) -> None:
        """
        Log error with appropriate level and context.

        Client errors are logged as warnings, everything else as errors.
        """
        log_data = {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details
        }

        if self.code in CLIENT_ERROR_CODES:
            logger.warning("storyboard_client_error", **log_data)
        else:
            logger.error("storyboard_error", **log_data)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
