"""
Error taxonomy and classification.

Every failure inside the extraction pipeline is one of the exceptions below.
At the public boundary they are folded into an ExtractionError whose ``type``
is one of three stable categories (timeout, connection, unknown), so a
transport layer can map it to a status code without inspecting messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union


class ErrorType(str, Enum):
    """Stable, machine-readable error categories."""
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    UNKNOWN = "unknown"


FRIENDLY_MESSAGES = {
    ErrorType.TIMEOUT: (
        "The page took too long to respond. "
        "Please try again or check that the URL is reachable."
    ),
    ErrorType.CONNECTION: (
        "The connection to the browser was lost while extracting styles. "
        "Please try again."
    ),
    ErrorType.UNKNOWN: "Failed to extract styles from the page.",
}

# Substrings checked against the raw message, in priority order
TIMEOUT_MARKERS = ("timeout", "navigation timeout")
CONNECTION_MARKERS = ("Connection closed", "Protocol error")


class StyleScopeError(Exception):
    """Base class for all StyleScope errors."""


class InvalidInput(StyleScopeError):
    """Malformed or missing request input, rejected before any browser work."""


class SessionLaunchFailure(StyleScopeError):
    """The browser process could not be started."""


class PageCreationFailure(StyleScopeError):
    """No usable page could be created within the attempt budget."""


class TimeoutFailure(StyleScopeError):
    """A browser operation lost its race against the timer."""

    def __init__(self, message: str, timeout_ms: int = 0):
        super().__init__(message)
        self.timeout_ms = timeout_ms


class NavigationTimeout(TimeoutFailure):
    """Page navigation did not finish in time."""


class EvaluationTimeout(TimeoutFailure):
    """An in-page extraction script did not finish in time."""


class SelectorWaitTimeout(TimeoutFailure):
    """A waited-for selector never appeared. Always non-fatal."""


class ConnectionLoss(StyleScopeError):
    """The browser disconnected while an operation was in flight."""


@dataclass
class ClassifiedError:
    """A failure reduced to its category, friendly message and raw details."""
    type: ErrorType
    message: str
    details: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "error": self.message,
            "details": self.details,
        }


class ExtractionError(StyleScopeError):
    """
    Public failure of an extraction request.

    Carries the classified category so callers never need to look at the
    underlying exception to decide how to report it.
    """

    def __init__(self, classified: ClassifiedError):
        super().__init__(classified.message)
        self.classified = classified

    @property
    def type(self) -> ErrorType:
        return self.classified.type

    @property
    def message(self) -> str:
        return self.classified.message

    @property
    def details(self) -> str:
        return self.classified.details

    def to_dict(self) -> Dict[str, Any]:
        return self.classified.to_dict()


def categorize_message(message: str) -> ErrorType:
    """
    Map a raw failure message to an error category.

    Args:
        message: Raw error text from the browser or the pipeline

    Returns:
        ErrorType for the message
    """
    lowered = message.lower()
    if any(marker in lowered for marker in TIMEOUT_MARKERS):
        return ErrorType.TIMEOUT
    if any(marker in message for marker in CONNECTION_MARKERS):
        return ErrorType.CONNECTION
    return ErrorType.UNKNOWN


def classify_error(error: Union[BaseException, str]) -> ClassifiedError:
    """
    Classify an exception or raw message for user-facing reporting.

    Typed pipeline failures are trusted first; anything else falls back to
    message matching. The raw message is always kept in ``details``.

    Args:
        error: Exception instance or raw error message

    Returns:
        ClassifiedError with a fixed friendly message
    """
    if isinstance(error, ExtractionError):
        return error.classified

    details = str(error)
    if isinstance(error, TimeoutFailure):
        error_type = ErrorType.TIMEOUT
    elif isinstance(error, ConnectionLoss):
        error_type = ErrorType.CONNECTION
    else:
        error_type = categorize_message(details)

    return ClassifiedError(
        type=error_type,
        message=FRIENDLY_MESSAGES[error_type],
        details=details,
    )
