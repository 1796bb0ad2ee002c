"""Custom exceptions for the widget relay."""

import logging
from typing import Any

logger = logging.getLogger(__name__)

# Exception type → safe client-facing message mapping
_SAFE_MESSAGES: dict[str, str] = {
    "ConfigurationError": "Assistant is not configured on server.",
    "UpstreamTransientError": "Assistant service is temporarily unavailable.",
    "LookupFailure": "A referenced resource could not be resolved.",
    "SummarizationFailure": "Conversation summary is unavailable.",
    "NotificationFailure": "Notification delivery failed.",
}

_DEFAULT_MESSAGE = "Internal server error"


def sanitize_error(e: Exception) -> str:
    """Map an exception to a safe, client-facing error message.

    The full exception is logged server-side by the caller; only a generic
    message is ever written to the event stream or an HTTP body.

    Args:
        e: The exception to sanitize.

    Returns:
        A safe, generic error message string.
    """
    # Walk the MRO to find the most specific matching type
    for cls in type(e).__mro__:
        safe_msg = _SAFE_MESSAGES.get(cls.__name__)
        if safe_msg:
            return safe_msg

    return _DEFAULT_MESSAGE


class RelayException(Exception):
    """Base exception for all relay-specific errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize relay exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            status_code: HTTP status code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


class ConfigurationError(RelayException):
    """A required setting (such as the run target) is missing (500)."""

    def __init__(self, setting: str, message: str | None = None) -> None:
        """Initialize configuration error.

        Args:
            setting: Name of the missing setting.
            message: Optional error message.
        """
        super().__init__(
            message=message or f"{setting} is not configured on server",
            code="CONFIGURATION_ERROR",
            status_code=500,
            details={"setting": setting},
        )


class UpstreamTransientError(RelayException):
    """Network or service failure talking to the upstream assistant (502)."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        """Initialize upstream error.

        Args:
            operation: Upstream operation that failed (e.g. "create_thread").
            message: Optional error message.
        """
        super().__init__(
            message=message or f"Upstream call failed: {operation}",
            code="UPSTREAM_ERROR",
            status_code=502,
            details={"operation": operation},
        )


class LookupFailure(RelayException):
    """A citation or file name could not be resolved (404)."""

    def __init__(self, reference: str, message: str | None = None) -> None:
        """Initialize lookup failure.

        Args:
            reference: The file or message reference being resolved.
            message: Optional error message.
        """
        super().__init__(
            message=message or f"Could not resolve reference '{reference}'",
            code="LOOKUP_FAILURE",
            status_code=404,
            details={"reference": reference},
        )


class SummarizationFailure(RelayException):
    """The summarization call failed (502)."""

    def __init__(self, message: str = "Summarization failed") -> None:
        super().__init__(
            message=message,
            code="SUMMARIZATION_FAILURE",
            status_code=502,
        )


class NotificationFailure(RelayException):
    """A notification chunk could not be delivered (502)."""

    def __init__(
        self,
        channel: str,
        message: str | None = None,
        status: int | None = None,
    ) -> None:
        """Initialize notification failure.

        Args:
            channel: Notification channel name.
            message: Optional error message.
            status: HTTP status returned by the channel, if any.
        """
        super().__init__(
            message=message or f"Delivery to {channel} failed",
            code="NOTIFICATION_FAILURE",
            status_code=502,
            details={"channel": channel, "status": status},
        )
