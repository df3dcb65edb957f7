"""
reminders/error_classifier.py
-----------------------------
Decides whether a failed message delivery is worth retrying.

Classification is by case-insensitive substring match on the error text.
Transient markers are checked before permanent ones, and an error that
matches nothing is assumed transient. Only a missing error (None or an
empty string) is never transient. Exceptions without text are classified
by their type name, so a bare TimeoutError() still reads as a timeout.
"""

from typing import Optional, Union

ErrorLike = Optional[Union[BaseException, str]]

_NETWORK_MARKERS = (
    "timeout", "etimedout", "econnrefused", "econnreset",
    "socket hang up", "network", "connection",
)
_RATE_LIMIT_MARKERS = ("rate limit", "429")
_UNAVAILABLE_MARKERS = ("503", "service unavailable")

_PERMANENT_MARKERS = (
    "blocked", "unauthorized", "401", "403",
    "not found", "404", "bad request", "400",
)
_AUTH_MARKERS = ("auth", "session", "credentials")


def _message_of(error: ErrorLike) -> str:
    if error is None:
        return ""
    if isinstance(error, BaseException):
        return (str(error) or type(error).__name__).lower()
    return error.strip().lower()


def _contains_any(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def is_transient_error(error: ErrorLike) -> bool:
    """
    Return True when the failure is likely temporary and a retry may succeed.

    Args:
        error: An exception, an error string, or None.

    Returns:
        False for None or an empty string and for known permanent failures
        (blocked user, bad auth, invalid number); True otherwise.
    """
    message = _message_of(error)
    if not message:
        return False

    if _contains_any(message, _NETWORK_MARKERS):
        return True
    if _contains_any(message, _RATE_LIMIT_MARKERS):
        return True
    if _contains_any(message, _UNAVAILABLE_MARKERS):
        return True

    if _contains_any(message, _PERMANENT_MARKERS):
        return False
    if "invalid" in message and "number" in message:
        return False
    if _contains_any(message, _AUTH_MARKERS):
        return False

    return True


def get_error_category(error: ErrorLike) -> str:
    """
    Map an error to a coarse category used in logs and job summaries.

    Returns one of: network_timeout, connection_error, rate_limit,
    user_blocked, auth_error, session_expired, invalid_number,
    user_not_found, unknown.
    """
    message = _message_of(error)
    if not message:
        return "unknown"

    if "timeout" in message or "etimedout" in message:
        return "network_timeout"
    if "econnrefused" in message or "econnreset" in message:
        return "connection_error"
    if _contains_any(message, _RATE_LIMIT_MARKERS):
        return "rate_limit"
    if "blocked" in message:
        return "user_blocked"
    if "auth" in message or "401" in message:
        return "auth_error"
    if "session" in message:
        return "session_expired"
    if ("invalid" in message and "number" in message) or "400" in message:
        return "invalid_number"
    if "not found" in message or "404" in message:
        return "user_not_found"
    return "unknown"
