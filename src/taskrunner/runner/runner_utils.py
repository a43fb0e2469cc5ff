"""Error helpers shared by the launcher and the waiter."""

from __future__ import annotations

from botocore.exceptions import BotoCoreError, ClientError

from taskrunner.config.models import WaitConfig

# Errors raised by the SDK for API calls.
API_ERRORS = (BotoCoreError, ClientError)


def error_code(error: BaseException) -> str:
    """Return the service error code for ``ClientError``, else the class name."""
    if isinstance(error, ClientError):
        return str(error.response.get("Error", {}).get("Code", "")) or "ClientError"
    return type(error).__name__


def describe_error(error: BaseException) -> str:
    code = error_code(error)
    message = str(error)
    if code and code not in message:
        return f"{code}: {message}"
    return message


def is_retryable_query_error(error: BaseException, wait_config: WaitConfig) -> bool:
    """Return True when a status query error matches a transient pattern."""
    if not wait_config.retry_query_errors:
        return False
    if getattr(error, "transient", False):
        return True
    haystack = f"{error_code(error)} {error}".lower()
    return any(pat.lower() in haystack for pat in wait_config.query_error_patterns)


__all__ = ["API_ERRORS", "describe_error", "error_code", "is_retryable_query_error"]
