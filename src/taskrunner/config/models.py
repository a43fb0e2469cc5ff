"""Configuration dataclasses shared across layers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from taskrunner.shared.spec import parse_bool
from taskrunner.shared.type_aliases import ErrorPatterns


@dataclass(frozen=True)
class AwsConfig:
    """Where to find the ECS API; credentials come from the SDK chain."""

    region: Optional[str] = None
    profile: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AwsConfig":
        return cls(region=data.get("region"), profile=data.get("profile"))


@dataclass(frozen=True)
class WaitConfig:
    """Polling schedule and query error policy for the completion waiter."""

    min_delay_seconds: float = 6.0
    max_delay_seconds: float = 15.0
    exponential_base: float = 2.0
    jitter: bool = True
    # Bound on a single describe call; defaults to max_delay_seconds.
    query_timeout_seconds: Optional[float] = None
    retry_query_errors: bool = True
    # Error codes / messages treated as transient while polling
    query_error_patterns: ErrorPatterns = (
        "ThrottlingException",
        "Throttling",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "Rate exceeded",
        "ServerException",
        "ServiceUnavailable",
        "InternalFailure",
        "RequestTimeout",
        "Could not connect to the endpoint",
        "Connect timeout",
        "Read timeout",
        "Connection was closed",
        "timed out",
    )

    @property
    def query_timeout(self) -> float:
        if self.query_timeout_seconds is not None:
            return self.query_timeout_seconds
        return self.max_delay_seconds

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WaitConfig":
        defaults = cls()
        timeout = data.get("query_timeout")
        patterns = data.get("query_error_patterns")
        if isinstance(patterns, str):
            patterns = [patterns]
        return cls(
            min_delay_seconds=float(data.get("min_delay", defaults.min_delay_seconds)),
            max_delay_seconds=float(data.get("max_delay", defaults.max_delay_seconds)),
            exponential_base=float(
                data.get("exponential_base", defaults.exponential_base)
            ),
            jitter=parse_bool(data.get("jitter", defaults.jitter)),
            query_timeout_seconds=None if timeout is None else float(timeout),
            retry_query_errors=parse_bool(
                data.get("retry_query_errors", defaults.retry_query_errors)
            ),
            query_error_patterns=(
                defaults.query_error_patterns
                if patterns is None
                else tuple(str(p) for p in patterns)
            ),
        )


__all__ = ["AwsConfig", "WaitConfig"]
