"""Exception taxonomy for AxonFlow calls and the retry classifier.

Every error raised by the SDK derives from :class:`AxonFlowError`. The retry
executor does not inspect the hierarchy itself; it asks :func:`classify_error`
for an :class:`ErrorKind` and branches on that.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional

import requests

POLICY_PREFIXES = ("Request blocked by policy: ", "Blocked by policy: ")


class AxonFlowError(Exception):
    """Base class for all AxonFlow SDK errors."""

    default_error_code: Optional[str] = None

    def __init__(self, message: str, status_code: int = 0, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code if error_code is not None else self.default_error_code

    def __str__(self) -> str:
        text = self.message
        if self.status_code > 0:
            text += f" (status={self.status_code})"
        if self.error_code:
            text += f" [{self.error_code}]"
        return text


class AuthenticationError(AxonFlowError):
    default_error_code = "AUTHENTICATION_FAILED"

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message, status_code)


class PolicyViolationError(AxonFlowError):
    """Request was blocked by an AxonFlow policy."""

    default_error_code = "POLICY_VIOLATION"

    def __init__(
        self,
        block_reason: Optional[str],
        policy_name: Optional[str] = None,
        policies_evaluated: Optional[List[str]] = None,
    ):
        self.block_reason = block_reason
        self.policy_name = policy_name or extract_policy_name(block_reason)
        self.policies_evaluated = list(policies_evaluated or [])
        super().__init__(f"Request blocked by policy: {policy_name or block_reason}", 403)


class RateLimitError(AxonFlowError):
    default_error_code = "RATE_LIMIT_EXCEEDED"

    def __init__(
        self,
        message: str,
        limit: int = 0,
        remaining: int = 0,
        reset_at: Optional[float] = None,
    ):
        super().__init__(message, 429)
        self.limit = limit
        self.remaining = remaining
        self.reset_at = reset_at  # Unix timestamp

    @property
    def retry_after(self) -> float:
        """Seconds until the limit resets (0 when unknown or already past)"""
        if self.reset_at is None:
            return 0.0
        return max(0.0, self.reset_at - time.time())


class AxonFlowTimeoutError(AxonFlowError):
    default_error_code = "TIMEOUT"

    def __init__(self, message: str, timeout: Optional[float] = None, status_code: int = 0):
        super().__init__(message, status_code)
        self.timeout = timeout


class AxonFlowConnectionError(AxonFlowError):
    default_error_code = "CONNECTION_FAILED"

    def __init__(self, message: str, host: Optional[str] = None, port: int = 0):
        super().__init__(message)
        self.host = host
        self.port = port


class RequestValidationError(AxonFlowError):
    default_error_code = "VALIDATION_ERROR"

    def __init__(self, message: str):
        super().__init__(message, 400)


class NotFoundError(AxonFlowError):
    default_error_code = "NOT_FOUND"

    def __init__(self, message: str):
        super().__init__(message, 404)


class ConfigurationError(AxonFlowError):
    """Configuration validation error."""

    default_error_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message)
        self.config_key = config_key


class ConnectorError(AxonFlowError):
    default_error_code = "CONNECTOR_ERROR"

    def __init__(self, message: str, connector_id: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message)
        self.connector_id = connector_id
        self.operation = operation


class PlanExecutionError(AxonFlowError):
    default_error_code = "PLAN_EXECUTION_FAILED"

    def __init__(self, message: str, plan_id: Optional[str] = None, failed_step: Optional[str] = None):
        super().__init__(message)
        self.plan_id = plan_id
        self.failed_step = failed_step


def extract_policy_name(block_reason: Optional[str]) -> str:
    """Pull the policy name out of an Agent block reason"""
    if not block_reason:
        return "unknown"
    for prefix in POLICY_PREFIXES:
        if block_reason.startswith(prefix):
            return block_reason[len(prefix):].strip()
    if block_reason.startswith("["):
        end = block_reason.find("]")
        if end > 1:
            return block_reason[1:end].strip()
    return block_reason


class ErrorKind(str, Enum):
    """Whether a failure is worth another attempt"""

    RETRYABLE = "retryable"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class ClassifiedError:
    kind: ErrorKind
    error: BaseException

    @property
    def is_retryable(self) -> bool:
        return self.kind is ErrorKind.RETRYABLE


_TERMINAL_TYPES = (
    AuthenticationError,
    PolicyViolationError,
    ConfigurationError,
    RequestValidationError,
    NotFoundError,
    ConnectorError,
    PlanExecutionError,
)
_RETRYABLE_TYPES = (
    RateLimitError,
    AxonFlowTimeoutError,
    AxonFlowConnectionError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def _is_retryable_status(status_code: Optional[int]) -> bool:
    if not status_code:
        return False
    return status_code in (408, 429) or 500 <= status_code < 600


def classify_error(error: BaseException) -> ClassifiedError:
    """Classify an exception as retryable or terminal.

    Retryable: rate limiting, timeouts, connection failures and any error
    carrying a 408, 429 or 5xx status. Auth, policy, validation, not-found,
    connector and plan errors are terminal, as is anything unrecognised.
    """
    if isinstance(error, _TERMINAL_TYPES):
        return ClassifiedError(ErrorKind.TERMINAL, error)
    if isinstance(error, _RETRYABLE_TYPES):
        return ClassifiedError(ErrorKind.RETRYABLE, error)
    if isinstance(error, AxonFlowError):
        kind = ErrorKind.RETRYABLE if _is_retryable_status(error.status_code) else ErrorKind.TERMINAL
        return ClassifiedError(kind, error)
    if isinstance(error, requests.exceptions.HTTPError):
        status_code = error.response.status_code if error.response is not None else None
        kind = ErrorKind.RETRYABLE if _is_retryable_status(status_code) else ErrorKind.TERMINAL
        return ClassifiedError(kind, error)
    return ClassifiedError(ErrorKind.TERMINAL, error)


def extract_error_message(body: str, default: str) -> str:
    """Best-effort error message from an Agent error body"""
    if not body:
        return default
    try:
        payload = json.loads(body)
    except ValueError:
        # Not JSON, use the raw body if it is short enough to be readable
        return body if len(body) < 200 else default
    if isinstance(payload, dict):
        for key in ("error", "message", "block_reason"):
            if key in payload:
                return str(payload[key])
    return default


def _int_header(headers: Mapping[str, Any], name: str) -> int:
    try:
        return int(headers.get(name, 0))
    except (TypeError, ValueError):
        return 0


def error_from_response(
    status_code: int,
    body: str,
    reason: str = "",
    headers: Optional[Mapping[str, Any]] = None,
) -> AxonFlowError:
    """Map a non-2xx Agent response to the matching exception"""
    headers = headers or {}
    message = extract_error_message(body, reason or f"HTTP {status_code}")

    if status_code == 400:
        return RequestValidationError(message)
    if status_code == 401:
        return AuthenticationError(message)
    if status_code == 403:
        if "policy" in body or "blocked" in body:
            return PolicyViolationError(message)
        return AuthenticationError(message, 403)
    if status_code == 404:
        return NotFoundError(message)
    if status_code in (408, 504):
        return AxonFlowTimeoutError(message, status_code=status_code)
    if status_code == 429:
        reset = headers.get("X-RateLimit-Reset")
        try:
            reset_at = float(reset) if reset is not None else None
        except (TypeError, ValueError):
            reset_at = None
        return RateLimitError(
            message,
            limit=_int_header(headers, "X-RateLimit-Limit"),
            remaining=_int_header(headers, "X-RateLimit-Remaining"),
            reset_at=reset_at,
        )
    return AxonFlowError(message, status_code)
