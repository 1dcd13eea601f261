"""AxonFlow Python SDK"""

from axonflow.application.client import AxonFlow
from axonflow.domain.config import AxonFlowConfig, CachePolicy, Mode, RetryPolicy
from axonflow.domain.errors import (
    AuthenticationError,
    AxonFlowConnectionError,
    AxonFlowError,
    AxonFlowTimeoutError,
    ClassifiedError,
    ConfigurationError,
    ConnectorError,
    ErrorKind,
    NotFoundError,
    PlanExecutionError,
    PolicyViolationError,
    RateLimitError,
    RequestValidationError,
    classify_error,
)
from axonflow.infrastructure.cache import CacheStats, ResponseCache, generate_cache_key
from axonflow.infrastructure.retry import RetryExecutor

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "AxonFlow",
    "AxonFlowConfig",
    "AxonFlowConnectionError",
    "AxonFlowError",
    "AxonFlowTimeoutError",
    "CachePolicy",
    "CacheStats",
    "ClassifiedError",
    "ConfigurationError",
    "ConnectorError",
    "ErrorKind",
    "Mode",
    "NotFoundError",
    "PlanExecutionError",
    "PolicyViolationError",
    "RateLimitError",
    "RequestValidationError",
    "ResponseCache",
    "RetryExecutor",
    "RetryPolicy",
    "classify_error",
    "generate_cache_key",
]
