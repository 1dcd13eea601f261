"""Configuration models with Pydantic validation."""

from axonflow.domain.config.cache import CachePolicy
from axonflow.domain.config.client import AxonFlowConfig, Mode
from axonflow.domain.config.retry import RetryPolicy

__all__ = [
    "AxonFlowConfig",
    "CachePolicy",
    "Mode",
    "RetryPolicy",
]
