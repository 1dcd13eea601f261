"""Client configuration model."""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from axonflow.domain.config.cache import CachePolicy
from axonflow.domain.config.retry import RetryPolicy

DEFAULT_AGENT_URL = "http://localhost:8080"
DEFAULT_USER_AGENT = "axonflow-python-sdk/1.0.0"

_LOCAL_HOSTS = ("localhost", "127.0.0.1", "[::1]")


class Mode(str, Enum):
    """Deployment mode sent to the Agent"""

    PRODUCTION = "production"
    SANDBOX = "sandbox"


class AxonFlowConfig(BaseModel):
    """Configuration for the AxonFlow client.

    Attributes:
        agent_url: Base URL of the AxonFlow Agent (trailing slash stripped)
        client_id: Identity used when a plan request carries no user token
        mode: Deployment mode
        timeout: Per-request timeout in seconds
        debug: Enable DEBUG logging for the ``axonflow`` logger
        insecure_skip_verify: Disable TLS certificate verification
        user_agent: User-Agent header value
        headers: Static headers added to every request (credentials go here)
        retry: Retry policy for Agent calls
        cache: Response cache policy
    """

    agent_url: str = DEFAULT_AGENT_URL
    client_id: Optional[str] = None
    mode: Mode = Mode.PRODUCTION
    timeout: float = Field(60.0, gt=0.0)
    debug: bool = False
    insecure_skip_verify: bool = False
    user_agent: str = DEFAULT_USER_AGENT
    headers: Dict[str, str] = Field(default_factory=dict)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    cache: CachePolicy = Field(default_factory=CachePolicy)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("agent_url")
    @classmethod
    def _normalize_agent_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("agent_url is required")
        return value

    @property
    def is_localhost(self) -> bool:
        """Check if the Agent runs on the local machine"""
        return any(host in self.agent_url for host in _LOCAL_HOSTS)
