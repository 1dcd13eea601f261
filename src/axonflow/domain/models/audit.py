"""Gateway-mode audit models"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from axonflow.domain.models._serialization import drop_none, known_fields


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @classmethod
    def of(cls, prompt_tokens: int, completion_tokens: int) -> "TokenUsage":
        return cls(prompt_tokens, completion_tokens, prompt_tokens + completion_tokens)


@dataclass
class AuditOptions:
    """Record of a direct LLM call, sent after the call completes"""

    context_id: str
    client_id: Optional[str] = None
    response_summary: Optional[str] = None
    provider: Optional[str] = None
    model: Optional[str] = None
    token_usage: Optional[TokenUsage] = None
    latency_ms: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None

    def __post_init__(self):
        if not self.context_id:
            raise ValueError("context_id is required")
        if self.latency_ms < 0:
            raise ValueError("latency_ms must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        return drop_none(self)


@dataclass
class AuditResult:
    success: bool = False
    audit_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditResult":
        return cls(**known_fields(cls, data))
