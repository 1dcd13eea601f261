"""Gateway-mode pre-check models"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from axonflow.domain.models._serialization import drop_none, known_fields


@dataclass
class PolicyApprovalRequest:
    """Pre-check request evaluated before a direct LLM call"""

    user_token: str
    query: str
    data_sources: List[str] = field(default_factory=list)
    context: Dict[str, Any] = field(default_factory=dict)
    client_id: Optional[str] = None

    def __post_init__(self):
        if not self.user_token:
            raise ValueError("user_token is required")
        if self.query is None:
            raise ValueError("query is required")

    def to_dict(self) -> Dict[str, Any]:
        return drop_none(self)


@dataclass
class RateLimitInfo:
    limit: int = 0
    remaining: int = 0
    reset_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateLimitInfo":
        return cls(**known_fields(cls, data))


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass
class PolicyApprovalResult:
    """Outcome of a gateway-mode pre-check"""

    context_id: Optional[str] = None
    approved: bool = False
    approved_data: Dict[str, Any] = field(default_factory=dict)
    policies: List[str] = field(default_factory=list)
    expires_at: Optional[datetime] = None
    block_reason: Optional[str] = None
    rate_limit_info: Optional[RateLimitInfo] = None
    processing_time: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.approved

    @property
    def is_expired(self) -> bool:
        """Check if the approval context can no longer be audited against"""
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) > expires_at

    @property
    def blocking_policy_name(self) -> Optional[str]:
        return self.policies[0] if self.policies else None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PolicyApprovalResult":
        values = known_fields(cls, data)
        values["approved"] = bool(values.get("approved", False))
        values["approved_data"] = values.get("approved_data") or {}
        values["policies"] = values.get("policies") or []
        values["expires_at"] = _parse_timestamp(values.get("expires_at"))
        if isinstance(values.get("rate_limit_info"), dict):
            values["rate_limit_info"] = RateLimitInfo.from_dict(values["rate_limit_info"])
        return cls(**values)
