"""Proxy-mode query models"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from axonflow.domain.models._serialization import drop_none, known_fields


class RequestType(str, Enum):
    """Kind of request sent to the Agent"""

    CHAT = "chat"
    SQL = "sql"
    MCP_QUERY = "mcp-query"
    MULTI_AGENT_PLAN = "multi-agent-plan"


@dataclass
class ClientRequest:
    """Query sent through AxonFlow in proxy mode"""

    query: str
    user_token: Optional[str] = None
    client_id: Optional[str] = None
    request_type: RequestType = RequestType.CHAT
    context: Dict[str, Any] = field(default_factory=dict)
    llm_provider: Optional[str] = None
    model: Optional[str] = None

    def __post_init__(self):
        if self.query is None:
            raise ValueError("query is required")
        self.request_type = RequestType(self.request_type)

    def to_dict(self) -> Dict[str, Any]:
        return drop_none(self)


@dataclass
class PolicyInfo:
    """Policy evaluation details attached to a response"""

    policies_evaluated: List[str] = field(default_factory=list)
    static_checks: List[str] = field(default_factory=list)
    processing_time: Optional[str] = None
    tenant_id: Optional[str] = None
    risk_score: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PolicyInfo":
        values = known_fields(cls, data)
        values["policies_evaluated"] = values.get("policies_evaluated") or []
        values["static_checks"] = values.get("static_checks") or []
        return cls(**values)


@dataclass
class ClientResponse:
    """Agent response to a proxy-mode query"""

    success: bool = False
    data: Any = None
    result: Optional[str] = None
    plan_id: Optional[str] = None
    blocked: bool = False
    block_reason: Optional[str] = None
    policy_info: Optional[PolicyInfo] = None
    error: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.success

    @property
    def is_blocked(self) -> bool:
        return self.blocked

    @property
    def blocking_policy_name(self) -> Optional[str]:
        """Name of the first evaluated policy when the request was blocked"""
        if not self.blocked or self.policy_info is None or not self.policy_info.policies_evaluated:
            return None
        return self.policy_info.policies_evaluated[0]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientResponse":
        values = known_fields(cls, data)
        if isinstance(values.get("policy_info"), dict):
            values["policy_info"] = PolicyInfo.from_dict(values["policy_info"])
        values["success"] = bool(values.get("success", False))
        values["blocked"] = bool(values.get("blocked", False))
        return cls(**values)
