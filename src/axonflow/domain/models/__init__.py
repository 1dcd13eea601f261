"""Request and response models exchanged with the AxonFlow Agent"""

from axonflow.domain.models.audit import AuditOptions, AuditResult, TokenUsage
from axonflow.domain.models.connector import ConnectorInfo, ConnectorQuery, ConnectorResponse
from axonflow.domain.models.health import HealthStatus
from axonflow.domain.models.plan import PlanRequest, PlanResponse, PlanStep
from axonflow.domain.models.policy_approval import PolicyApprovalRequest, PolicyApprovalResult, RateLimitInfo
from axonflow.domain.models.query import ClientRequest, ClientResponse, PolicyInfo, RequestType

__all__ = [
    "AuditOptions",
    "AuditResult",
    "ClientRequest",
    "ClientResponse",
    "ConnectorInfo",
    "ConnectorQuery",
    "ConnectorResponse",
    "HealthStatus",
    "PlanRequest",
    "PlanResponse",
    "PlanStep",
    "PolicyApprovalRequest",
    "PolicyApprovalResult",
    "PolicyInfo",
    "RateLimitInfo",
    "RequestType",
    "TokenUsage",
]
