"""MCP connector models"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from axonflow.domain.models._serialization import drop_none, known_fields


@dataclass
class ConnectorInfo:
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    capabilities: List[str] = field(default_factory=list)
    config_schema: Dict[str, Any] = field(default_factory=dict)
    installed: Optional[bool] = None
    enabled: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectorInfo":
        values = known_fields(cls, data)
        values["capabilities"] = values.get("capabilities") or []
        values["config_schema"] = values.get("config_schema") or {}
        return cls(**values)


@dataclass
class ConnectorQuery:
    connector_id: str
    operation: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    user_token: Optional[str] = None
    timeout_ms: Optional[int] = None

    def __post_init__(self):
        if not self.connector_id:
            raise ValueError("connector_id is required")
        if not self.operation:
            raise ValueError("operation is required")

    def to_dict(self) -> Dict[str, Any]:
        return drop_none(self)


@dataclass
class ConnectorResponse:
    success: bool = False
    data: Any = None
    error: Optional[str] = None
    connector_id: Optional[str] = None
    operation: Optional[str] = None
    processing_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConnectorResponse":
        values = known_fields(cls, data)
        values["success"] = bool(values.get("success", False))
        return cls(**values)
