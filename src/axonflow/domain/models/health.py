"""Agent health model"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from axonflow.domain.models._serialization import known_fields


@dataclass
class HealthStatus:
    status: Optional[str] = None
    version: Optional[str] = None
    uptime: Optional[str] = None
    components: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return (self.status or "").lower() in ("healthy", "ok")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthStatus":
        values = known_fields(cls, data)
        values["components"] = values.get("components") or {}
        return cls(**values)
