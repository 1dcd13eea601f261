"""Multi-agent planning models"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from axonflow.domain.models._serialization import drop_none, known_fields


@dataclass
class PlanRequest:
    objective: str
    domain: Optional[str] = None
    user_token: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)
    constraints: Dict[str, Any] = field(default_factory=dict)
    max_steps: Optional[int] = None
    parallel: Optional[bool] = None

    def __post_init__(self):
        if not self.objective:
            raise ValueError("objective is required")

    def to_dict(self) -> Dict[str, Any]:
        return drop_none(self)


@dataclass
class PlanStep:
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    depends_on: List[str] = field(default_factory=list)
    agent: Optional[str] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    estimated_time: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanStep":
        values = known_fields(cls, data)
        values["depends_on"] = values.get("depends_on") or []
        values["parameters"] = values.get("parameters") or {}
        return cls(**values)


@dataclass
class PlanResponse:
    plan_id: Optional[str] = None
    steps: List[PlanStep] = field(default_factory=list)
    domain: Optional[str] = None
    complexity: Optional[int] = None
    parallel: Optional[bool] = None
    estimated_duration: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    status: Optional[str] = None
    result: Optional[str] = None

    @property
    def step_count(self) -> int:
        return len(self.steps)

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanResponse":
        values = known_fields(cls, data)
        values["steps"] = [PlanStep.from_dict(s) for s in values.get("steps") or []]
        values["metadata"] = values.get("metadata") or {}
        return cls(**values)

    @classmethod
    def from_agent_response(cls, data: Dict[str, Any], requested_domain: Optional[str] = None) -> "PlanResponse":
        """Build a plan from the Agent's ``/api/request`` envelope.

        The envelope looks like ``{success, plan_id, data: {steps, domain, ...},
        metadata, result}``; the step details live under ``data``.
        """
        details = data.get("data") or {}
        complexity = details.get("complexity")
        return cls(
            plan_id=data.get("plan_id"),
            steps=[PlanStep.from_dict(s) for s in details.get("steps") or []],
            domain=details.get("domain") or requested_domain or "generic",
            complexity=int(complexity) if complexity is not None else None,
            parallel=details.get("parallel"),
            estimated_duration=details.get("estimated_duration"),
            metadata=data.get("metadata") or {},
            result=data.get("result"),
        )
