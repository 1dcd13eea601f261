"""AxonFlow client - orchestrates cache, retries and Agent calls"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from axonflow.domain.config import AxonFlowConfig, Mode
from axonflow.domain.errors import ConnectorError, PlanExecutionError, PolicyViolationError
from axonflow.domain.models import (
    AuditOptions,
    AuditResult,
    ClientRequest,
    ClientResponse,
    ConnectorInfo,
    ConnectorQuery,
    ConnectorResponse,
    HealthStatus,
    PlanRequest,
    PlanResponse,
    PolicyApprovalRequest,
    PolicyApprovalResult,
    RequestType,
)
from axonflow.infrastructure.cache import CacheStats, ResponseCache, generate_cache_key
from axonflow.infrastructure.config.config_manager import ConfigManager
from axonflow.infrastructure.http_client import AgentHttpClient
from axonflow.infrastructure.retry import RetryExecutor

logger = logging.getLogger(__name__)


class AxonFlow:
    """Client for the AxonFlow Agent.

    Each call runs through the client's :class:`RetryExecutor`. Proxy-mode
    queries are additionally memoized in a :class:`ResponseCache`: the cache is
    consulted first, the Agent is called on a miss, and only successful,
    unblocked responses are stored.

    Example:
        >>> with AxonFlow(AxonFlowConfig(agent_url="http://localhost:8080")) as client:
        ...     response = client.execute_query(ClientRequest(query="hello", user_token="u1"))
    """

    def __init__(
        self,
        config: Optional[AxonFlowConfig] = None,
        *,
        http_client: Optional[AgentHttpClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize client

        Args:
            config: Client configuration (defaults to a local Agent)
            http_client: Transport override, mainly for tests
            sleep: Blocking sleep used between retry attempts
        """
        self.config = config or AxonFlowConfig()
        self.http = http_client or AgentHttpClient(self.config)
        self.retry_executor = RetryExecutor(self.config.retry, sleep=sleep)
        self.cache = ResponseCache(self.config.cache)

        if self.config.debug:
            logging.getLogger("axonflow").setLevel(logging.DEBUG)
        logger.info(f"AxonFlow client initialized for {self.config.agent_url}")

    @classmethod
    def from_environment(cls) -> "AxonFlow":
        """Create a client from .axonflow.yml and AXONFLOW_* environment variables"""
        return cls(ConfigManager().config)

    @classmethod
    def sandbox(cls, agent_url: str) -> "AxonFlow":
        return cls(AxonFlowConfig(agent_url=agent_url, mode=Mode.SANDBOX))

    def __enter__(self) -> "AxonFlow":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.http.close()
        self.cache.clear()
        logger.info("AxonFlow client closed")

    # Health

    def health_check(self) -> HealthStatus:
        data = self.retry_executor.execute(lambda: self.http.request("GET", "/health"), "health_check")
        return HealthStatus.from_dict(data)

    # Gateway mode

    def get_policy_approved_context(self, request: PolicyApprovalRequest) -> PolicyApprovalResult:
        """Pre-check a request against policies before a direct LLM call

        Raises:
            PolicyViolationError: If the request is not approved
        """

        def _call() -> PolicyApprovalResult:
            result = PolicyApprovalResult.from_dict(
                self.http.request("POST", "/api/policy/pre-check", request.to_dict())
            )
            if not result.is_approved:
                raise PolicyViolationError(result.block_reason, result.blocking_policy_name, result.policies)
            return result

        return self.retry_executor.execute(_call, "get_policy_approved_context")

    def pre_check(self, request: PolicyApprovalRequest) -> PolicyApprovalResult:
        return self.get_policy_approved_context(request)

    def audit_llm_call(self, options: AuditOptions) -> AuditResult:
        """Record a direct LLM call made after a successful pre-check"""
        data = self.retry_executor.execute(
            lambda: self.http.request("POST", "/api/audit/llm-call", options.to_dict()), "audit_llm_call"
        )
        return AuditResult.from_dict(data)

    # Proxy mode

    def execute_query(self, request: ClientRequest) -> ClientResponse:
        """Execute a query through AxonFlow

        Raises:
            PolicyViolationError: If the Agent blocked the request
        """
        cache_key = generate_cache_key(request.request_type.value, request.query, request.user_token)
        cached = self.cache.get(cache_key, ClientResponse)
        if cached is not None:
            return cached

        def _call() -> ClientResponse:
            response = ClientResponse.from_dict(self.http.request("POST", "/api/request", request.to_dict()))
            if response.is_blocked:
                policies = response.policy_info.policies_evaluated if response.policy_info else None
                raise PolicyViolationError(response.block_reason, response.blocking_policy_name, policies)
            return response

        response = self.retry_executor.execute(_call, "execute_query")
        if response.is_success and not response.is_blocked:
            self.cache.put(cache_key, response)
        return response

    # Multi-agent planning

    def generate_plan(self, request: PlanRequest) -> PlanResponse:
        """Ask the Agent to generate a multi-agent plan

        Raises:
            PlanExecutionError: If the Agent reports the plan could not be generated
        """
        client_id = self.config.client_id or "default"
        body = {
            "query": request.objective,
            "user_token": request.user_token or client_id,
            "client_id": client_id,
            "request_type": RequestType.MULTI_AGENT_PLAN.value,
            "context": {"domain": request.domain or "generic"},
        }

        def _call() -> PlanResponse:
            data = self.http.request("POST", "/api/request", body)
            if not data.get("success"):
                raise PlanExecutionError(data.get("error") or "Plan generation failed", plan_id=data.get("plan_id"))
            return PlanResponse.from_agent_response(data, request.domain)

        return self.retry_executor.execute(_call, "generate_plan")

    def execute_plan(self, plan_id: str) -> PlanResponse:
        if not plan_id:
            raise ValueError("plan_id is required")
        data = self.retry_executor.execute(
            lambda: self.http.request("POST", f"/api/v1/orchestrator/plan/{plan_id}/execute"), "execute_plan"
        )
        return PlanResponse.from_dict(data)

    def get_plan_status(self, plan_id: str) -> PlanResponse:
        if not plan_id:
            raise ValueError("plan_id is required")
        data = self.retry_executor.execute(
            lambda: self.http.request("GET", f"/api/v1/orchestrator/plan/{plan_id}"), "get_plan_status"
        )
        return PlanResponse.from_dict(data)

    # MCP connectors

    def list_connectors(self) -> List[ConnectorInfo]:
        data = self.retry_executor.execute(lambda: self.http.request("GET", "/api/v1/connectors"), "list_connectors")
        return [ConnectorInfo.from_dict(item) for item in data or []]

    def install_connector(self, connector_id: str, config: Optional[Dict[str, Any]] = None) -> ConnectorInfo:
        if not connector_id:
            raise ValueError("connector_id is required")
        body = {"connector_id": connector_id, "config": config or {}}
        data = self.retry_executor.execute(
            lambda: self.http.request("POST", "/api/v1/connectors/install", body), "install_connector"
        )
        return ConnectorInfo.from_dict(data)

    def query_connector(self, query: ConnectorQuery) -> ConnectorResponse:
        """Run an operation on an installed connector

        Raises:
            ConnectorError: If the connector reports a failure
        """

        def _call() -> ConnectorResponse:
            result = ConnectorResponse.from_dict(
                self.http.request("POST", "/api/v1/connectors/query", query.to_dict())
            )
            if not result.success:
                raise ConnectorError(result.error or "Connector query failed", query.connector_id, query.operation)
            return result

        return self.retry_executor.execute(_call, "query_connector")

    # Cache

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()

    # Async variants run the blocking call in a worker thread

    async def health_check_async(self) -> HealthStatus:
        return await asyncio.to_thread(self.health_check)

    async def get_policy_approved_context_async(self, request: PolicyApprovalRequest) -> PolicyApprovalResult:
        return await asyncio.to_thread(self.get_policy_approved_context, request)

    async def audit_llm_call_async(self, options: AuditOptions) -> AuditResult:
        return await asyncio.to_thread(self.audit_llm_call, options)

    async def execute_query_async(self, request: ClientRequest) -> ClientResponse:
        return await asyncio.to_thread(self.execute_query, request)

    async def generate_plan_async(self, request: PlanRequest) -> PlanResponse:
        return await asyncio.to_thread(self.generate_plan, request)

    async def list_connectors_async(self) -> List[ConnectorInfo]:
        return await asyncio.to_thread(self.list_connectors)

    async def query_connector_async(self, query: ConnectorQuery) -> ConnectorResponse:
        return await asyncio.to_thread(self.query_connector, query)
