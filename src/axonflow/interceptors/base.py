"""Base interceptor: policy check, provider call, audit"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Generic, Set, TypeVar

from axonflow.domain.models import AuditOptions, ClientRequest, ClientResponse, RequestType, TokenUsage

if TYPE_CHECKING:
    from axonflow.application.client import AxonFlow

logger = logging.getLogger(__name__)

Req = TypeVar("Req")
Resp = TypeVar("Resp")

SUMMARY_LENGTH = 100


class BaseInterceptor(ABC, Generic[Req, Resp]):
    """Wraps an LLM provider call with an AxonFlow policy check and audit.

    The wrapped call first sends the prompt through
    :meth:`AxonFlow.execute_query`, which raises
    :class:`~axonflow.domain.errors.PolicyViolationError` if the prompt is
    blocked. Only then is the provider called. When the Agent returned a
    ``plan_id`` the call is audited afterwards; audit failures are logged and
    never reach the caller.
    """

    provider: str = ""

    def __init__(self, axonflow: "AxonFlow", user_token: str = "", async_audit: bool = True):
        if axonflow is None:
            raise ValueError("axonflow must not be None")
        self.axonflow = axonflow
        self.user_token = user_token or ""
        self.async_audit = async_audit
        self._audit_tasks: Set["asyncio.Task[None]"] = set()

    @abstractmethod
    def extract_prompt(self, request: Req) -> str:
        """Flatten the provider request into the text evaluated by policies"""

    @abstractmethod
    def model_of(self, request: Req) -> str:
        pass

    @abstractmethod
    def token_usage(self, response: Resp) -> TokenUsage:
        pass

    @abstractmethod
    def summarize(self, response: Resp) -> str:
        pass

    def build_context(self, request: Req) -> Dict[str, Any]:
        return {"provider": self.provider, "model": self.model_of(request)}

    def _client_request(self, request: Req) -> ClientRequest:
        return ClientRequest(
            query=self.extract_prompt(request),
            user_token=self.user_token,
            request_type=RequestType.CHAT,
            context=self.build_context(request),
        )

    def _audit_options(self, context_id: str, response: Resp, model: str, latency_ms: int) -> AuditOptions:
        return AuditOptions(
            context_id=context_id,
            client_id=self.user_token,
            response_summary=self.summarize(response),
            provider=self.provider,
            model=model,
            token_usage=self.token_usage(response),
            latency_ms=latency_ms,
            success=True,
        )

    def _audit(self, checked: ClientResponse, response: Resp, model: str, latency_ms: int) -> None:
        if not checked.plan_id:
            return
        # Best effort: the provider response is returned whatever happens here
        try:
            self.axonflow.audit_llm_call(self._audit_options(checked.plan_id, response, model, latency_ms))
        except Exception as e:
            logger.warning(f"Audit of {self.provider} call failed: {e}")

    def wrap(self, call: Callable[[Req], Resp]) -> Callable[[Req], Resp]:
        """Wrap a synchronous provider call"""

        def wrapped(request: Req) -> Resp:
            start = time.monotonic()
            checked = self.axonflow.execute_query(self._client_request(request))
            response = call(request)
            latency_ms = int((time.monotonic() - start) * 1000)
            self._audit(checked, response, self.model_of(request), latency_ms)
            return response

        return wrapped

    def wrap_async(self, call: Callable[[Req], Awaitable[Resp]]) -> Callable[[Req], Awaitable[Resp]]:
        """Wrap a coroutine provider call; with ``async_audit`` the audit runs in the background"""

        async def wrapped(request: Req) -> Resp:
            start = time.monotonic()
            checked = await self.axonflow.execute_query_async(self._client_request(request))
            response = await call(request)
            latency_ms = int((time.monotonic() - start) * 1000)
            audit = asyncio.to_thread(self._audit, checked, response, self.model_of(request), latency_ms)
            if self.async_audit:
                task = asyncio.ensure_future(audit)
                self._audit_tasks.add(task)
                task.add_done_callback(self._audit_tasks.discard)
            else:
                await audit
            return response

        return wrapped
