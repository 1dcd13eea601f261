"""Retry executor for Agent calls using tenacity.

Backoff is deterministic: after attempt ``n`` fails the executor waits
``RetryPolicy.delay_for_attempt(n)`` seconds. Whether a failure is retried is
decided by the classifier, never by the exception type directly.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)

from axonflow.domain.config.retry import RetryPolicy
from axonflow.domain.errors import ClassifiedError, classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryExecutor:
    """Runs an operation under a :class:`RetryPolicy`.

    Terminal failures propagate on the first occurrence. Retryable failures
    are retried up to ``max_attempts`` times in total, after which the last
    original exception is re-raised unchanged.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        *,
        classifier: Callable[[BaseException], ClassifiedError] = classify_error,
        sleep: Callable[[float], None] = time.sleep,
        async_sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the executor

        Args:
            policy: Retry policy (defaults to ``RetryPolicy.defaults()``)
            classifier: Maps an exception to retryable/terminal
            sleep: Blocking sleep used between synchronous attempts
            async_sleep: Awaitable sleep used between asynchronous attempts
        """
        self.policy = policy if policy is not None else RetryPolicy.defaults()
        self._classify = classifier
        self._sleep = sleep
        self._async_sleep = async_sleep

    def _is_retryable(self, exception: BaseException) -> bool:
        return self._classify(exception).is_retryable

    def _wait(self, retry_state: RetryCallState) -> float:
        return self.policy.delay_for_attempt(retry_state.attempt_number)

    def _before_sleep_log(self, label: str) -> Callable[[RetryCallState], None]:
        def _log(retry_state: RetryCallState) -> None:
            if retry_state.outcome is None:
                return
            exception = retry_state.outcome.exception()
            delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
            logger.warning(
                f"Attempt {retry_state.attempt_number}/{self.policy.max_attempts} failed for {label}, "
                f"retrying in {delay:.3f}s: {exception}"
            )

        return _log

    def _retry_kwargs(self, label: str) -> Dict[str, Any]:
        return {
            "stop": stop_after_attempt(self.policy.max_attempts),
            "wait": self._wait,
            "retry": retry_if_exception(self._is_retryable),
            "reraise": True,
            "before_sleep": self._before_sleep_log(label),
        }

    def _log_exhausted(self, label: str, exception: BaseException) -> None:
        # Retryable errors only escape the loop once attempts run out
        if self._is_retryable(exception):
            logger.error(f"All {self.policy.max_attempts} attempts failed for {label}: {exception}")

    def execute(self, operation: Callable[[], T], label: str = "operation") -> T:
        """Execute a zero-argument callable with retries

        Args:
            operation: Callable to invoke
            label: Description of the operation for logs

        Returns:
            The first successful result

        Raises:
            Exception: The terminal error, or the last retryable error once
                attempts are exhausted
        """
        if not self.policy.enabled:
            return operation()

        retrying = Retrying(sleep=self._sleep, **self._retry_kwargs(label))
        try:
            return retrying(operation)
        except Exception as e:
            self._log_exhausted(label, e)
            raise

    async def execute_async(self, operation: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        """Async variant of :meth:`execute`; the wait between attempts yields to the event loop"""
        if not self.policy.enabled:
            return await operation()

        retrying = AsyncRetrying(sleep=self._async_sleep, **self._retry_kwargs(label))
        try:
            return await retrying(operation)
        except Exception as e:
            self._log_exhausted(label, e)
            raise
