"""HTTP transport for the AxonFlow Agent (requests).

We keep HTTP logic centralized so every client call shares headers, timeout
and error mapping. Retries are not handled here; the caller wraps calls in a
:class:`~axonflow.infrastructure.retry.RetryExecutor`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from axonflow.domain.config.client import AxonFlowConfig
from axonflow.domain.errors import (
    AxonFlowConnectionError,
    AxonFlowError,
    AxonFlowTimeoutError,
    error_from_response,
)

logger = logging.getLogger(__name__)


class AgentHttpClient:
    """Sends JSON requests to the Agent and maps failures to SDK errors"""

    def __init__(self, config: AxonFlowConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def _headers(self, has_body: bool) -> Dict[str, str]:
        headers = {
            "User-Agent": self.config.user_agent,
            "Accept": "application/json",
            "X-AxonFlow-Mode": self.config.mode.value,
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        headers.update(self.config.headers)
        return headers

    def request(self, method: str, path: str, body: Optional[Any] = None) -> Any:
        """Send a request and return the decoded JSON body

        Args:
            method: HTTP method
            path: Path appended to the configured agent URL
            body: JSON-serializable body (None sends no body)

        Returns:
            Decoded JSON payload

        Raises:
            AxonFlowError: Mapped from the HTTP status, or on empty/invalid body
            AxonFlowTimeoutError: If the request timed out
            AxonFlowConnectionError: If the Agent could not be reached or the transfer broke
        """
        url = f"{self.config.agent_url}{path}"
        logger.debug(f"HTTP {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                json=body,
                headers=self._headers(body is not None),
                timeout=self.config.timeout,
                verify=not self.config.insecure_skip_verify,
            )
        except requests.exceptions.Timeout as e:
            raise AxonFlowTimeoutError(f"Request timed out: {method} {path}", timeout=self.config.timeout) from e
        except requests.exceptions.RequestException as e:
            # Resets mid-body, bad encodings and redirect loops are transport failures too
            parsed = urlparse(self.config.agent_url)
            raise AxonFlowConnectionError(
                f"Connection failed: {method} {path}: {e}", host=parsed.hostname, port=parsed.port or 0
            ) from e

        if not response.ok:
            raise error_from_response(response.status_code, response.text, response.reason or "", response.headers)

        if not response.content:
            raise AxonFlowError("Empty response body", response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise AxonFlowError(f"Failed to parse response: {e}", response.status_code) from e

    def close(self) -> None:
        self.session.close()
