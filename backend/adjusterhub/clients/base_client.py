"""Reusable base for outbound JSON-over-HTTP API clients."""

import logging
from typing import Any, Dict, Optional

import httpx

from adjusterhub.utils.retry import with_retry

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (httpx.HTTPStatusError, httpx.TimeoutException, httpx.TransportError)


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return True


class BaseHTTPClient:
    """Thin wrapper around httpx with bearer auth, logging and retry.

    Subclasses only implement domain methods on top of ``_request``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 15.0,
        retry_max_attempts: int = 3,
        retry_initial_delay: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        headers = {"Accept": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.Client(timeout=timeout, headers=headers, transport=transport)
        self._retry_max_attempts = retry_max_attempts
        self._retry_initial_delay = retry_initial_delay

    # ── HTTP helpers ─────────────────────────────────────────────────

    def _request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Any]:
        """Send a request, retrying 5xx, 429 and network failures.

        4xx responses are logged and turned into ``None``; the caller decides
        what a rejected request means.
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        @with_retry(
            max_attempts=self._retry_max_attempts,
            initial_delay=self._retry_initial_delay,
            retry_on=RETRYABLE_ERRORS,
            retry_if=_is_retryable,
        )
        def _send():
            logger.debug("%s %s", method, url)
            resp = self._client.request(method, url, json=json, params=params)
            if resp.status_code >= 500 or resp.status_code == 429:
                logger.warning("Retryable status %d from %s", resp.status_code, url)
                resp.raise_for_status()
            if resp.status_code >= 400:
                logger.warning("Client error %d from %s: %s", resp.status_code, url, resp.text[:200])
                return None
            if not resp.content:
                return {}
            return resp.json()

        return _send()

    def _post(self, endpoint: str, payload: Dict[str, Any]) -> Optional[Any]:
        return self._request("POST", endpoint, json=payload)

    # ── lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()
