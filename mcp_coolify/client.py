"""
Coolify REST API client.
One authenticated call per invocation, failures mapped to TransportError.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from .config import Settings
from .errors import TransportError, ValidationError

log = logging.getLogger(__name__)


def check_endpoint(endpoint: str) -> str:
    """Reject endpoint paths that could escape /api/v1."""
    if not isinstance(endpoint, str) or not endpoint.startswith("/"):
        raise ValidationError("Invalid endpoint path")
    if ".." in endpoint or "//" in endpoint:
        raise ValidationError("Invalid endpoint path")
    return endpoint


class CoolifyClient:
    """Async client for the Coolify /api/v1 endpoints."""

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.timeout),
            follow_redirects=False,
            verify=True,
            transport=transport,
        )

    async def __aenter__(self) -> "CoolifyClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.settings.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _url(self, endpoint: str) -> str:
        return f"{self.settings.api_url}{check_endpoint(endpoint)}"

    async def request(
        self,
        method: str,
        endpoint: str,
        json_body: Any = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Call the API and return the decoded JSON body."""
        url = self._url(endpoint)
        start = time.monotonic()
        try:
            r = await self._http.request(
                method,
                url,
                headers=self._headers(),
                json=json_body,
                params=params,
            )
        except httpx.TimeoutException:
            log.warning("Coolify %s %s timed out", method, endpoint)
            raise TransportError(TransportError.REQUEST_TIMEOUT) from None
        except httpx.ConnectError:
            log.warning("Coolify %s %s: cannot connect", method, endpoint)
            raise TransportError(TransportError.SERVICE_UNAVAILABLE) from None
        except httpx.HTTPError as e:
            log.warning("Coolify %s %s: %s", method, endpoint, e.__class__.__name__)
            raise TransportError(TransportError.NETWORK_ERROR) from None

        log.debug(
            "Coolify %s %s -> %d (%.0f ms)",
            method, endpoint, r.status_code, (time.monotonic() - start) * 1000,
        )
        if not 200 <= r.status_code < 300:
            log.warning("Coolify %s %s -> HTTP %d", method, endpoint, r.status_code)
            raise TransportError.from_status(r.status_code)

        if not r.content.strip():
            return {}
        try:
            return r.json()
        except (ValueError, RecursionError):
            log.warning("Coolify %s %s returned a non-JSON body", method, endpoint)
            raise TransportError(TransportError.NETWORK_ERROR) from None

    async def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json_body: Any = None) -> Any:
        return await self.request("POST", endpoint, json_body=json_body)
