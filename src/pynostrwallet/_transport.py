"""JSON-over-HTTP transport for mints and NIP-05 hosts."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pynostrwallet._constants import USER_AGENT
from pynostrwallet._redact import redact_for_log
from pynostrwallet.exceptions import EndpointUnreachableError, WalletTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> Any: ...

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any: ...


class HttpTransport:
    """aiohttp transport returning decoded JSON bodies.

    Connection failures and timeouts raise :class:`EndpointUnreachableError`;
    non-2xx replies raise :class:`WalletTransportError` with the decoded
    error body attached so endpoint modules can map protocol errors.
    """

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 10.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> Any:
        return await self._request("GET", url, params=params)

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> Any:
        return await self._request("POST", url, payload=payload)

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        headers = {"accept": "application/json", "user-agent": USER_AGENT}
        _logger.debug("%s %s payload=%s", method, url, redact_for_log(payload))

        try:
            async with self._http.request(
                method,
                url,
                params=params,
                json=payload,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise EndpointUnreachableError(
                f"Request to {url} failed: {exc or type(exc).__name__}",
                endpoint=url,
            ) from exc

        try:
            body: Any = json.loads(text) if text else None
        except json.JSONDecodeError:
            body = None
            if 200 <= status < 300:
                raise WalletTransportError(
                    f"Invalid JSON from {url}: {text[:200]}",
                    status_code=status,
                    endpoint=url,
                ) from None

        if not 200 <= status < 300:
            raise WalletTransportError(
                f"HTTP {status} from {url}: {text[:200]}",
                status_code=status,
                endpoint=url,
                body=body,
            )
        return body
