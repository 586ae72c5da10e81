"""JSON-over-HTTP transport with bearer authentication."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import aiohttp

from wanderlog._constants import USER_AGENT
from wanderlog._redact import redact_for_log
from wanderlog.config import WanderConfig
from wanderlog.exceptions import WanderTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        token: str | None = None,
        payload: Any = None,
    ) -> Any: ...


class HttpTransport:
    """aiohttp-backed transport for the trip-record REST API."""

    def __init__(self, config: WanderConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        if token:
            headers["authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        token: str | None = None,
        payload: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        An empty 2xx body decodes to ``None``. Non-2xx statuses, network
        failures, timeouts and undecodable bodies raise
        :class:`WanderTransportError`.
        """
        url = f"{self._config.api_base_url}{endpoint}"
        body = json.dumps(payload, separators=(",", ":")) if payload is not None else None

        if _logger.isEnabledFor(logging.DEBUG):
            _logger.debug(
                "%s %s headers=%s body=%s",
                method,
                url,
                redact_for_log(self._headers(token)),
                redact_for_log(payload),
            )

        try:
            async with self._http.request(
                method,
                url,
                data=body,
                headers=self._headers(token),
                timeout=self._timeout,
            ) as resp:
                raw = await resp.read()
                text = raw.decode("utf-8", errors="replace")
                if not 200 <= resp.status < 300:
                    raise WanderTransportError(
                        f"HTTP {resp.status} from {method} {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except WanderTransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise WanderTransportError(
                f"Request {method} {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        if not text.strip():
            return None

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise WanderTransportError(
                f"Invalid JSON from {method} {endpoint}: {text[:200]}",
                status_code=resp.status,
                endpoint=endpoint,
            ) from exc
