"""HTTP transport for the Falcon API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import aiohttp

from falconwatch._redact import redact_for_log
from falconwatch.config import FalconConfig
from falconwatch.exceptions import FalconTransportError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status line and fully read body of one HTTP exchange."""

    status: int
    reason: str
    text: str

    @property
    def status_line(self) -> str:
        return f"{self.status} {self.reason}".strip()


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles that return
    scripted responses, while keeping the production implementation
    (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        ...


class HttpTransport:
    """aiohttp-backed transport with a hard per-request timeout.

    Non-200 statuses are returned, not raised; endpoint modules decide what a
    status means. Network failures and timeouts raise
    :class:`FalconTransportError`.
    """

    def __init__(self, config: FalconConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        request_headers = {"user-agent": self._config.user_agent, **(headers or {})}

        _logger.debug("%s %s headers=%s", method, url, redact_for_log(request_headers))

        try:
            async with self._http.request(
                method,
                url,
                headers=request_headers,
                data=dict(data) if data is not None else None,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text(errors="replace")
                response = HttpResponse(status=resp.status, reason=resp.reason or "", text=text)
        except TimeoutError as exc:
            raise FalconTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout:g}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise FalconTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> %s (%d bytes)", method, url, response.status_line, len(response.text))
        return response
