"""High-level async client for the Falcon device API."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp

from falconwatch._api.devices import fetch_device_scroll
from falconwatch._api.oauth import fetch_token
from falconwatch._constants import DEFAULT_TOKEN_TTL
from falconwatch._transport import HttpTransport, Transport
from falconwatch.config import FalconConfig
from falconwatch.exceptions import FalconError, FalconTokenRejectedError
from falconwatch.models.devices import DeviceScroll
from falconwatch.session import Session

_logger = logging.getLogger(__name__)

T = TypeVar("T")


class FalconClient:
    """Async client for the Falcon API with transparent token refresh.

    Usage::

        async with FalconClient(config) as client:
            scroll = await client.get_device_scroll()

    A token is requested on first use and again whenever it is about to
    expire or the API rejects it.
    """

    def __init__(
        self,
        config: FalconConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport: Transport | None = transport
        self._session: Session | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FalconClient:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        self._session = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self) -> Session:
        """Run the client-credentials exchange and store the new token."""
        transport = self._require_transport()
        token = await fetch_token(self._config, transport)
        ttl = token.expires_in if token.expires_in and token.expires_in > 0 else DEFAULT_TOKEN_TTL
        self._session = Session(
            access_token=token.access_token,
            ttl=ttl,
            expiry_margin=self._config.token_expiry_margin,
        )
        _logger.debug("Obtained %s token valid for %.0fs", token.token_type, ttl)
        return self._session

    async def ensure_session(self) -> Session:
        """Return an active session, re-authenticating if expired."""
        if self._session is not None and not self._session.is_expired:
            return self._session
        return await self.login()

    def invalidate_session(self) -> None:
        """Force session invalidation (next call will re-authenticate)."""
        self._session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise FalconError("Client not initialized. Use 'async with FalconClient(...) as client:'")
        return self._transport

    async def _call_with_reauth(self, fn: Callable[[], Awaitable[T]]) -> T:
        """Run an API call, retrying once if the token is rejected."""
        try:
            return await fn()
        except FalconTokenRejectedError:
            _logger.info("Token rejected, re-authenticating")
            self.invalidate_session()
            return await fn()

    # ------------------------------------------------------------------
    # Read endpoints
    # ------------------------------------------------------------------

    async def get_device_scroll(self) -> DeviceScroll:
        """Fetch the full device ID list."""

        async def _call() -> DeviceScroll:
            session = await self.ensure_session()
            transport = self._require_transport()
            return await fetch_device_scroll(self._config, session, transport)

        return await self._call_with_reauth(_call)

    async def count_devices(self) -> int:
        """Number of devices currently reported by the inventory endpoint."""
        return (await self.get_device_scroll()).count
