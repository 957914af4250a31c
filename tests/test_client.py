from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from falconwatch._transport import HttpResponse
from falconwatch.client import FalconClient
from falconwatch.config import FalconConfig
from falconwatch.exceptions import (
    FalconAuthenticationError,
    FalconError,
    FalconTransportError,
)
from falconwatch.session import Session


@dataclass
class FakeFalconBackend:
    devices: list[str] = field(default_factory=lambda: ["dev-1", "dev-2"])
    calls: dict[str, int] = field(default_factory=dict)
    token_status: int = 201
    expires_in: int = 1799
    reject_tokens: set[str] = field(default_factory=set)
    seen_tokens: list[str] = field(default_factory=list)
    token_forms: list[dict[str, str]] = field(default_factory=list)
    _issued: int = 0

    def _record_call(self, endpoint: str) -> None:
        self.calls[endpoint] = self.calls.get(endpoint, 0) + 1

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        headers: Mapping[str, str] | None = None,
        data: Mapping[str, str] | None = None,
    ) -> HttpResponse:
        self._record_call(endpoint)

        if endpoint == "/oauth2/token":
            assert method == "POST"
            self.token_forms.append(dict(data or {}))
            if self.token_status >= 300:
                return HttpResponse(self.token_status, "Forbidden", '{"errors":[{"code":403}]}')
            self._issued += 1
            body = {"access_token": f"token-{self._issued}", "token_type": "bearer", "expires_in": self.expires_in}
            return HttpResponse(self.token_status, "Created", json.dumps(body))

        if endpoint == "/devices/queries/devices-scroll/v1":
            token = (headers or {}).get("authorization", "").removeprefix("Bearer ")
            self.seen_tokens.append(token)
            if token in self.reject_tokens:
                return HttpResponse(401, "Unauthorized", '{"errors":[{"code":401}]}')
            return HttpResponse(200, "OK", json.dumps({"resources": self.devices}))

        return HttpResponse(404, "Not Found", "")


def _config(**overrides: object) -> FalconConfig:
    return FalconConfig(client_id="client-1", client_secret="secret-1", **overrides)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_first_call_exchanges_credentials_then_fetches() -> None:
    backend = FakeFalconBackend()

    async with FalconClient(_config(), transport=backend) as client:
        scroll = await client.get_device_scroll()

    assert scroll.count == 2
    assert backend.calls == {"/oauth2/token": 1, "/devices/queries/devices-scroll/v1": 1}
    assert backend.token_forms == [{"client_id": "client-1", "client_secret": "secret-1"}]
    assert backend.seen_tokens == ["token-1"]


@pytest.mark.asyncio
async def test_token_is_reused_while_valid() -> None:
    backend = FakeFalconBackend()

    async with FalconClient(_config(), transport=backend) as client:
        assert await client.count_devices() == 2
        assert await client.count_devices() == 2

    assert backend.calls["/oauth2/token"] == 1
    assert backend.seen_tokens == ["token-1", "token-1"]


@pytest.mark.asyncio
async def test_expired_token_is_refreshed_before_request() -> None:
    # 5s lifetime with the default 10s margin is stale immediately.
    backend = FakeFalconBackend(expires_in=5)

    async with FalconClient(_config(), transport=backend) as client:
        await client.get_device_scroll()
        await client.get_device_scroll()

    assert backend.calls["/oauth2/token"] == 2
    assert backend.seen_tokens == ["token-1", "token-2"]


@pytest.mark.asyncio
async def test_rejected_token_triggers_single_reauth_and_retry() -> None:
    backend = FakeFalconBackend(reject_tokens={"token-1"})

    async with FalconClient(_config(), transport=backend) as client:
        scroll = await client.get_device_scroll()

    assert scroll.count == 2
    assert backend.calls["/oauth2/token"] == 2
    assert backend.seen_tokens == ["token-1", "token-2"]


@pytest.mark.asyncio
async def test_second_rejection_propagates() -> None:
    backend = FakeFalconBackend(reject_tokens={"token-1", "token-2"})

    async with FalconClient(_config(), transport=backend) as client:
        with pytest.raises(FalconTransportError) as exc_info:
            await client.get_device_scroll()

    assert exc_info.value.status_code == 401
    assert backend.calls["/oauth2/token"] == 2


@pytest.mark.asyncio
async def test_refused_token_exchange_raises_authentication_error() -> None:
    backend = FakeFalconBackend(token_status=403)

    async with FalconClient(_config(), transport=backend) as client:
        with pytest.raises(FalconAuthenticationError) as exc_info:
            await client.get_device_scroll()

    assert exc_info.value.status_code == 403
    assert "devices-scroll" not in "".join(backend.calls)


@pytest.mark.asyncio
async def test_login_uses_configured_margin() -> None:
    backend = FakeFalconBackend(expires_in=100)

    async with FalconClient(_config(token_expiry_margin=30.0), transport=backend) as client:
        session = await client.login()

    assert isinstance(session, Session)
    assert session.ttl == 100
    assert session.expiry_margin == 30.0
    assert not session.is_expired


@pytest.mark.asyncio
async def test_invalidate_session_forces_new_exchange() -> None:
    backend = FakeFalconBackend()

    async with FalconClient(_config(), transport=backend) as client:
        await client.ensure_session()
        client.invalidate_session()
        session = await client.ensure_session()

    assert session.access_token == "token-2"


@pytest.mark.asyncio
async def test_client_requires_context_manager() -> None:
    client = FalconClient(_config())
    with pytest.raises(FalconError):
        await client.get_device_scroll()
