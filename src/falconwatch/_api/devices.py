"""Device inventory endpoint.

Endpoint:
  - GET /devices/queries/devices-scroll/v1
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from falconwatch._constants import DEVICES_SCROLL_ENDPOINT
from falconwatch._transport import Transport
from falconwatch.config import FalconConfig
from falconwatch.exceptions import (
    FalconDecodeError,
    FalconTokenRejectedError,
    FalconTransportError,
)
from falconwatch.models.devices import DeviceScroll
from falconwatch.session import Session

_logger = logging.getLogger(__name__)


def build_headers(config: FalconConfig, session: Session) -> dict[str, str]:
    """Request headers: bearer token plus the client identifier."""
    return {
        "accept": "application/json",
        "user-agent": config.user_agent,
        "crowdstrike-sdk": config.user_agent,
        **session.authorization_header(),
    }


async def fetch_device_scroll(
    config: FalconConfig,
    session: Session,
    transport: Transport,
) -> DeviceScroll:
    """Fetch the device ID list in a single request.

    Raises
    ------
    FalconTokenRejectedError
        The endpoint answered 401.
    FalconTransportError
        Any other non-200 status (``body`` carries the response text).
    FalconDecodeError
        The body is not a JSON object with a ``resources`` string list.
    """
    endpoint = DEVICES_SCROLL_ENDPOINT
    response = await transport.request("GET", endpoint, headers=build_headers(config, session))

    if response.status == 401:
        raise FalconTokenRejectedError(
            f"token rejected: {response.status_line}  body={response.text!r}",
            status_code=response.status,
            endpoint=endpoint,
            body=response.text,
        )
    if response.status != 200:
        raise FalconTransportError(
            f"unexpected status code: {response.status_line}  body={response.text!r}",
            status_code=response.status,
            endpoint=endpoint,
            body=response.text,
        )

    try:
        scroll = DeviceScroll.from_body(response.text)
    except ValidationError as exc:
        raise FalconDecodeError(
            f"decoding body: {exc.errors(include_url=False)[0]['msg']}  body={response.text!r}",
            status_code=response.status,
            endpoint=endpoint,
            body=response.text,
        ) from exc

    _logger.debug("%s returned %d device IDs", endpoint, scroll.count)
    return scroll
