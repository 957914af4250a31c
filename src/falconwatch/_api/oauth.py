"""OAuth2 token endpoint.

Endpoint:
  - POST /oauth2/token (client-credentials grant)
"""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from falconwatch._constants import TOKEN_ENDPOINT
from falconwatch._redact import redact_for_log
from falconwatch._transport import Transport
from falconwatch.config import FalconConfig
from falconwatch.exceptions import FalconAuthenticationError
from falconwatch.models.token import OAuthToken

_logger = logging.getLogger(__name__)


def build_token_request(config: FalconConfig) -> dict[str, str]:
    """Build the form body for a client-credentials exchange."""
    return {
        "client_id": config.client_id,
        "client_secret": config.client_secret,
    }


def parse_token_response(status: int, text: str) -> OAuthToken:
    """Decode a token endpoint reply.

    Any 2xx status with a JSON object carrying ``access_token`` is a
    success; Falcon answers ``201 Created``.

    Raises
    ------
    FalconAuthenticationError
        Non-2xx status or a body without a usable token.
    """
    if not 200 <= status < 300:
        raise FalconAuthenticationError(
            f"token exchange failed: HTTP {status}  body={text!r}",
            status_code=status,
            body=text,
        )

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FalconAuthenticationError(
            f"token response is not JSON: {exc}  body={text[:200]!r}",
            status_code=status,
            body=text,
        ) from exc

    if not isinstance(decoded, dict):
        raise FalconAuthenticationError(
            "token response is not a JSON object",
            status_code=status,
            body=text,
        )

    _logger.debug("Token response: %s", redact_for_log(decoded))

    try:
        return OAuthToken.model_validate({**decoded, "raw": decoded})
    except ValidationError as exc:
        raise FalconAuthenticationError(
            f"token response missing access_token: {exc.error_count()} validation error(s)",
            status_code=status,
            body=text,
        ) from exc


async def fetch_token(config: FalconConfig, transport: Transport) -> OAuthToken:
    """Exchange client credentials for a bearer token."""
    response = await transport.request(
        "POST",
        TOKEN_ENDPOINT,
        headers={"accept": "application/json"},
        data=build_token_request(config),
    )
    return parse_token_response(response.status, response.text)
