"""OAuth2 token model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class OAuthToken(BaseModel):
    """Token returned by the client-credentials exchange.

    Parameters
    ----------
    access_token : str
        Bearer token for subsequent API calls.
    token_type : str
        Token type, ``"bearer"`` for Falcon.
    expires_in : float or None
        Lifetime in seconds as advertised by the server.
    raw : dict
        Full decoded token dict for access to additional fields.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    access_token: str = Field(min_length=1)
    token_type: str = "bearer"
    expires_in: float | None = None
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
