"""Internal constants shared across the package."""

BASE_URL = "https://api.us-2.crowdstrike.com"
TOKEN_ENDPOINT = "/oauth2/token"
DEVICES_SCROLL_ENDPOINT = "/devices/queries/devices-scroll/v1"

#: Sent as both ``User-Agent`` and ``CrowdStrike-SDK`` so requests can be
#: attributed to this tool in the Falcon audit logs.
CLIENT_IDENTIFIER = "falconwatch_0.1"

DEFAULT_INTERVAL: float = 60.0
DEFAULT_REQUEST_TIMEOUT: float = 60.0

#: Seconds before the advertised expiry at which a token is considered stale.
TOKEN_EXPIRY_MARGIN: float = 10.0

#: Used when the token endpoint omits ``expires_in``.
DEFAULT_TOKEN_TTL: float = 30 * 60
