"""Constants for request context binding and session handling."""

from __future__ import annotations

from typing import Final

# Name reported in filter log messages when no FilterConfig is given
DEFAULT_FILTER_NAME: Final[str] = "HTTPContextFilter"

# Default max inactive interval in seconds (30 minutes)
DEFAULT_MAX_INACTIVE_INTERVAL: Final[int] = 1800

# Random bytes per generated session id (hex encoded, so 32 characters)
SESSION_ID_BYTES: Final[int] = 16

# Reserved keys in the host session mapping (Starlette ``request.session``)
# holding the session identity and expiry next to the attributes
SESSION_ID_KEY: Final[str] = "_http_context.id"
MAX_INACTIVE_INTERVAL_KEY: Final[str] = "_http_context.max_inactive_interval"
RESERVED_SESSION_KEYS: Final[frozenset[str]] = frozenset({SESSION_ID_KEY, MAX_INACTIVE_INTERVAL_KEY})
