"""Constants used by smoothlock."""

from __future__ import annotations

from typing import Final

PACKAGE_NAME: Final = "smoothlock"
DEFAULT_MANUFACTURER: Final = "Smooth Lock"

# configuration defaults (all durations in seconds)
DEFAULT_NAME: Final = "Smooth Lock"
DEFAULT_POLL_INTERVAL: Final = 300.0
DEFAULT_LISTENER_HOST: Final = "0.0.0.0"
DEFAULT_LISTENER_PORT: Final = 8282
DEFAULT_AUTOLOCK_DELAY: Final = 300
DEFAULT_TIMEOUT: Final = 3.0
DEFAULT_METHOD: Final = "GET"
DEFAULT_TOKEN_TIMEOUT: Final = 2.0

# outbound device routes
STATUS_ROUTE: Final = "/status"
LOCK_ROUTE: Final = "/lock"
UNLOCK_ROUTE: Final = "/unlock"

# inbound listener routes
LOCKED_ROUTE: Final = "locked"
UNLOCKED_ROUTE: Final = "unlocked"
VALIDATE_ROUTE: Final = "validate"
LISTENER_METHODS: Final = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

# listener reply bodies
REPLY_UPDATED: Final = "Homebridge updated"
REPLY_VALID: Final = "valid"
REPLY_INVALID_TOKEN: Final = "invalid token"
REPLY_MISSING_TOKEN: Final = "missing token"
REPLY_INVALID_REQUEST: Final = "Invalid request"

TOKEN_PARAM: Final = "token"
AUTOLOCK_PARAM: Final = "auto"
TOKEN_QUOTE_CHARS: Final = "'\""

# engine events
POLL_FAILED: Final = "poll_failed"
COMMAND_FAILED: Final = "command_failed"
