"""One-time tokens guarding the command and push channels."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable
from typing import NamedTuple

from .const import TOKEN_QUOTE_CHARS

_LOGGER = logging.getLogger(__name__)


class Token(NamedTuple):
    """A short nonce and the clock value at which it was issued."""

    value: str
    created: float

    def __str__(self) -> str:
        return self.value


class TokenStore:
    """Issue, validate and expire one-time tokens.

    Tokens are not secrets, they only keep stale or replayed signals out.
    A token is valid while ``now - created <= timeout`` and is removed the
    first time it is looked up, valid or not. A ``timeout`` of ``0`` disables
    validation; callers check :attr:`enabled` and skip the store.
    """

    def __init__(
        self, timeout: float, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._timeout = timeout
        self._clock = clock
        self._tokens: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens

    @property
    def timeout(self) -> float:
        """Seconds a token stays valid."""
        return self._timeout

    @property
    def enabled(self) -> bool:
        """Return True if inbound tokens must be validated."""
        return self._timeout != 0

    def issue(self) -> Token:
        """Create a fresh token and remember when it was made."""
        self.prune()
        value = secrets.token_hex(4)
        while value in self._tokens:
            value = secrets.token_hex(4)
        token = Token(value, self._clock())
        self._tokens[value] = token.created
        _LOGGER.debug("Issued token %s (%s outstanding)", value, len(self._tokens))
        return token

    def validate_and_consume(self, token: str) -> bool:
        """Return True if *token* was issued and has not expired.

        The token is deleted whatever the outcome so it can never be
        replayed.
        """
        token = token.strip(TOKEN_QUOTE_CHARS)
        created = self._tokens.pop(token, None)
        _LOGGER.debug("Checking token '%s' created %s", token, created)
        self.prune()
        if created is None:
            return False
        return self._clock() - created <= self._timeout

    def prune(self) -> None:
        """Drop every token older than the timeout."""
        now = self._clock()
        expired = [t for t, created in self._tokens.items() if now - created > self._timeout]
        for token in expired:
            del self._tokens[token]
