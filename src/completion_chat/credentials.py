"""Credential providers for the completion endpoint.

The API key is never part of the distributed code. The client asks a provider
for it on every request, so a key rotated in the environment is picked up
without a restart, and a provider that returns ``None`` (e.g. when talking to
a trusted proxy that injects the key itself) sends no auth header at all.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
import os

LOGGER = logging.getLogger(__name__)

CredentialProvider = Callable[[], str | None]


class EnvCredentialProvider:
    """Read the API key from an environment variable at call time."""

    def __init__(self, variable: str) -> None:
        self.variable = variable.strip()
        self._warned = False

    def __call__(self) -> str | None:
        if not self.variable:
            return None
        value = os.environ.get(self.variable, "").strip()
        if value:
            return value
        if not self._warned:
            self._warned = True
            LOGGER.warning(
                "credentials.env.missing",
                extra={"event": "credentials.env.missing", "variable": self.variable},
            )
        return None


class StaticCredentialProvider:
    """Return a fixed key supplied at runtime."""

    def __init__(self, value: str | None) -> None:
        self._value = value.strip() if value else None

    def __call__(self) -> str | None:
        return self._value or None
