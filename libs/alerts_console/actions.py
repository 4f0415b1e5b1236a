"""Email notification actions referenced by triggers."""

from __future__ import annotations

import logging
from typing import Any

from .client import AlertingApiClient, AlertingApiError
from .normalizer import Clock, utc_now

logger = logging.getLogger(__name__)

EMAIL_PLUGIN = "email"


class EmailActionResolver:
    """Make sure an email action exists for a recipient before triggers point at it.

    Actions are keyed by the recipient address, so there is at most one
    action per address. Lookups that answer 404 create the action; any other
    failure is surfaced to the caller.
    """

    def __init__(self, client: AlertingApiClient, *, clock: Clock | None = None) -> None:
        self._client = client
        self._clock = clock or utc_now

    async def fetch(self, email: str) -> dict[str, Any]:
        return await self._client.get_action(EMAIL_PLUGIN, email)

    async def ensure(self, email: str) -> Any:
        try:
            return await self.fetch(email)
        except AlertingApiError as exc:
            if not exc.not_found:
                raise
        logger.debug("Action does not exist, creating one", extra={"recipient": email})
        return await self._client.create_action(self.definition(email))

    async def replace(self, email: str) -> Any:
        """Overwrite the action for ``email`` without checking that it exists."""

        return await self._client.update_action(self.definition(email))

    def definition(self, email: str) -> dict[str, Any]:
        return {
            "actionPlugin": EMAIL_PLUGIN,
            "actionId": email,
            "description": f"Created on {self._clock().isoformat(timespec='seconds')}",
            "to": email,
        }


__all__ = ["EMAIL_PLUGIN", "EmailActionResolver"]
