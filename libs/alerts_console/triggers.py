"""Compose and decompose full triggers across the trigger sub-resources.

A full trigger is the trigger body together with its dampenings and its
conditions. The alerting API stores those as three separate resources, so
reading one takes three sequential calls and writing one fans out into a
trigger write followed by concurrent dampening and condition writes.

Writes are best effort: a failed dampening or condition write is reported
through the :class:`~libs.alerts_console.errors.ErrorReporter` and never
cancels its siblings, which means a trigger can be left partially configured.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Iterable, Mapping

from libs.observability.logging import operation_scope
from schemas.alerting import Match, TriggerMode

from .actions import EMAIL_PLUGIN, EmailActionResolver
from .client import AlertingApiClient, AlertingApiError
from .errors import REPORTABLE_ERRORS, ErrorCallback, ErrorReporter
from .models import FullTrigger
from .normalizer import Clock, utc_now

logger = logging.getLogger(__name__)

_CONDITION_ERRORS = {
    TriggerMode.FIRING: "Error creating firing conditions.",
    TriggerMode.AUTORESOLVE: "Error creating autoresolve conditions.",
}


def partition_conditions(
    conditions: Iterable[Mapping[str, Any] | None] | None,
) -> tuple[list[Mapping[str, Any]], list[Mapping[str, Any]]]:
    """Split conditions into ``(firing, autoresolve)`` keeping their order.

    A condition without ``triggerMode`` belongs to the FIRING mode.
    """

    firing: list[Mapping[str, Any]] = []
    autoresolve: list[Mapping[str, Any]] = []
    for condition in conditions or ():
        if not condition:
            continue
        if condition.get("triggerMode") == TriggerMode.AUTORESOLVE.value:
            autoresolve.append(condition)
        else:
            firing.append(condition)
    return firing, autoresolve


def primary_email(trigger: Mapping[str, Any]) -> str | None:
    recipients = (trigger.get("actions") or {}).get(EMAIL_PLUGIN) or []
    return recipients[0] if recipients else None


class TriggerAggregator:
    """Read, create, update and delete full triggers."""

    def __init__(
        self,
        client: AlertingApiClient,
        *,
        actions: EmailActionResolver | None = None,
        reporter: ErrorReporter | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._client = client
        self._clock = clock or utc_now
        self._actions = actions or EmailActionResolver(client, clock=self._clock)
        self._reporter = reporter or ErrorReporter()

    async def fetch_full(self, trigger_id: str) -> FullTrigger:
        with operation_scope("trigger.fetch"):
            trigger = await self._client.get_trigger(trigger_id)
            dampenings = await self._client.query_dampenings(trigger_id)
            conditions = await self._client.query_conditions(trigger_id)
        return {"trigger": trigger, "dampenings": dampenings, "conditions": conditions}

    async def fetch_conditions(self, trigger_id: str) -> list[dict[str, Any]]:
        return await self._client.query_conditions(trigger_id)

    async def exists(self, trigger_id: str) -> bool:
        try:
            await self._client.get_trigger(trigger_id)
        except AlertingApiError as exc:
            if exc.not_found:
                return False
            raise
        return True

    def with_defaults(self, trigger: Mapping[str, Any] | None) -> dict[str, Any]:
        merged: dict[str, Any] = {
            "description": f"Created on {self._clock().isoformat(timespec='seconds')}",
            "firingMatch": Match.ALL.value,
            "autoResolveMatch": Match.ALL.value,
            "enabled": True,
            "autoResolve": True,
            "actions": {},
        }
        merged.update(trigger or {})
        return merged

    async def create(
        self, full_trigger: Mapping[str, Any], on_error: ErrorCallback | None = None
    ) -> list[Any]:
        """Save the trigger, then its dampenings and conditions concurrently.

        A failure saving the trigger itself propagates and nothing else is
        written. Returns the results of the sub-writes, ``None`` for the ones
        that failed.
        """

        trigger = self.with_defaults(full_trigger.get("trigger"))
        with operation_scope("trigger.create"):
            saved = await self._client.create_trigger(trigger)
            trigger_id = (saved or {}).get("id") or trigger.get("id")
            logger.info("Trigger created", extra={"trigger_id": trigger_id})

            writes: list[Awaitable[Any]] = []
            for dampening in full_trigger.get("dampenings") or ():
                if not dampening:
                    continue
                writes.append(
                    self._reporter.guard(
                        self._client.create_dampening(trigger_id, dampening),
                        "Error creating dampening.",
                        on_error,
                    )
                )
            writes.extend(self._condition_writes(trigger_id, full_trigger.get("conditions"), on_error))
            return list(await asyncio.gather(*writes))

    async def update(
        self,
        full_trigger: Mapping[str, Any],
        on_error: ErrorCallback | None = None,
        backup: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        """Write back the parts of ``full_trigger`` that changed since ``backup``.

        The trigger body and each dampening are only written when they differ
        from their backup counterpart. Conditions are always written again.
        """

        trigger = full_trigger.get("trigger")
        if not trigger or not trigger.get("id"):
            raise ValueError("Full trigger has no identified trigger body")
        backup = backup or {}
        trigger_id = trigger["id"]

        with operation_scope("trigger.update"):
            writes: list[Awaitable[Any]] = [
                self._save_trigger(trigger, backup.get("trigger"), on_error)
            ]

            previous_dampenings = backup.get("dampenings") or []
            for index, dampening in enumerate(full_trigger.get("dampenings") or ()):
                previous = previous_dampenings[index] if index < len(previous_dampenings) else None
                if not dampening or dampening == previous:
                    continue
                writes.append(
                    self._reporter.guard(
                        self._client.update_dampening(
                            trigger_id, dampening.get("dampeningId"), dampening
                        ),
                        "Error saving dampening.",
                        on_error,
                    )
                )

            writes.extend(self._condition_writes(trigger_id, full_trigger.get("conditions"), on_error))
            return list(await asyncio.gather(*writes))

    async def delete(self, trigger_id: str) -> None:
        with operation_scope("trigger.delete"):
            await self._client.delete_trigger(trigger_id)
            logger.info("Trigger deleted", extra={"trigger_id": trigger_id})

    async def _save_trigger(
        self,
        trigger: Mapping[str, Any],
        previous: Mapping[str, Any] | None,
        on_error: ErrorCallback | None,
    ) -> Any:
        recipient = primary_email(trigger)
        if recipient:
            try:
                await self._actions.ensure(recipient)
            except REPORTABLE_ERRORS as exc:
                await self._reporter.report(exc, "Error saving email action.", on_error)
                return None

        if trigger == previous:
            logger.debug("Trigger unchanged, skipping update", extra={"trigger_id": trigger.get("id")})
            return None
        return await self._reporter.guard(
            self._client.update_trigger(trigger.get("id"), trigger),
            "Error saving trigger.",
            on_error,
        )

    def _condition_writes(
        self,
        trigger_id: str,
        conditions: Iterable[Mapping[str, Any] | None] | None,
        on_error: ErrorCallback | None,
    ) -> list[Awaitable[Any]]:
        firing, autoresolve = partition_conditions(conditions)
        writes: list[Awaitable[Any]] = []
        for mode, batch in ((TriggerMode.FIRING, firing), (TriggerMode.AUTORESOLVE, autoresolve)):
            if not batch:
                continue
            writes.append(
                self._reporter.guard(
                    self._client.set_conditions(trigger_id, mode.value, batch),
                    _CONDITION_ERRORS[mode],
                    on_error,
                )
            )
        return writes


__all__ = ["TriggerAggregator", "partition_conditions", "primary_email"]
