"""Single entry point the console uses to talk to the alerting API."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from libs.observability.logging import configure_logging
from schemas.alerting import (
    ActionCriteria,
    AlertCriteria,
    AlertNote,
    AlertStatusChange,
    TriggerCriteria,
)

from .actions import EmailActionResolver
from .client import AlertingApiClient
from .config import Settings, get_settings
from .errors import ErrorCallback, ErrorReporter
from .gateway import AlertsGateway
from .models import ActionHistoryResult, AlertQueryResult, FullTrigger, TriggerQueryResult
from .normalizer import Clock, ResponseNormalizer, utc_now
from .triggers import TriggerAggregator

logger = logging.getLogger(__name__)


class AlertsManager:
    """Facade over the gateway, the trigger aggregator and the email action resolver."""

    def __init__(
        self,
        client: AlertingApiClient,
        *,
        reporter: ErrorReporter | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._client = client
        clock = clock or utc_now
        self.actions = EmailActionResolver(client, clock=clock)
        self.gateway = AlertsGateway(client, normalizer=ResponseNormalizer(clock))
        self.triggers = TriggerAggregator(
            client,
            actions=self.actions,
            reporter=reporter or ErrorReporter(),
            clock=clock,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "AlertsManager":
        settings = settings or get_settings()
        configure_logging(settings.service_name, settings.log_level.upper())
        client = AlertingApiClient(settings.base_url, timeout=settings.timeout, transport=transport)
        logger.info("Alerting API client ready", extra={"base_url": client.base_url})
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AlertsManager":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # Alerts

    async def query_alerts(
        self, criteria: AlertCriteria | Mapping[str, Any] | None = None
    ) -> AlertQueryResult:
        return await self.gateway.query_alerts(criteria)

    async def get_alert(self, alert_id: str) -> dict[str, Any]:
        return await self.gateway.get_alert(alert_id)

    async def query_actions_history(
        self, criteria: ActionCriteria | Mapping[str, Any] | None = None
    ) -> ActionHistoryResult:
        return await self.gateway.query_action_history(criteria)

    async def ack_alerts(self, change: AlertStatusChange | Mapping[str, Any]) -> Any:
        return await self.gateway.ack_alerts(change)

    async def resolve_alerts(self, change: AlertStatusChange | Mapping[str, Any]) -> Any:
        return await self.gateway.resolve_alerts(change)

    async def add_note(self, note: AlertNote | Mapping[str, Any]) -> Any:
        return await self.gateway.add_note(note)

    # Triggers

    async def exist_trigger(self, trigger_id: str) -> bool:
        return await self.triggers.exists(trigger_id)

    async def get_trigger(self, trigger_id: str) -> FullTrigger:
        return await self.triggers.fetch_full(trigger_id)

    async def query_triggers(
        self, criteria: TriggerCriteria | Mapping[str, Any] | None = None
    ) -> TriggerQueryResult:
        return await self.gateway.query_triggers(criteria)

    async def get_trigger_conditions(self, trigger_id: str) -> list[dict[str, Any]]:
        return await self.triggers.fetch_conditions(trigger_id)

    async def create_trigger(
        self, full_trigger: Mapping[str, Any], on_error: ErrorCallback | None = None
    ) -> list[Any]:
        return await self.triggers.create(full_trigger, on_error)

    async def update_trigger(
        self,
        full_trigger: Mapping[str, Any],
        on_error: ErrorCallback | None = None,
        backup: Mapping[str, Any] | None = None,
    ) -> list[Any]:
        return await self.triggers.update(full_trigger, on_error, backup)

    async def delete_trigger(self, trigger_id: str) -> None:
        await self.triggers.delete(trigger_id)

    # Actions

    async def add_email_action(self, email: str) -> Any:
        return await self.actions.ensure(email)

    async def update_action(self, email: str) -> Any:
        return await self.actions.replace(email)


__all__ = ["AlertsManager"]
