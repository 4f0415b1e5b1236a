"""Read paths and batch alert operations of the console."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Mapping

import httpx

from schemas.alerting import (
    ActionCriteria,
    AlertCriteria,
    AlertNote,
    AlertStatusChange,
    TriggerCriteria,
)

from .client import AlertingApiClient, AlertingApiError, Page
from .models import ActionHistoryResult, AlertQueryResult, TriggerQueryResult
from .normalizer import ResponseNormalizer

logger = logging.getLogger(__name__)

_QUERY_ERRORS = (AlertingApiError, httpx.HTTPError)


def _coerce(model: type, criteria: Any) -> Any:
    if criteria is None or isinstance(criteria, model):
        return criteria
    if isinstance(criteria, Mapping):
        return model.model_validate(dict(criteria))
    raise TypeError(f"Unsupported criteria type: {type(criteria).__name__}")


class AlertsGateway:
    """Query alerts, triggers and action history; acknowledge, resolve and annotate alerts.

    Query failures are logged and swallowed: the console renders an empty
    list rather than an error page.
    """

    def __init__(
        self,
        client: AlertingApiClient,
        *,
        normalizer: ResponseNormalizer | None = None,
    ) -> None:
        self._client = client
        self._normalizer = normalizer or ResponseNormalizer()

    async def query_alerts(
        self, criteria: AlertCriteria | Mapping[str, Any] | None = None
    ) -> AlertQueryResult:
        criteria = _coerce(AlertCriteria, criteria)
        params = criteria.to_query_params() if criteria else {}
        page = await self._safe_list(self._client.query_alerts(params))
        if page is None:
            return {"alert_list": [], "headers": None}
        self._normalizer.normalize_alerts(page.items)
        return {"alert_list": page.items, "headers": page.headers}

    async def get_alert(self, alert_id: str) -> dict[str, Any]:
        return await self._client.get_alert(alert_id)

    async def query_action_history(
        self, criteria: ActionCriteria | Mapping[str, Any] | None = None
    ) -> ActionHistoryResult:
        criteria = _coerce(ActionCriteria, criteria)
        if criteria is None:
            criteria = ActionCriteria(thin=True)
        page = await self._safe_list(self._client.query_action_history(criteria.to_query_params()))
        if page is None:
            return {"action_list": [], "headers": None}
        return {"action_list": page.items, "headers": page.headers}

    async def query_triggers(
        self, criteria: TriggerCriteria | Mapping[str, Any] | None = None
    ) -> TriggerQueryResult:
        criteria = _coerce(TriggerCriteria, criteria)
        params = criteria.to_query_params() if criteria else {}
        page = await self._safe_list(self._client.query_triggers(params))
        if page is None:
            return {"trigger_list": [], "headers": None}
        return {"trigger_list": page.items, "headers": page.headers}

    async def ack_alerts(self, change: AlertStatusChange | Mapping[str, Any]) -> Any:
        change = _coerce(AlertStatusChange, change)
        return await self._client.ack_alerts(
            change.to_query_params(actor_param="ackBy", notes_param="ackNotes")
        )

    async def resolve_alerts(self, change: AlertStatusChange | Mapping[str, Any]) -> Any:
        change = _coerce(AlertStatusChange, change)
        return await self._client.resolve_alerts(
            change.to_query_params(actor_param="resolvedBy", notes_param="resolvedNotes")
        )

    async def add_note(self, note: AlertNote | Mapping[str, Any]) -> Any:
        note = _coerce(AlertNote, note)
        return await self._client.add_note(note.alert_id, {"user": note.user, "text": note.text})

    async def _safe_list(self, request: Awaitable[Page]) -> Page | None:
        try:
            return await request
        except _QUERY_ERRORS as exc:
            logger.debug("querying data error", extra={"error": str(exc)})
            return None


__all__ = ["AlertsGateway"]
