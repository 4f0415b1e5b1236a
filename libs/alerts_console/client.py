"""Asynchronous HTTP client for the alerting REST API."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence
from urllib.parse import quote

import httpx

from libs.observability.metrics import ApiCallMetrics, setup_metrics


class AlertingApiError(RuntimeError):
    """Raised when the alerting API answers with an error response."""

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        self.message = message or "Alerting API request failed"
        super().__init__(self.message)

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@dataclass(slots=True)
class Page:
    """A list response together with its pagination metadata."""

    items: list[Any]
    headers: dict[str, Any] = field(default_factory=dict)


def _segment(value: Any) -> str:
    return quote(str(value), safe="@")


def pagination_headers(response: httpx.Response) -> dict[str, Any]:
    """Extract the pagination metadata the API ships in response headers."""

    total = response.headers.get("X-Total-Count")
    try:
        total_count = int(total) if total is not None else None
    except ValueError:
        total_count = None
    return {"total_count": total_count, "links": dict(response.links)}


class AlertingApiClient:
    """Thin wrapper around the Alert, Trigger, Dampening, Conditions and Action endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
        metrics: ApiCallMetrics | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client_owned = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self._metrics = metrics or setup_metrics()

    @property
    def base_url(self) -> str:
        return self._base_url

    async def aclose(self) -> None:
        if self._client_owned:
            await self._client.aclose()

    async def __aenter__(self) -> "AlertingApiClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # Alerts

    async def query_alerts(self, params: Mapping[str, Any] | None = None) -> Page:
        return await self._list("alert", "/alerts", params=params)

    async def get_alert(self, alert_id: str) -> dict[str, Any]:
        return await self._request("alert", "GET", f"/alerts/alert/{_segment(alert_id)}")

    async def ack_alerts(self, params: Mapping[str, Any]) -> Any:
        return await self._request("alert", "PUT", "/alerts/ack", params=params)

    async def resolve_alerts(self, params: Mapping[str, Any]) -> Any:
        return await self._request("alert", "PUT", "/alerts/resolve", params=params)

    async def add_note(self, alert_id: str, params: Mapping[str, Any]) -> Any:
        return await self._request(
            "alert", "PUT", f"/alerts/note/{_segment(alert_id)}", params=params
        )

    # Triggers

    async def query_triggers(self, params: Mapping[str, Any] | None = None) -> Page:
        return await self._list("trigger", "/triggers", params=params)

    async def get_trigger(self, trigger_id: str) -> dict[str, Any]:
        return await self._request("trigger", "GET", f"/triggers/{_segment(trigger_id)}")

    async def create_trigger(self, trigger: Mapping[str, Any]) -> dict[str, Any]:
        return await self._request("trigger", "POST", "/triggers", json=dict(trigger))

    async def update_trigger(self, trigger_id: str, trigger: Mapping[str, Any]) -> Any:
        return await self._request(
            "trigger", "PUT", f"/triggers/{_segment(trigger_id)}", json=dict(trigger)
        )

    async def delete_trigger(self, trigger_id: str) -> None:
        await self._request("trigger", "DELETE", f"/triggers/{_segment(trigger_id)}")

    # Dampenings

    async def query_dampenings(self, trigger_id: str) -> list[dict[str, Any]]:
        page = await self._list("dampening", f"/triggers/{_segment(trigger_id)}/dampenings")
        return page.items

    async def create_dampening(self, trigger_id: str, dampening: Mapping[str, Any]) -> Any:
        return await self._request(
            "dampening",
            "POST",
            f"/triggers/{_segment(trigger_id)}/dampenings",
            json=dict(dampening),
        )

    async def update_dampening(
        self, trigger_id: str, dampening_id: str, dampening: Mapping[str, Any]
    ) -> Any:
        return await self._request(
            "dampening",
            "PUT",
            f"/triggers/{_segment(trigger_id)}/dampenings/{_segment(dampening_id)}",
            json=dict(dampening),
        )

    # Conditions

    async def query_conditions(self, trigger_id: str) -> list[dict[str, Any]]:
        page = await self._list("conditions", f"/triggers/{_segment(trigger_id)}/conditions")
        return page.items

    async def set_conditions(
        self, trigger_id: str, trigger_mode: str, conditions: Sequence[Mapping[str, Any]]
    ) -> Any:
        """Replace every condition of ``trigger_mode`` with ``conditions``."""

        return await self._request(
            "conditions",
            "PUT",
            f"/triggers/{_segment(trigger_id)}/conditions/{_segment(trigger_mode)}",
            json=[dict(condition) for condition in conditions],
        )

    # Actions

    async def get_action(self, plugin_id: str, action_id: str) -> dict[str, Any]:
        return await self._request(
            "action", "GET", f"/actions/{_segment(plugin_id)}/{_segment(action_id)}"
        )

    async def create_action(self, action: Mapping[str, Any]) -> Any:
        return await self._request("action", "POST", "/actions", json=dict(action))

    async def update_action(self, action: Mapping[str, Any]) -> Any:
        return await self._request("action", "PUT", "/actions", json=dict(action))

    async def query_action_history(self, params: Mapping[str, Any] | None = None) -> Page:
        return await self._list("action", "/actions/history", params=params)

    # Plumbing

    async def _list(
        self, resource: str, path: str, *, params: Mapping[str, Any] | None = None
    ) -> Page:
        response = await self._send(resource, "GET", path, params=params)
        payload = self._parse_response(response)
        if payload is None:
            payload = []
        if not isinstance(payload, list):
            raise AlertingApiError(response.status_code, f"{resource} list response must be a JSON array")
        return Page(items=payload, headers=pagination_headers(response))

    async def _request(
        self,
        resource: str,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        response = await self._send(resource, method, path, params=params, json=json)
        return self._parse_response(response)

    async def _send(
        self,
        resource: str,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        with self._metrics.track(resource, method) as outcome:
            response = await self._client.request(
                method,
                path,
                params=_encode_params(params),
                json=json,
            )
            outcome["status"] = str(response.status_code)
        return response

    @staticmethod
    def _parse_response(response: httpx.Response) -> Any:
        if response.status_code >= 400:
            raise AlertingApiError(response.status_code, AlertingApiClient._extract_message(response))
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise AlertingApiError(response.status_code, f"Invalid JSON payload: {exc}") from exc

    @staticmethod
    def _extract_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or ""
        if not isinstance(data, dict):
            return response.text or ""
        return (
            data.get("detail")
            or data.get("message")
            or data.get("errorMsg")
            or response.text
            or ""
        )


def _encode_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    encoded: dict[str, Any] = {}
    for key, value in params.items():
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = value
    return encoded


__all__ = ["AlertingApiClient", "AlertingApiError", "Page", "pagination_headers"]
