"""In-memory fake of the alerting REST API and shared fixtures."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterator

import httpx
import pytest
from prometheus_client import CollectorRegistry

from libs.alerts_console.client import AlertingApiClient
from libs.observability.metrics import setup_metrics

BASE_URL = "http://alerts.test/hawkular/alerts"
_PREFIX = "/hawkular/alerts"

FROZEN_NOW = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


def frozen_clock() -> datetime:
    return FROZEN_NOW


@dataclass
class Call:
    method: str
    path: str
    params: dict[str, str]
    body: Any


class FakeAlertingApi:
    """Stateful stand-in for the alerting service, served through ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.alerts: list[dict[str, Any]] = []
        self.action_history: list[dict[str, Any]] = []
        self.triggers: dict[str, dict[str, Any]] = {}
        self.dampenings: dict[str, list[dict[str, Any]]] = {}
        self.conditions: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self.actions: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[Call] = []
        self.failures: dict[tuple[str, str], int] = {}
        self._next_id = 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, method: str, path: str, status: int = 500) -> None:
        self.failures[(method, path)] = status

    def calls_for(self, method: str, path: str | None = None) -> list[Call]:
        return [
            call
            for call in self.calls
            if call.method == method and (path is None or call.path == path)
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith(_PREFIX):
            path = path[len(_PREFIX):]
        body = json.loads(request.content) if request.content else None
        self.calls.append(Call(request.method, path, dict(request.url.params), body))

        forced = self.failures.get((request.method, path))
        if forced is not None:
            return httpx.Response(forced, json={"errorMsg": "forced failure"})

        parts = [part for part in path.split("/") if part]
        if parts and parts[0] == "alerts":
            return self._alerts(request.method, parts[1:])
        if parts and parts[0] == "triggers":
            return self._triggers(request.method, parts[1:], body)
        if parts and parts[0] == "actions":
            return self._actions(request.method, parts[1:], body)
        return httpx.Response(404, json={"errorMsg": "unknown resource"})

    def _alerts(self, method: str, parts: list[str]) -> httpx.Response:
        if method == "GET" and not parts:
            return httpx.Response(
                200,
                json=self.alerts,
                headers={
                    "X-Total-Count": str(len(self.alerts)),
                    "Link": f'<{BASE_URL}/alerts?page=1>; rel="next"',
                },
            )
        if method == "GET" and parts[0] == "alert":
            for alert in self.alerts:
                if alert["id"] == parts[1]:
                    return httpx.Response(200, json=alert)
            return httpx.Response(404, json={"errorMsg": "alert not found"})
        if method == "PUT" and parts[0] in {"ack", "resolve", "note"}:
            return httpx.Response(200)
        return httpx.Response(405)

    def _triggers(self, method: str, parts: list[str], body: Any) -> httpx.Response:
        if not parts:
            if method == "GET":
                triggers = list(self.triggers.values())
                return httpx.Response(200, json=triggers, headers={"X-Total-Count": str(len(triggers))})
            if method == "POST":
                trigger = dict(body)
                trigger.setdefault("id", f"trigger-{self._next_id}")
                self._next_id += 1
                self.triggers[trigger["id"]] = trigger
                return httpx.Response(200, json=trigger)
            return httpx.Response(405)

        trigger_id = parts[0]
        if trigger_id not in self.triggers:
            return httpx.Response(404, json={"errorMsg": f"Trigger {trigger_id} not found"})

        if len(parts) == 1:
            if method == "GET":
                return httpx.Response(200, json=self.triggers[trigger_id])
            if method == "PUT":
                self.triggers[trigger_id] = body
                return httpx.Response(200)
            if method == "DELETE":
                del self.triggers[trigger_id]
                self.dampenings.pop(trigger_id, None)
                self.conditions.pop(trigger_id, None)
                return httpx.Response(200)
            return httpx.Response(405)

        if parts[1] == "dampenings":
            dampenings = self.dampenings.setdefault(trigger_id, [])
            if method == "GET":
                return httpx.Response(200, json=dampenings)
            if method == "POST":
                dampening = dict(body)
                dampening.setdefault("dampeningId", f"{trigger_id}-{dampening.get('triggerMode', 'FIRING')}")
                dampenings.append(dampening)
                return httpx.Response(200, json=dampening)
            if method == "PUT":
                for index, existing in enumerate(dampenings):
                    if existing.get("dampeningId") == parts[2]:
                        dampenings[index] = body
                        return httpx.Response(200, json=body)
                return httpx.Response(404, json={"errorMsg": "dampening not found"})

        if parts[1] == "conditions":
            by_mode = self.conditions.setdefault(trigger_id, {})
            if method == "GET":
                flattened = [
                    dict(condition, triggerMode=mode)
                    for mode, conditions in by_mode.items()
                    for condition in conditions
                ]
                return httpx.Response(200, json=flattened)
            if method == "PUT":
                by_mode[parts[2]] = body
                return httpx.Response(200, json=body)

        return httpx.Response(405)

    def _actions(self, method: str, parts: list[str], body: Any) -> httpx.Response:
        if parts == ["history"] and method == "GET":
            return httpx.Response(
                200,
                json=self.action_history,
                headers={"X-Total-Count": str(len(self.action_history))},
            )
        if method == "GET" and len(parts) == 2:
            action = self.actions.get((parts[0], parts[1]))
            if action is None:
                return httpx.Response(404, json={"errorMsg": "action not found"})
            return httpx.Response(200, json=action)
        if method in {"POST", "PUT"} and not parts:
            key = (body["actionPlugin"], body["actionId"])
            if method == "POST" and key in self.actions:
                return httpx.Response(409, json={"errorMsg": "action exists"})
            self.actions[key] = body
            return httpx.Response(200, json=body)
        return httpx.Response(405)


@pytest.fixture()
def fake_api() -> FakeAlertingApi:
    return FakeAlertingApi()


@pytest.fixture()
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture()
def api_client(fake_api: FakeAlertingApi, registry: CollectorRegistry) -> Iterator[AlertingApiClient]:
    client = AlertingApiClient(
        BASE_URL,
        transport=fake_api.transport(),
        metrics=setup_metrics(registry),
    )
    yield client
    asyncio.run(client.aclose())


@pytest.fixture()
def frozen_now() -> datetime:
    return FROZEN_NOW


@pytest.fixture()
def clock():
    return frozen_clock
