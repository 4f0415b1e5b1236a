from __future__ import annotations

import asyncio

import pytest

from libs.alerts_console.config import Settings, get_settings
from libs.alerts_console.manager import AlertsManager

API = "http://alerts.test/hawkular/alerts"


@pytest.fixture()
def settings() -> Settings:
    return Settings(base_url=API, timeout=2.0, service_name="alerts-console-test")


def test_settings_read_prefixed_environment(monkeypatch) -> None:
    monkeypatch.setenv("ALERTS_CONSOLE_BASE_URL", "http://hawkular:8080/hawkular/alerts")
    monkeypatch.setenv("ALERTS_CONSOLE_TIMEOUT", "12.5")
    get_settings.cache_clear()
    try:
        settings = get_settings()
    finally:
        get_settings.cache_clear()

    assert settings.base_url == "http://hawkular:8080/hawkular/alerts"
    assert settings.timeout == 12.5
    assert settings.service_name == "alerts-console"


def test_round_trip_through_the_manager(fake_api, settings) -> None:
    async def run():
        async with AlertsManager.from_settings(settings, transport=fake_api.transport()) as manager:
            await manager.create_trigger(
                {
                    "trigger": {"id": "latency", "name": "Latency", "actions": {"email": ["sre@example.com"]}},
                    "dampenings": [{"triggerMode": "FIRING", "type": "STRICT", "evalTrueSetting": 3}],
                    "conditions": [{"type": "THRESHOLD", "dataId": "latency", "operator": "GT", "threshold": 250}],
                }
            )
            await manager.add_email_action("sre@example.com")
            exists = await manager.exist_trigger("latency")
            full = await manager.get_trigger("latency")
            conditions = await manager.get_trigger_conditions("latency")
            triggers = await manager.query_triggers()
            await manager.delete_trigger("latency")
            gone = await manager.exist_trigger("latency")
            return exists, full, conditions, triggers, gone

    exists, full, conditions, triggers, gone = asyncio.run(run())

    assert exists is True
    assert gone is False
    assert full["trigger"]["name"] == "Latency"
    assert full["dampenings"][0]["evalTrueSetting"] == 3
    assert conditions == [
        {"type": "THRESHOLD", "dataId": "latency", "operator": "GT", "threshold": 250, "triggerMode": "FIRING"}
    ]
    assert [trigger["id"] for trigger in triggers["trigger_list"]] == ["latency"]
    assert fake_api.actions[("email", "sre@example.com")]["to"] == "sre@example.com"


def test_update_through_the_manager_reports_errors(fake_api, settings) -> None:
    fake_api.triggers["disk"] = {"id": "disk", "name": "Disk"}
    fake_api.fail("PUT", "/triggers/disk/conditions/FIRING", status=400)
    reported: list[str] = []

    async def on_error(error, message) -> None:
        reported.append(message)

    async def run() -> None:
        async with AlertsManager.from_settings(settings, transport=fake_api.transport()) as manager:
            backup = await manager.get_trigger("disk")
            edited = {"trigger": dict(backup["trigger"], name="Disk usage"), "conditions": [{"type": "X"}]}
            await manager.update_trigger(edited, on_error, backup)

    asyncio.run(run())

    assert reported == ["Error creating firing conditions."]
    assert fake_api.triggers["disk"]["name"] == "Disk usage"


def test_alert_operations_through_the_manager(fake_api, settings) -> None:
    fake_api.alerts = [{"id": "a1", "ctime": 10}]
    fake_api.action_history = [{"actionId": "sre@example.com"}]

    async def run():
        async with AlertsManager.from_settings(settings, transport=fake_api.transport()) as manager:
            alerts = await manager.query_alerts({"alertIds": "a1"})
            alert = await manager.get_alert("a1")
            history = await manager.query_actions_history()
            await manager.ack_alerts({"alert_ids": "a1", "actor": "jdoe"})
            await manager.resolve_alerts({"alert_ids": "a1", "actor": "jdoe", "notes": "fixed"})
            await manager.add_note({"alert_id": "a1", "user": "jdoe", "text": "done"})
            await manager.update_action("sre@example.com")
            return alerts, alert, history

    alerts, alert, history = asyncio.run(run())

    assert alerts["alert_list"] == [{"id": "a1", "ctime": 10, "end": 10}]
    assert alert["id"] == "a1"
    assert history["action_list"] == [{"actionId": "sre@example.com"}]
    assert [call.path for call in fake_api.calls if call.method == "PUT"] == [
        "/alerts/ack",
        "/alerts/resolve",
        "/alerts/note/a1",
        "/actions",
    ]
    assert fake_api.calls_for("PUT", "/alerts/resolve")[0].params["resolvedNotes"] == "fixed"
