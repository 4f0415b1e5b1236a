"""Plain data shapes handed back to the console UI."""

from __future__ import annotations

from typing import Any, TypedDict


class PageHeaders(TypedDict):
    total_count: int | None
    links: dict[str, Any]


class FullTrigger(TypedDict, total=False):
    """A trigger with its dampenings and conditions attached."""

    trigger: dict[str, Any]
    dampenings: list[dict[str, Any] | None]
    conditions: list[dict[str, Any] | None]


class AlertQueryResult(TypedDict):
    alert_list: list[dict[str, Any]]
    headers: PageHeaders | None


class ActionHistoryResult(TypedDict):
    action_list: list[dict[str, Any]]
    headers: PageHeaders | None


class TriggerQueryResult(TypedDict):
    trigger_list: list[dict[str, Any]]
    headers: PageHeaders | None


__all__ = [
    "ActionHistoryResult",
    "AlertQueryResult",
    "FullTrigger",
    "PageHeaders",
    "TriggerQueryResult",
]
