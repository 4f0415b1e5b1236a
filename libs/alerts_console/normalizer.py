"""Turn raw alert payloads into the fields the console views render."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, MutableSequence

Clock = Callable[[], datetime]

EVENT_TRIGGER_TYPE = "Event"


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _first_result(eval_set: Any) -> dict[str, Any] | None:
    if isinstance(eval_set, list) and eval_set and isinstance(eval_set[0], dict):
        return eval_set[0]
    return None


def evaluation_value(result: dict[str, Any]) -> float | None:
    """Return the number an evaluation contributes to the alert average.

    Rate conditions report ``rate``, threshold-like conditions ``value`` and
    compare conditions ``value1``; the first one present wins. Availability
    evaluations carry a state such as ``"DOWN"`` and contribute nothing.
    """

    for key in ("rate", "value", "value1"):
        value = result.get(key)
        if value is not None:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return None
            return value
    return None


class ResponseNormalizer:
    """Derive averages, timestamps and display flags on alert dictionaries."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or utc_now

    def normalize_alerts(self, alerts: MutableSequence[dict[str, Any]]) -> MutableSequence[dict[str, Any]]:
        now = self._clock()
        for alert in alerts:
            self.normalize_alert(alert, now=now)
        return alerts

    def normalize_alert(self, alert: dict[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
        now = now or self._clock()
        eval_sets = alert.get("evalSets")

        first = _first_result(eval_sets[0]) if eval_sets else None
        if first is not None:
            condition = first.get("condition") or {}
            alert["dataId"] = condition.get("dataId")

        alert["end"] = alert.get("ctime")

        if not eval_sets:
            return alert

        context = alert.get("context") or {}
        if context.get("triggerType") == EVENT_TRIGGER_TYPE:
            self._attach_event_message(alert, first)
        else:
            self._summarize_evaluations(alert, eval_sets, now)
        return alert

    def _summarize_evaluations(
        self, alert: dict[str, Any], eval_sets: list[Any], now: datetime
    ) -> None:
        total = 0.0
        count = 0
        seen = False
        for eval_set in eval_sets:
            result = _first_result(eval_set)
            if result is None:
                continue
            seen = True
            condition = result.get("condition") or {}

            if not alert.get("start") and result.get("dataTimestamp"):
                alert["start"] = result["dataTimestamp"]
            if not alert.get("threshold") and condition.get("threshold"):
                alert["threshold"] = condition["threshold"]
            if not alert.get("type") and condition.get("type"):
                alert["type"] = condition["type"]

            value = evaluation_value(result)
            if value is not None:
                total += value
                count += 1

        if not seen:
            return
        self._flag_recency(alert, now)
        if count:
            alert["avg"] = total / count
        if alert.get("end") is not None and alert.get("start") is not None:
            alert["durationTime"] = alert["end"] - alert["start"]

    @staticmethod
    def _flag_recency(alert: dict[str, Any], now: datetime) -> None:
        end = alert.get("end")
        if end is None:
            return
        ended = datetime.fromtimestamp(end / 1000, tz=now.tzinfo or timezone.utc)
        if ended.year == now.year:
            alert["isThisYear"] = True
            if ended.date() == now.date():
                alert["isToday"] = True

    @staticmethod
    def _attach_event_message(alert: dict[str, Any], first: dict[str, Any] | None) -> None:
        if first is None:
            return
        event = first.get("value")
        if not isinstance(event, dict):
            return
        alert["message"] = (event.get("context") or {}).get("Message")


__all__ = ["Clock", "ResponseNormalizer", "evaluation_value", "utc_now"]
