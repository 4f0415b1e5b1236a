"""Pydantic schemas for alerting API query criteria and batch payloads."""
from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AlertType(str, Enum):
    AVAILABILITY = "AVAILABILITY"
    THRESHOLD = "THRESHOLD"
    RANGE = "RANGE"


class TriggerMode(str, Enum):
    FIRING = "FIRING"
    AUTORESOLVE = "AUTORESOLVE"


class Match(str, Enum):
    ALL = "ALL"
    ANY = "ANY"


class _Criteria(BaseModel):
    """Base class turning optional criteria fields into query parameters.

    Subclasses declare ``_PARAMS``, an ordered table of
    ``(field name, query parameter name)``. Only fields holding a truthy value
    are forwarded, so ``current_page=0`` means "no page filter".
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    _PARAMS: ClassVar[tuple[tuple[str, str], ...]] = ()

    def to_query_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for field_name, param in self._PARAMS:
            value = getattr(self, field_name)
            if value:
                params[param] = value
        return params


class AlertCriteria(_Criteria):
    start_time: int | None = Field(default=None, description="Lower bound of ctime in ms")
    end_time: int | None = Field(default=None, description="Upper bound of ctime in ms")
    alert_ids: str | None = Field(default=None, description="Comma separated alert ids")
    trigger_ids: str | None = Field(default=None, description="Comma separated trigger ids")
    statuses: str | None = None
    severities: str | None = None
    tags: str | None = None
    thin: bool | None = None
    current_page: int | None = Field(default=None, ge=0)
    per_page: int | None = Field(default=None, ge=0)
    sort: str | None = None
    order: str | None = None

    _PARAMS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("start_time", "startTime"),
        ("end_time", "endTime"),
        ("alert_ids", "alertIds"),
        ("trigger_ids", "triggerIds"),
        ("statuses", "statuses"),
        ("severities", "severities"),
        ("tags", "tags"),
        ("thin", "thin"),
        ("current_page", "page"),
        ("per_page", "per_page"),
        ("sort", "sort"),
        ("order", "order"),
    )


class ActionCriteria(_Criteria):
    start_time: int | None = None
    end_time: int | None = None
    action_plugins: str | None = None
    action_ids: str | None = None
    alert_ids: str | None = None
    results: str | None = None
    thin: bool | None = None
    current_page: int | None = Field(default=None, ge=0)
    per_page: int | None = Field(default=None, ge=0)
    sort: str | None = None
    order: str | None = None

    _PARAMS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("alert_ids", "alertIds"),
        ("action_plugins", "actionPlugins"),
        ("action_ids", "actionIds"),
        ("results", "results"),
        ("start_time", "startTime"),
        ("end_time", "endTime"),
        ("current_page", "page"),
        ("per_page", "per_page"),
        ("sort", "sort"),
        ("order", "order"),
    )

    def to_query_params(self) -> dict[str, Any]:
        params = super().to_query_params()
        # thin is forwarded whenever it was set, including False
        if self.thin is not None:
            params["thin"] = self.thin
        return params


class TriggerCriteria(_Criteria):
    trigger_ids: str | None = None
    tags: str | None = None
    thin: bool | None = None
    current_page: int | None = Field(default=None, ge=0)
    per_page: int | None = Field(default=None, ge=0)
    sort: str | None = None
    order: str | None = None

    _PARAMS: ClassVar[tuple[tuple[str, str], ...]] = (
        ("trigger_ids", "triggerIds"),
        ("tags", "tags"),
        ("thin", "thin"),
        ("current_page", "page"),
        ("per_page", "per_page"),
        ("sort", "sort"),
        ("order", "order"),
    )


class AlertStatusChange(BaseModel):
    """Acknowledgement or resolution of a batch of alerts.

    Ids keep the order the caller gave them in; duplicates are dropped.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    alert_ids: list[str] = Field(..., min_length=1)
    actor: str = Field(..., min_length=1)
    notes: str | None = None

    @field_validator("alert_ids", mode="before")
    @classmethod
    def _split_ids(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("alert_ids")
    @classmethod
    def _dedupe_ids(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    def to_query_params(self, *, actor_param: str, notes_param: str) -> dict[str, str]:
        params = {
            "alertIds": ",".join(self.alert_ids),
            actor_param: self.actor,
        }
        if self.notes:
            params[notes_param] = self.notes
        return params


class AlertNote(BaseModel):
    """A note attached to a single alert."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    alert_id: str = Field(..., min_length=1)
    user: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


__all__ = [
    "ActionCriteria",
    "AlertCriteria",
    "AlertNote",
    "AlertStatusChange",
    "AlertType",
    "Match",
    "TriggerCriteria",
    "TriggerMode",
]
