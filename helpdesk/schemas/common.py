from __future__ import annotations

import json
from datetime import datetime
from enum import Enum
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, PlainSerializer, model_validator

from helpdesk.core.errors import ValidationError
from helpdesk.utils.time import ensure_utc, to_display


class LenientEnum(str, Enum):
    """String enum that accepts any casing of its values plus a few legacy aliases."""

    @classmethod
    def aliases(cls) -> dict[str, str]:
        return {}

    @classmethod
    def coerce(cls, value: Any) -> Any:
        if isinstance(value, cls) or not isinstance(value, str):
            return value
        key = value.strip().lower()
        key = cls.aliases().get(key, key)
        for member in cls:
            if member.value.lower() == key:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise ValueError(f"'{value}' is not one of: {allowed}")

    @classmethod
    def filter_value(cls, value: str | None, *, field: str = "status") -> str | None:
        """Stored spelling for a query filter, so reads match what writes normalised."""
        if not value:
            return None
        try:
            return cls.coerce(value).value
        except ValueError as exc:
            raise ValidationError(f"Invalid value for {field}: {exc}.", fields=[field]) from exc


class Rights(LenientEnum):
    VIEW = "View"
    FORWARD = "Forward"
    POWER = "Power"


class Priority(LenientEnum):
    VERY_URGENT = "Very Urgent"
    NORMAL = "Normal"
    URGENT = "Urgent"


class TicketStatus(LenientEnum):
    PENDING = "pending"
    ACTIVE = "Active"
    ASSIGN = "Assign"
    WORKING = "Working"
    COMPLETED = "Completed"
    REJECTED = "rejected"
    TRAINING = "training"
    RESOLVED = "resolved"

    @classmethod
    def aliases(cls) -> dict[str, str]:
        return {"complete": "completed"}


class AssignmentStatus(LenientEnum):
    PENDING = "pending"
    WORKING = "Working"
    COMPLETED = "Completed"

    @classmethod
    def aliases(cls) -> dict[str, str]:
        return {"complete": "completed"}


# Ticket statuses meaning "handed to an assignee".
DELEGATED_STATUSES = (TicketStatus.ASSIGN.value,)
# Ticket statuses counted per type on the summary dashboards.
OPEN_STATUSES = (TicketStatus.ACTIVE.value, TicketStatus.PENDING.value)


def parse_id_list(value: Any) -> list[str]:
    """Normalise a list of user ids given either natively or as a JSON-encoded array."""
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError("must be a JSON array of user ids") from exc
    if not isinstance(value, (list, tuple)):
        raise ValueError("must be a list of user ids")

    ids: list[str] = []
    for item in value:
        if item is None or not str(item).strip():
            raise ValueError("user ids must be non-empty")
        uid = str(item).strip()
        if uid not in ids:
            ids.append(uid)
    if not ids:
        raise ValueError("must contain at least one user id")
    return ids


def _render_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return to_display(value).isoformat()


IdList = Annotated[list[str], BeforeValidator(parse_id_list)]
InstantIn = Annotated[datetime, AfterValidator(ensure_utc)]
InstantOut = Annotated[datetime, PlainSerializer(_render_datetime, return_type=str | None, when_used="json")]
RightsField = Annotated[Rights, BeforeValidator(Rights.coerce)]
PriorityField = Annotated[Priority, BeforeValidator(Priority.coerce)]
TicketStatusField = Annotated[TicketStatus, BeforeValidator(TicketStatus.coerce)]
AssignmentStatusField = Annotated[AssignmentStatus, BeforeValidator(AssignmentStatus.coerce)]


class Payload(BaseModel):
    """Inbound payload; blank form values count as absent."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and not (isinstance(v, str) and not v.strip())}
        return data


class ReadModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class UserBrief(ReadModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    role: str | None = None
    department: str | None = None
