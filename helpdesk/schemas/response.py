from __future__ import annotations

from pydantic import Field

from .common import (
    InstantIn,
    InstantOut,
    Payload,
    PriorityField,
    ReadModel,
    RightsField,
    TicketStatusField,
    UserBrief,
)
from .ticket import TicketRead


class ResponseCreate(Payload):
    ticket_id: str
    user_id: str
    response_person_id: str
    type: str = Field(min_length=1, max_length=64)
    description: str = Field(min_length=1)
    priority: PriorityField
    deadline: InstantIn | None = None
    rights: RightsField | None = None


class ResponseStatusUpdate(Payload):
    status: TicketStatusField


class SatisfactionCreate(Payload):
    ticket_id: str
    user_id: str
    response_person_id: str
    type: str = Field(min_length=1, max_length=64)
    description: str = Field(min_length=1)
    priority: PriorityField


class SatisfactionUpdate(Payload):
    """Partial update; absent fields keep their stored value."""

    type: str | None = Field(default=None, max_length=64)
    description: str | None = None
    priority: PriorityField | None = None
    status: TicketStatusField | None = None


class ResponseRead(ReadModel):
    id: str
    ticket_id: str
    user_id: str
    response_person_id: str
    type: str
    description: str
    priority: str
    deadline: InstantOut | None = None
    voice_note_url: str | None = None
    video_url: str | None = None
    image_url: str | None = None
    status: str
    rights: str | None = None
    created_at: InstantOut


class SatisfactionRead(ReadModel):
    id: str
    ticket_id: str
    user_id: str
    response_person_id: str
    type: str
    description: str
    priority: str
    voice_note_url: str | None = None
    video_url: str | None = None
    image_url: str | None = None
    status: str
    created_at: InstantOut


class ResponseWithDetails(ResponseRead):
    user: UserBrief | None = None
    responder: UserBrief | None = None
    ticket: TicketRead | None = None


class SatisfactionWithDetails(SatisfactionRead):
    user: UserBrief | None = None
    responder: UserBrief | None = None
    ticket: TicketRead | None = None
