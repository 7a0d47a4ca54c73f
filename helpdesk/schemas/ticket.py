from __future__ import annotations

from pydantic import BaseModel, Field

from .common import (
    IdList,
    InstantIn,
    InstantOut,
    Payload,
    PriorityField,
    ReadModel,
    RightsField,
    TicketStatusField,
    UserBrief,
)


class TicketCreate(Payload):
    user_id: str
    recipient_ids: IdList
    type: str = Field(min_length=1, max_length=64)
    description: str | None = None
    priority: PriorityField
    deadline: InstantIn | None = None
    rights: RightsField | None = None


class TicketForward(Payload):
    ticket_id: str
    recipient_id: str
    rights: RightsField


class TicketStatusUpdate(Payload):
    ticket_id: str
    user_id: str
    recipient_id: str
    status: TicketStatusField


class TicketRead(ReadModel):
    id: str
    user_id: str
    recipient_ids: list[str]
    type: str
    description: str | None = None
    priority: str
    deadline: InstantOut | None = None
    voice_note_url: str | None = None
    video_url: str | None = None
    image_url: str | None = None
    status: str
    rights: str | None = None
    created_at: InstantOut
    updated_at: InstantOut


class TicketWithSender(BaseModel):
    ticket: TicketRead
    sender: UserBrief | None = None


class TicketWithPeople(TicketRead):
    creator: UserBrief | None = None
    recipients: list[UserBrief | None] = Field(default_factory=list)


class TicketTotals(BaseModel):
    """Dashboard block shared by the creator and recipient summaries."""

    total_tickets: int
    tickets: list[TicketRead]
    type_counts: dict[str, int]
    other_status_count: int
    other_status_tickets: list[TicketRead]


class CategorizedTickets(BaseModel):
    completed: list[TicketWithPeople] = Field(default_factory=list)
    pending: list[TicketWithPeople] = Field(default_factory=list)
    active: list[TicketWithPeople] = Field(default_factory=list)
    rejection: list[TicketWithPeople] = Field(default_factory=list)
    training: list[TicketWithPeople] = Field(default_factory=list)


class TodayCount(BaseModel):
    user_id: str
    date: str
    total_created_today: int
    completed_today: int
