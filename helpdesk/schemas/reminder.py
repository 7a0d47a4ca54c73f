from __future__ import annotations

from pydantic import BaseModel, field_serializer

from .common import InstantOut, Payload, ReadModel, UserBrief
from .proof import TicketBrief


class ReminderCreate(Payload):
    ticket_id: str
    user_id: str
    recipient_id: str


class ReminderRead(ReadModel):
    id: str
    ticket_id: str
    user_id: str
    recipient_id: str
    count: int
    created_at: InstantOut
    updated_at: InstantOut

    @field_serializer("count", when_used="json")
    def _count_as_text(self, value: int) -> str:
        return str(value)


class ReminderWithDetails(ReminderRead):
    ticket: TicketBrief | None = None
    sender: UserBrief | None = None


class ReminderList(BaseModel):
    ticket_id: str
    reminders: list[ReminderWithDetails]
