from __future__ import annotations

from pydantic import BaseModel, Field

from .common import (
    AssignmentStatusField,
    IdList,
    InstantIn,
    InstantOut,
    Payload,
    PriorityField,
    ReadModel,
    UserBrief,
)
from .ticket import TicketRead, TicketWithPeople


class AssignmentCreate(Payload):
    user_id: str
    assign_to: IdList
    details: str = Field(min_length=1)
    priority: PriorityField
    target_date: InstantIn | None = None
    status: AssignmentStatusField | None = None
    ticket_id: str | None = None


class AssignmentStatusUpdate(Payload):
    status: AssignmentStatusField


class AssignmentRead(ReadModel):
    id: str
    ticket_id: str | None = None
    user_id: str
    assign_to: list[str]
    details: str
    voice_note_url: str | None = None
    video_url: str | None = None
    image_url: str | None = None
    priority: str
    target_date: InstantOut | None = None
    status: str | None = None
    created_at: InstantOut


class AssignmentWithPeople(AssignmentRead):
    manager: UserBrief | None = None
    assignees: list[UserBrief | None] = Field(default_factory=list)
    ticket: TicketRead | None = None


class AssignmentQueryResult(BaseModel):
    assignments: list[AssignmentWithPeople]
    tickets: list[TicketWithPeople]
    ticket_count: int
    related_users: list[UserBrief]


class DateCategories(BaseModel):
    today_tasks: list[AssignmentWithPeople] = Field(default_factory=list)
    weekly_tasks: list[AssignmentWithPeople] = Field(default_factory=list)
    pending_tasks: list[AssignmentWithPeople] = Field(default_factory=list)


class DateCategoryResult(BaseModel):
    ticket_count: int
    categorized_assignments: DateCategories
    tickets: list[TicketWithPeople]
    related_users: list[UserBrief]


class AssigneeReport(BaseModel):
    pending: int
    completed: int
    delayed: int
    requested: int
    # Sum of every bucket above except "requested"; not only resolved work.
    totalResolved: int


class RoleAssignments(UserBrief):
    assignments: list[AssignmentWithPeople] = Field(default_factory=list)
