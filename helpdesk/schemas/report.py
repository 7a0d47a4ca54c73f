from __future__ import annotations

from pydantic import BaseModel, Field

from .assignment import AssignmentWithPeople
from .common import InstantOut
from .ticket import TicketWithPeople


class TicketWithAssignInfo(TicketWithPeople):
    # One entry per recipient that delegated this ticket further.
    assign_info: list[AssignmentWithPeople] = Field(default_factory=list)


class DelegatedTicket(TicketWithPeople):
    assignment: AssignmentWithPeople | None = None


class AdminSummary(BaseModel):
    date_from: InstantOut
    date_to: InstantOut
    total_tickets: int
    ticket_status_counts: dict[str, int]
    total_tasks: int
