from __future__ import annotations

from datetime import datetime

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from helpdesk.core.config import AppConfig, get_settings
from helpdesk.core.errors import ForbiddenError, NotFoundError
from helpdesk.models import Assignment, AssignmentAssignee
from helpdesk.schemas import CategorizedTickets, TicketWithPeople
from helpdesk.schemas.report import AdminSummary, DelegatedTicket, TicketWithAssignInfo
from helpdesk.services.assignments import AssignmentService
from helpdesk.services.directory import DirectoryService
from helpdesk.services.tickets import TicketService
from helpdesk.utils.time import month_to_date, utc_now


class ReportService:
    """Read-only dashboards joining tickets, assignments and the directory.

    Unresolvable users or tickets come back as ``None`` on their side of the
    join instead of failing the whole report.
    """

    def __init__(self, session: Session, *, settings: AppConfig | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings()
        self.directory = DirectoryService(session)
        self.tickets = TicketService(session, settings=self.settings)
        self.assignments = AssignmentService(session, tickets=self.tickets, directory=self.directory)

    def categorized(self, *, now: datetime | None = None) -> CategorizedTickets:
        buckets = self.tickets.categorize(now=now)
        return CategorizedTickets(**{name: self.assignments.tickets_with_people(items) for name, items in buckets.items()})

    def overdue(
        self,
        *,
        user_id: str | None = None,
        recipient_id: str | None = None,
        now: datetime | None = None,
    ) -> list[TicketWithPeople]:
        tickets = self.tickets.overdue(user_id=user_id, recipient_id=recipient_id, now=now)
        return self.assignments.tickets_with_people(tickets)

    def admin_summary(self, user_id: str, *, now: datetime | None = None) -> AdminSummary:
        user = self.directory.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        if user.role not in self.settings.admin_roles:
            raise ForbiddenError("Access denied. User is not admin.")

        start, end = month_to_date(now or utc_now())
        total, counts = self.tickets.status_counts(start, end)
        logger.debug("Admin summary for {user_id}: {total} tickets", user_id=user_id, total=total)
        return AdminSummary(
            date_from=start,
            date_to=end,
            total_tickets=total,
            ticket_status_counts=counts,
            total_tasks=self.assignments.count_tasks(start, end),
        )

    def filter_with_assignments(
        self,
        user_id: str,
        *,
        status: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> list[TicketWithAssignInfo]:
        tickets = self.tickets.tickets_for_creator(user_id, status=status, start=start, end=end, now=now)
        if not tickets:
            return []

        stmt = select(Assignment).where(Assignment.ticket_id.in_([t.id for t in tickets]))
        by_ticket: dict[str, list[Assignment]] = {}
        for assignment in self.session.scalars(stmt.order_by(Assignment.created_at)):
            by_ticket.setdefault(assignment.ticket_id, []).append(assignment)

        out: list[TicketWithAssignInfo] = []
        for base in self.assignments.tickets_with_people(tickets):
            made_by_recipients = []
            for recipient_id in base.recipient_ids:
                match = next((a for a in by_ticket.get(base.id, []) if a.user_id == recipient_id), None)
                if match is not None:
                    made_by_recipients.append(match)
            out.append(
                TicketWithAssignInfo(
                    **base.model_dump(),
                    assign_info=self.assignments.with_people(made_by_recipients),
                )
            )
        return out

    def delegated_tickets(self, *, user_id: str | None = None, manager_id: str | None = None) -> list[DelegatedTicket]:
        stmt = select(Assignment).where(Assignment.ticket_id.is_not(None))
        if manager_id:
            stmt = stmt.where(Assignment.user_id == manager_id)
        if user_id:
            stmt = stmt.where(Assignment.assignees.any(AssignmentAssignee.user_id == user_id))
        # Oldest assignment per ticket is the one reported.
        assignments = list(self.session.scalars(stmt.order_by(Assignment.created_at)))

        first_by_ticket: dict[str, Assignment] = {}
        for assignment in assignments:
            first_by_ticket.setdefault(assignment.ticket_id, assignment)

        tickets = self.tickets.get_many(first_by_ticket)
        ordered = sorted(tickets.values(), key=lambda t: t.created_at, reverse=True)
        joined = {a.id: a for a in self.assignments.with_people(first_by_ticket.values())}

        return [
            DelegatedTicket(
                **base.model_dump(),
                assignment=joined.get(first_by_ticket[base.id].id),
            )
            for base in self.assignments.tickets_with_people(ordered)
        ]


def get_report_service(session: Session) -> ReportService:
    return ReportService(session=session)
