from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Mapping

from loguru import logger
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from helpdesk.core.errors import NotFoundError
from helpdesk.models import Assignment, AssignmentAssignee, Ticket
from helpdesk.models.base import is_valid_id
from helpdesk.schemas import (
    AssigneeReport,
    AssignmentCreate,
    AssignmentQueryResult,
    AssignmentRead,
    AssignmentStatus,
    AssignmentWithPeople,
    DateCategories,
    DateCategoryResult,
    RoleAssignments,
    TicketRead,
    TicketWithPeople,
    UserBrief,
)
from helpdesk.services.directory import DirectoryService
from helpdesk.services.tickets import TicketService
from helpdesk.utils.time import local_date, utc_now


def _has_assignee(user_id: str):
    return Assignment.assignees.any(AssignmentAssignee.user_id == user_id)


class AssignmentService:
    """Delegation of tickets (or standalone tasks) from a manager to assignees."""

    def __init__(
        self,
        session: Session,
        *,
        tickets: TicketService | None = None,
        directory: DirectoryService | None = None,
    ) -> None:
        self.session = session
        self.tickets = tickets or TicketService(session)
        self.directory = directory or DirectoryService(session)

    # -- writes -----------------------------------------------------------

    def create_assignment(self, payload: AssignmentCreate, media: Mapping[str, str] | None = None) -> Assignment:
        media = media or {}
        ticket_id = payload.ticket_id
        if ticket_id and not is_valid_id(ticket_id):
            logger.warning("Ignoring malformed ticket id={ticket_id} on new assignment", ticket_id=ticket_id)
            ticket_id = None

        assignment = Assignment(
            ticket_id=ticket_id,
            user_id=payload.user_id,
            details=payload.details,
            voice_note_url=media.get("voice_note_url"),
            video_url=media.get("video_url"),
            image_url=media.get("image_url"),
            priority=payload.priority.value,
            target_date=payload.target_date,
            status=payload.status.value if payload.status else None,
        )
        assignment.set_assignees(payload.assign_to)
        self.session.add(assignment)
        self.session.flush()
        logger.info(
            "Created assignment id={assignment_id} manager={user_id} assignees={assignees} ticket={ticket_id}",
            assignment_id=assignment.id,
            user_id=assignment.user_id,
            assignees=len(payload.assign_to),
            ticket_id=ticket_id,
        )

        # Same session, so the ticket update commits or rolls back with the assignment.
        if ticket_id:
            self.tickets.mark_delegated(ticket_id)
        return assignment

    def update_status(self, assignment_id: str, status: AssignmentStatus) -> Assignment:
        assignment = self.get_assignment(assignment_id)
        previous = assignment.status
        assignment.status = status.value
        self.session.flush()
        logger.info(
            "Assignment id={assignment_id} status {previous} -> {status}",
            assignment_id=assignment_id,
            previous=previous,
            status=assignment.status,
        )
        return assignment

    def purge(self) -> int:
        self.session.execute(delete(AssignmentAssignee))
        result = self.session.execute(delete(Assignment))
        self.session.expire_all()
        logger.warning("Purged {count} assignments", count=result.rowcount)
        return result.rowcount

    # -- reads ------------------------------------------------------------

    def get_assignment(self, assignment_id: str) -> Assignment:
        assignment = self.session.get(Assignment, assignment_id)
        if assignment is None:
            raise NotFoundError("Assignment not found.")
        return assignment

    def list_all(self, *, status: str | None = None) -> list[Assignment]:
        stmt = select(Assignment)
        if status:
            stmt = stmt.where(Assignment.status == AssignmentStatus.filter_value(status))
        return list(self.session.scalars(stmt.order_by(Assignment.created_at.desc())))

    def for_user(self, user_id: str, *, recipient_id: str | None = None, status: str | None = None) -> list[Assignment]:
        """Assignments made by ``user_id`` or handed to ``recipient_id``."""
        clauses = [Assignment.user_id == user_id]
        if recipient_id:
            clauses.append(_has_assignee(recipient_id))
        stmt = select(Assignment).where(or_(*clauses))
        if status:
            stmt = stmt.where(Assignment.status == AssignmentStatus.filter_value(status))
        return list(self.session.scalars(stmt.order_by(Assignment.created_at.desc())))

    def for_pair(self, manager_id: str, assignee_id: str) -> list[Assignment]:
        stmt = (
            select(Assignment)
            .where(Assignment.user_id == manager_id, _has_assignee(assignee_id))
            .order_by(Assignment.created_at.desc())
        )
        return list(self.session.scalars(stmt))

    def for_assignee(self, assignee_id: str, *, status: str | None = None) -> list[Assignment]:
        stmt = select(Assignment).where(_has_assignee(assignee_id))
        if status:
            stmt = stmt.where(Assignment.status == AssignmentStatus.filter_value(status))
        return list(self.session.scalars(stmt.order_by(Assignment.created_at.desc())))

    def count_for_assignee(self, assignee_id: str) -> int:
        stmt = select(func.count()).select_from(Assignment).where(_has_assignee(assignee_id))
        return self.session.scalar(stmt) or 0

    def count_tasks(self, start: datetime, end: datetime) -> int:
        """Standalone assignments (no parent ticket) created within the window."""
        stmt = (
            select(func.count())
            .select_from(Assignment)
            .where(Assignment.ticket_id.is_(None), Assignment.created_at >= start, Assignment.created_at <= end)
        )
        return self.session.scalar(stmt) or 0

    def query(self, user_id: str, *, recipient_id: str | None = None, status: str | None = None) -> AssignmentQueryResult:
        """What is on ``user_id``'s plate, as both delegate and sub-delegator."""
        assignments = self.for_user(user_id, recipient_id=recipient_id, status=status)
        tickets = self.tickets.delegated_for_recipient(user_id)
        return AssignmentQueryResult(
            assignments=self.with_people(assignments),
            tickets=self.tickets_with_people(tickets),
            ticket_count=len(tickets),
            related_users=self._creators(tickets),
        )

    def by_date_category(self, manager_id: str, assignee_id: str, *, today: date | None = None) -> DateCategoryResult:
        today = today or local_date(utc_now())
        categorized = DateCategories()
        for item in self.with_people(self.for_pair(manager_id, assignee_id)):
            if item.target_date is None:
                categorized.pending_tasks.append(item)
                continue
            due = local_date(item.target_date)
            if due == today:
                categorized.today_tasks.append(item)
            elif due > today:
                categorized.weekly_tasks.append(item)
            else:
                categorized.pending_tasks.append(item)

        tickets = self.tickets.delegated_for_recipient(manager_id)
        return DateCategoryResult(
            ticket_count=len(tickets),
            categorized_assignments=categorized,
            tickets=self.tickets_with_people(tickets),
            related_users=self._creators(tickets),
        )

    def assignee_report(self, user_id: str, *, now: datetime | None = None) -> AssigneeReport:
        now = now or utc_now()
        pending = completed = delayed = 0
        for assignment in self.for_assignee(user_id):
            if (assignment.status or "").lower() == "completed":
                completed += 1
            elif assignment.target_date is not None and assignment.target_date < now:
                delayed += 1
            else:
                pending += 1

        return AssigneeReport(
            pending=pending,
            completed=completed,
            delayed=delayed,
            requested=self.tickets.count_by_creator(user_id),
            totalResolved=pending + completed + delayed,
        )

    def role_assignments(self, role: str = "Admin", *, status: str | None = "Working") -> list[RoleAssignments]:
        users = self.directory.by_role(role)
        if not users:
            raise NotFoundError(f"No {role} users found.")

        user_ids = [u.id for u in users]
        stmt = select(Assignment).where(Assignment.assignees.any(AssignmentAssignee.user_id.in_(user_ids)))
        if status:
            stmt = stmt.where(Assignment.status == AssignmentStatus.filter_value(status))
        assignments = self.with_people(self.session.scalars(stmt.order_by(Assignment.created_at.desc())), with_ticket=True)

        result: list[RoleAssignments] = []
        for user in users:
            mine = [a for a in assignments if user.id in a.assign_to]
            result.append(RoleAssignments(**UserBrief.model_validate(user).model_dump(), assignments=mine))
        return result

    # -- joins ------------------------------------------------------------

    def with_people(self, assignments: Iterable[Assignment], *, with_ticket: bool = False) -> list[AssignmentWithPeople]:
        assignments = list(assignments)
        people = self.directory.briefs(
            [a.user_id for a in assignments] + [uid for a in assignments for uid in a.assign_to]
        )
        tickets = self.tickets.get_many(a.ticket_id for a in assignments) if with_ticket else {}

        out: list[AssignmentWithPeople] = []
        for a in assignments:
            ticket = tickets.get(a.ticket_id) if a.ticket_id else None
            out.append(
                AssignmentWithPeople(
                    **AssignmentRead.model_validate(a).model_dump(),
                    manager=people.get(a.user_id),
                    assignees=[people.get(uid) for uid in a.assign_to],
                    ticket=TicketRead.model_validate(ticket) if ticket else None,
                )
            )
        return out

    def tickets_with_people(self, tickets: Iterable[Ticket]) -> list[TicketWithPeople]:
        tickets = list(tickets)
        people = self.directory.briefs([t.user_id for t in tickets] + [r for t in tickets for r in t.recipient_ids])
        return [
            TicketWithPeople(
                **TicketRead.model_validate(t).model_dump(),
                creator=people.get(t.user_id),
                recipients=[people.get(r) for r in t.recipient_ids],
            )
            for t in tickets
        ]

    def _creators(self, tickets: Iterable[Ticket]) -> list[UserBrief]:
        creator_ids: list[str] = []
        for t in tickets:
            if t.user_id not in creator_ids:
                creator_ids.append(t.user_id)
        people = self.directory.briefs(creator_ids)
        return [people[uid] for uid in creator_ids if uid in people]


def get_assignment_service(session: Session) -> AssignmentService:
    return AssignmentService(session=session)
