from __future__ import annotations

from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Iterable, Mapping

from loguru import logger
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from helpdesk.core.config import AppConfig, get_settings
from helpdesk.core.errors import ForbiddenError, NotFoundError
from helpdesk.models import Ticket, TicketRecipient
from helpdesk.schemas import (
    DELEGATED_STATUSES,
    OPEN_STATUSES,
    TicketCreate,
    TicketForward,
    TicketRead,
    TicketStatus,
    TicketStatusUpdate,
    TicketTotals,
    TodayCount,
)
from helpdesk.utils.time import local_date, month_to_date, today_bounds, utc_now

CATEGORY_BUCKETS = ("completed", "pending", "active", "rejection", "training")


class TicketAccess(Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    OK = "ok"


def _has_recipient(user_id: str):
    return Ticket.recipients.any(TicketRecipient.user_id == user_id)


class TicketService:
    def __init__(self, session: Session, *, settings: AppConfig | None = None) -> None:
        self.session = session
        self.settings = settings or get_settings()

    # -- writes -----------------------------------------------------------

    def create_ticket(self, payload: TicketCreate, media: Mapping[str, str] | None = None) -> Ticket:
        media = media or {}
        ticket = Ticket(
            user_id=payload.user_id,
            type=payload.type,
            description=payload.description,
            priority=payload.priority.value,
            deadline=payload.deadline,
            voice_note_url=media.get("voice_note_url"),
            video_url=media.get("video_url"),
            image_url=media.get("image_url"),
            status=TicketStatus.PENDING.value,
            rights=payload.rights.value if payload.rights else None,
        )
        ticket.set_recipients(payload.recipient_ids)
        self.session.add(ticket)
        self.session.flush()
        logger.info(
            "Created ticket id={ticket_id} by={user_id} recipients={count}",
            ticket_id=ticket.id,
            user_id=ticket.user_id,
            count=len(payload.recipient_ids),
        )
        return ticket

    def forward_ticket(self, payload: TicketForward) -> Ticket:
        ticket = self.get_ticket(payload.ticket_id)
        # Hand-off: the new holder replaces every previous recipient.
        ticket.set_recipients([payload.recipient_id])
        ticket.rights = payload.rights.value
        ticket.updated_at = utc_now()
        self.session.flush()
        logger.info(
            "Forwarded ticket id={ticket_id} to={recipient_id} rights={rights}",
            ticket_id=ticket.id,
            recipient_id=payload.recipient_id,
            rights=ticket.rights,
        )
        return ticket

    def check_access(self, ticket_id: str, user_id: str, recipient_id: str) -> tuple[TicketAccess, Ticket | None]:
        ticket = self.find(ticket_id)
        if ticket is None:
            return TicketAccess.NOT_FOUND, None
        if ticket.user_id != user_id or recipient_id not in ticket.recipient_ids:
            return TicketAccess.FORBIDDEN, ticket
        return TicketAccess.OK, ticket

    def update_status(self, payload: TicketStatusUpdate) -> Ticket:
        access, ticket = self.check_access(payload.ticket_id, payload.user_id, payload.recipient_id)
        if access is TicketAccess.FORBIDDEN and self.settings.split_forbidden_errors:
            raise ForbiddenError("Access denied for this ticket.")
        if access is not TicketAccess.OK:
            logger.debug("Status update refused for ticket id={ticket_id}: {access}", ticket_id=payload.ticket_id, access=access.value)
            raise NotFoundError("Ticket not found or access denied.")

        previous = ticket.status
        ticket.status = payload.status.value
        ticket.updated_at = utc_now()
        self.session.flush()
        logger.info(
            "Ticket id={ticket_id} status {previous} -> {status}",
            ticket_id=ticket.id,
            previous=previous,
            status=ticket.status,
        )
        return ticket

    def mark_delegated(self, ticket_id: str) -> Ticket | None:
        ticket = self.find(ticket_id)
        if ticket is None:
            logger.warning("Assignment references unknown ticket id={ticket_id}", ticket_id=ticket_id)
            return None
        ticket.status = TicketStatus.ASSIGN.value
        ticket.updated_at = utc_now()
        self.session.flush()
        logger.info("Ticket id={ticket_id} marked as delegated", ticket_id=ticket_id)
        return ticket

    def purge(self) -> int:
        self.session.execute(delete(TicketRecipient))
        result = self.session.execute(delete(Ticket))
        self.session.expire_all()
        logger.warning("Purged {count} tickets", count=result.rowcount)
        return result.rowcount

    # -- reads ------------------------------------------------------------

    def find(self, ticket_id: str | None) -> Ticket | None:
        if not ticket_id:
            return None
        return self.session.get(Ticket, ticket_id)

    def get_ticket(self, ticket_id: str) -> Ticket:
        ticket = self.find(ticket_id)
        if ticket is None:
            raise NotFoundError("Ticket not found.")
        return ticket

    def get_many(self, ticket_ids: Iterable[str | None]) -> dict[str, Ticket]:
        ids = {tid for tid in ticket_ids if tid}
        if not ids:
            return {}
        return {t.id: t for t in self.session.scalars(select(Ticket).where(Ticket.id.in_(ids)))}

    def all_tickets(self) -> list[Ticket]:
        return list(self.session.scalars(select(Ticket).order_by(Ticket.created_at.desc())))

    def tickets_for_creator(
        self,
        user_id: str,
        *,
        status: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        now: datetime | None = None,
    ) -> list[Ticket]:
        """Tickets raised by ``user_id``; defaults to the month-to-date window."""
        if start is None and end is None:
            start, end = month_to_date(now)
        stmt = select(Ticket).where(Ticket.user_id == user_id)
        if status:
            stmt = stmt.where(Ticket.status == TicketStatus.filter_value(status))
        if start is not None:
            stmt = stmt.where(Ticket.created_at >= start)
        if end is not None:
            stmt = stmt.where(Ticket.created_at <= end)
        return list(self.session.scalars(stmt.order_by(Ticket.created_at.desc())))

    def tickets_for_user(self, user_id: str, *, status: str | None = None) -> list[Ticket]:
        stmt = select(Ticket).where(or_(Ticket.user_id == user_id, _has_recipient(user_id)))
        if status:
            stmt = stmt.where(Ticket.status == TicketStatus.filter_value(status))
        return list(self.session.scalars(stmt.order_by(Ticket.created_at.desc())))

    def tickets_for_recipient(
        self,
        recipient_id: str,
        *,
        status: str | None = None,
        type_: str | None = None,
    ) -> list[Ticket]:
        stmt = select(Ticket).where(_has_recipient(recipient_id))
        if status:
            stmt = stmt.where(Ticket.status == TicketStatus.filter_value(status))
        if type_:
            stmt = stmt.where(Ticket.type == type_)
        return list(self.session.scalars(stmt.order_by(Ticket.created_at.desc())))

    def delegated_for_recipient(self, recipient_id: str) -> list[Ticket]:
        stmt = (
            select(Ticket)
            .where(_has_recipient(recipient_id), Ticket.status.in_(DELEGATED_STATUSES))
            .order_by(Ticket.created_at.desc())
        )
        return list(self.session.scalars(stmt))

    def count_by_creator(self, user_id: str) -> int:
        stmt = select(func.count()).select_from(Ticket).where(Ticket.user_id == user_id)
        return self.session.scalar(stmt) or 0

    def recipient_totals(self, recipient_id: str) -> TicketTotals:
        return self._totals(self.tickets_for_recipient(recipient_id))

    def creator_summary(self, user_id: str, *, start: datetime | None = None, end: datetime | None = None) -> TicketTotals:
        stmt = select(Ticket).where(Ticket.user_id == user_id)
        if start is not None:
            stmt = stmt.where(Ticket.created_at >= start)
        if end is not None:
            stmt = stmt.where(Ticket.created_at <= end)
        tickets = list(self.session.scalars(stmt.order_by(Ticket.created_at.desc())))
        return self._totals(tickets)

    @staticmethod
    def _totals(tickets: list[Ticket]) -> TicketTotals:
        open_tickets = [t for t in tickets if t.status in OPEN_STATUSES]
        others = [t for t in tickets if t.status not in OPEN_STATUSES]
        return TicketTotals(
            total_tickets=len(tickets),
            tickets=[TicketRead.model_validate(t) for t in tickets],
            type_counts=dict(Counter(t.type for t in open_tickets)),
            other_status_count=len(others),
            other_status_tickets=[TicketRead.model_validate(t) for t in others],
        )

    def overdue(
        self,
        *,
        user_id: str | None = None,
        recipient_id: str | None = None,
        now: datetime | None = None,
    ) -> list[Ticket]:
        now = now or utc_now()
        stmt = select(Ticket).where(
            Ticket.status != TicketStatus.RESOLVED.value,
            Ticket.deadline.is_not(None),
            Ticket.deadline < now,
        )
        if user_id:
            stmt = stmt.where(Ticket.user_id == user_id)
        if recipient_id:
            stmt = stmt.where(_has_recipient(recipient_id))
        return list(self.session.scalars(stmt.order_by(Ticket.deadline)))

    def categorize(self, *, now: datetime | None = None) -> dict[str, list[Ticket]]:
        """Bucket every ticket for the dashboard.

        Tickets with a future deadline that is not today, with no deadline, or
        still ``pending`` on their due day fall into no bucket at all.
        """
        now = now or utc_now()
        today = local_date(now)
        buckets: dict[str, list[Ticket]] = {name: [] for name in CATEGORY_BUCKETS}

        for ticket in self.all_tickets():
            status = (ticket.status or "").lower()
            deadline = ticket.deadline
            if status == "rejected":
                buckets["rejection"].append(ticket)
            elif status == "training":
                buckets["training"].append(ticket)
            elif deadline is not None and deadline < now:
                if status in ("complete", "completed"):
                    buckets["completed"].append(ticket)
                else:
                    buckets["pending"].append(ticket)
            elif deadline is not None and local_date(deadline) == today:
                if status != "pending":
                    buckets["active"].append(ticket)
        return buckets

    def count_today(self, user_id: str, *, now: datetime | None = None) -> TodayCount:
        now = now or utc_now()
        start, end = today_bounds(now)
        base = (
            select(func.count())
            .select_from(Ticket)
            .where(Ticket.user_id == user_id, Ticket.created_at >= start, Ticket.created_at < end)
        )
        total = self.session.scalar(base) or 0
        completed = self.session.scalar(base.where(Ticket.status == TicketStatus.COMPLETED.value)) or 0
        return TodayCount(
            user_id=user_id,
            date=local_date(now).isoformat(),
            total_created_today=total,
            completed_today=completed,
        )

    def status_counts(self, start: datetime, end: datetime) -> tuple[int, dict[str, int]]:
        stmt = (
            select(Ticket.status, func.count())
            .where(Ticket.created_at >= start, Ticket.created_at <= end)
            .group_by(Ticket.status)
        )
        counts = {status: count for status, count in self.session.execute(stmt)}
        return sum(counts.values()), counts


def get_ticket_service(session: Session) -> TicketService:
    return TicketService(session=session)
