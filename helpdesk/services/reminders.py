from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tenacity import retry, retry_if_exception_type, stop_after_attempt

from helpdesk.core.config import AppConfig, get_settings
from helpdesk.models import Reminder
from helpdesk.schemas import ReminderCreate, ReminderList, ReminderRead, ReminderWithDetails, TicketBrief
from helpdesk.services.directory import DirectoryService
from helpdesk.services.tickets import TicketService
from helpdesk.utils.time import utc_now


@dataclass
class ReminderOutcome:
    reminder: Reminder
    capped: bool = False
    created: bool = False


class ReminderService:
    """Per (ticket, sender, recipient) nag counter, clamped at the reminder limit."""

    def __init__(
        self,
        session: Session,
        *,
        tickets: TicketService | None = None,
        directory: DirectoryService | None = None,
        settings: AppConfig | None = None,
    ) -> None:
        self.session = session
        self.tickets = tickets or TicketService(session)
        self.directory = directory or DirectoryService(session)
        self.limit = (settings or get_settings()).reminder_limit

    def find(self, ticket_id: str, user_id: str, recipient_id: str, *, lock: bool = False) -> Reminder | None:
        stmt = select(Reminder).where(
            Reminder.ticket_id == ticket_id,
            Reminder.user_id == user_id,
            Reminder.recipient_id == recipient_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self.session.scalars(stmt).first()

    # A concurrent first reminder for the same triple loses on the unique
    # constraint; the second attempt then finds the row and increments it.
    @retry(retry=retry_if_exception_type(IntegrityError), stop=stop_after_attempt(2), reraise=True)
    def send_reminder(self, payload: ReminderCreate) -> ReminderOutcome:
        existing = self.find(payload.ticket_id, payload.user_id, payload.recipient_id, lock=True)

        if existing is None:
            reminder = Reminder(
                ticket_id=payload.ticket_id,
                user_id=payload.user_id,
                recipient_id=payload.recipient_id,
                count=1,
            )
            with self.session.begin_nested():
                self.session.add(reminder)
            logger.info(
                "First reminder for ticket={ticket_id} from={user_id} to={recipient_id}",
                ticket_id=payload.ticket_id,
                user_id=payload.user_id,
                recipient_id=payload.recipient_id,
            )
            return ReminderOutcome(reminder=reminder, created=True)

        if existing.count >= self.limit:
            logger.info("Reminder limit reached for id={reminder_id}", reminder_id=existing.id)
            return ReminderOutcome(reminder=existing, capped=True)

        existing.count += 1
        existing.updated_at = utc_now()
        self.session.flush()
        logger.info("Reminder id={reminder_id} count={count}", reminder_id=existing.id, count=existing.count)
        return ReminderOutcome(reminder=existing)

    def for_ticket(self, ticket_id: str) -> ReminderList:
        stmt = (
            select(Reminder)
            .where(Reminder.ticket_id == ticket_id)
            .order_by(Reminder.updated_at.desc(), Reminder.created_at.desc())
        )
        reminders = list(self.session.scalars(stmt))
        ticket = self.tickets.find(ticket_id)
        brief = TicketBrief.model_validate(ticket) if ticket else None
        senders = self.directory.briefs(r.user_id for r in reminders)
        return ReminderList(
            ticket_id=ticket_id,
            reminders=[
                ReminderWithDetails(
                    **ReminderRead.model_validate(r).model_dump(),
                    ticket=brief,
                    sender=senders.get(r.user_id),
                )
                for r in reminders
            ],
        )


def get_reminder_service(session: Session) -> ReminderService:
    return ReminderService(session=session)
