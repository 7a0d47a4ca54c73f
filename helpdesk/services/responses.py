from __future__ import annotations

from typing import Mapping

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from helpdesk.core.errors import NotFoundError, ValidationError
from helpdesk.models import Satisfaction, TicketResponse
from helpdesk.schemas import (
    ResponseCreate,
    ResponseRead,
    ResponseStatusUpdate,
    ResponseWithDetails,
    SatisfactionCreate,
    SatisfactionRead,
    SatisfactionUpdate,
    SatisfactionWithDetails,
    TicketRead,
)
from helpdesk.services.directory import DirectoryService
from helpdesk.services.tickets import TicketService


def _require_ticket(ticket_id: str | None) -> None:
    if not ticket_id:
        raise ValidationError("ticket_id is required.", fields=["ticket_id"])


class ResponseService:
    """Replies on a ticket from a responder back to the ticket's user."""

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

    def create_response(self, payload: ResponseCreate, media: Mapping[str, str] | None = None) -> TicketResponse:
        media = media or {}
        response = TicketResponse(
            ticket_id=payload.ticket_id,
            user_id=payload.user_id,
            response_person_id=payload.response_person_id,
            type=payload.type,
            description=payload.description,
            priority=payload.priority.value,
            deadline=payload.deadline,
            voice_note_url=media.get("voice_note_url"),
            video_url=media.get("video_url"),
            image_url=media.get("image_url"),
            rights=payload.rights.value if payload.rights else None,
        )
        self.session.add(response)
        self.session.flush()
        logger.info(
            "Saved response id={response_id} ticket={ticket_id} by={responder}",
            response_id=response.id,
            ticket_id=response.ticket_id,
            responder=response.response_person_id,
        )
        return response

    def update_status(self, response_id: str, payload: ResponseStatusUpdate) -> TicketResponse:
        response = self.session.get(TicketResponse, response_id)
        if response is None:
            raise NotFoundError("Response not found.")
        previous = response.status
        response.status = payload.status.value
        self.session.flush()
        logger.info(
            "Response id={response_id} status {previous} -> {status}",
            response_id=response_id,
            previous=previous,
            status=response.status,
        )
        return response

    def query(
        self,
        ticket_id: str | None,
        *,
        response_person_id: str | None = None,
        user_id: str | None = None,
    ) -> list[ResponseWithDetails]:
        _require_ticket(ticket_id)
        stmt = select(TicketResponse).where(TicketResponse.ticket_id == ticket_id)
        if response_person_id:
            stmt = stmt.where(TicketResponse.response_person_id == response_person_id)
        if user_id:
            stmt = stmt.where(TicketResponse.user_id == user_id)
        responses = list(self.session.scalars(stmt.order_by(TicketResponse.created_at)))

        ticket = self.tickets.find(ticket_id)
        people = self.directory.briefs([r.user_id for r in responses] + [r.response_person_id for r in responses])
        return [
            ResponseWithDetails(
                **ResponseRead.model_validate(r).model_dump(),
                user=people.get(r.user_id),
                responder=people.get(r.response_person_id),
                ticket=TicketRead.model_validate(ticket) if ticket else None,
            )
            for r in responses
        ]


class SatisfactionService:
    """Closure records confirming a ticket was settled to the user's satisfaction."""

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

    def record(self, payload: SatisfactionCreate, media: Mapping[str, str] | None = None) -> Satisfaction:
        media = media or {}
        record = Satisfaction(
            ticket_id=payload.ticket_id,
            user_id=payload.user_id,
            response_person_id=payload.response_person_id,
            type=payload.type,
            description=payload.description,
            priority=payload.priority.value,
            voice_note_url=media.get("voice_note_url"),
            video_url=media.get("video_url"),
            image_url=media.get("image_url"),
        )
        self.session.add(record)
        self.session.flush()
        logger.info(
            "Saved satisfaction id={record_id} ticket={ticket_id} by={user_id}",
            record_id=record.id,
            ticket_id=record.ticket_id,
            user_id=record.user_id,
        )
        return record

    def update(
        self,
        record_id: str,
        payload: SatisfactionUpdate,
        media: Mapping[str, str] | None = None,
    ) -> Satisfaction:
        record = self.session.get(Satisfaction, record_id)
        if record is None:
            raise NotFoundError("Satisfy record not found.")

        changes = payload.model_dump(exclude_none=True)
        for field, value in changes.items():
            setattr(record, field, getattr(value, "value", value))
        for attribute, url in (media or {}).items():
            setattr(record, attribute, url)
        self.session.flush()
        logger.info(
            "Updated satisfaction id={record_id} fields={fields}",
            record_id=record_id,
            fields=sorted(changes) + sorted(media or {}),
        )
        return record

    def query(
        self,
        ticket_id: str | None,
        *,
        response_person_id: str | None = None,
        user_id: str | None = None,
    ) -> list[SatisfactionWithDetails]:
        _require_ticket(ticket_id)
        stmt = select(Satisfaction).where(Satisfaction.ticket_id == ticket_id)
        if response_person_id:
            stmt = stmt.where(Satisfaction.response_person_id == response_person_id)
        if user_id:
            stmt = stmt.where(Satisfaction.user_id == user_id)
        records = list(self.session.scalars(stmt.order_by(Satisfaction.created_at)))

        ticket = self.tickets.find(ticket_id)
        people = self.directory.briefs([r.user_id for r in records] + [r.response_person_id for r in records])
        return [
            SatisfactionWithDetails(
                **SatisfactionRead.model_validate(r).model_dump(),
                user=people.get(r.user_id),
                responder=people.get(r.response_person_id),
                ticket=TicketRead.model_validate(ticket) if ticket else None,
            )
            for r in records
        ]

    def purge(self) -> int:
        result = self.session.execute(delete(Satisfaction))
        self.session.expire_all()
        logger.warning("Purged {count} satisfaction records", count=result.rowcount)
        return result.rowcount
