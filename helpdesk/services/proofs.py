from __future__ import annotations

from typing import Mapping

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from helpdesk.core.errors import ValidationError
from helpdesk.models import Proof
from helpdesk.schemas import ProofCreate, ProofQueryResult, ProofRead, ProofWithDetails, TicketBrief
from helpdesk.services.directory import DirectoryService
from helpdesk.services.tickets import TicketService


class ProofService:
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

    def submit_proof(self, payload: ProofCreate, media: Mapping[str, str] | None = None) -> Proof:
        media = media or {}
        proof = Proof(
            ticket_id=payload.ticket_id,
            user_id=payload.user_id,
            recipient_id=payload.recipient_id,
            workinstruction_id=payload.workinstruction_id,
            recipient_name=payload.recipient_name,
            voice_note_url=media.get("voice_note_url"),
            image_url=media.get("image_url"),
            video_url=media.get("video_url"),
            remarks=payload.remarks,
        )
        self.session.add(proof)
        self.session.flush()
        logger.info(
            "Saved proof id={proof_id} ticket={ticket_id} by={user_id} media={media}",
            proof_id=proof.id,
            ticket_id=proof.ticket_id,
            user_id=proof.user_id,
            media=sorted(media),
        )
        return proof

    def query(
        self,
        *,
        user_id: str | None = None,
        ticket_id: str | None = None,
        workinstruction_id: str | None = None,
    ) -> ProofQueryResult:
        if not user_id and not ticket_id:
            raise ValidationError("Either user_id or ticket_id is required.", fields=["user_id", "ticket_id"])

        stmt = select(Proof)
        if user_id:
            stmt = stmt.where(Proof.user_id == user_id)
        if ticket_id:
            stmt = stmt.where(Proof.ticket_id == ticket_id)
        if workinstruction_id:
            stmt = stmt.where(Proof.workinstruction_id == workinstruction_id)
        proofs = list(self.session.scalars(stmt.order_by(Proof.updated_at.desc(), Proof.created_at.desc())))
        logger.debug("Found {count} proofs user={user_id} ticket={ticket_id}", count=len(proofs), user_id=user_id, ticket_id=ticket_id)

        tickets = self.tickets.get_many(p.ticket_id for p in proofs)
        people = self.directory.briefs(p.recipient_id for p in proofs)
        details = [
            ProofWithDetails(
                **ProofRead.model_validate(p).model_dump(),
                ticket=TicketBrief.model_validate(tickets[p.ticket_id]) if p.ticket_id in tickets else None,
                recipient=people.get(p.recipient_id) if p.recipient_id else None,
            )
            for p in proofs
        ]
        return ProofQueryResult(count=len(details), proofs=details)

    def purge(self) -> int:
        result = self.session.execute(delete(Proof))
        self.session.expire_all()
        logger.warning("Purged {count} proofs", count=result.rowcount)
        return result.rowcount


def get_proof_service(session: Session) -> ProofService:
    return ProofService(session=session)
