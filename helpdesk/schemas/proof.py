from __future__ import annotations

from pydantic import BaseModel

from .common import InstantOut, Payload, ReadModel, UserBrief


class ProofCreate(Payload):
    ticket_id: str
    user_id: str | None = None
    recipient_id: str | None = None
    workinstruction_id: str | None = None
    recipient_name: str | None = None
    remarks: str | None = None


class ProofRead(ReadModel):
    id: str
    ticket_id: str
    user_id: str | None = None
    recipient_id: str | None = None
    workinstruction_id: str | None = None
    recipient_name: str | None = None
    voice_note_url: str | None = None
    image_url: str | None = None
    video_url: str | None = None
    remarks: str | None = None
    created_at: InstantOut
    updated_at: InstantOut


class TicketBrief(ReadModel):
    id: str
    type: str
    description: str | None = None
    status: str


class ProofWithDetails(ProofRead):
    ticket: TicketBrief | None = None
    recipient: UserBrief | None = None


class ProofQueryResult(BaseModel):
    count: int
    proofs: list[ProofWithDetails]
