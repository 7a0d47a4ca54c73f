from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from helpdesk.api.responses import ok, read_uploads, request_base_url
from helpdesk.core.errors import validate_payload
from helpdesk.schemas import ProofCreate, ProofRead
from helpdesk.services.db import get_db
from helpdesk.services.media import MediaStore, get_media_store
from helpdesk.services.proofs import ProofService

router = APIRouter(prefix="/proof", tags=["proofs"])


@router.post("")
def submit_proof(
    request: Request,
    ticket_id: str | None = Form(None),
    user_id: str | None = Form(None),
    recipient_id: str | None = Form(None),
    workinstruction_id: str | None = Form(None),
    recipient_name: str | None = Form(None),
    remarks: str | None = Form(None),
    voice_note: UploadFile | None = File(None),
    video: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    payload = validate_payload(
        ProofCreate,
        {
            "ticket_id": ticket_id,
            "user_id": user_id,
            "recipient_id": recipient_id,
            "workinstruction_id": workinstruction_id,
            "recipient_name": recipient_name,
            "remarks": remarks,
        },
    )
    uploads = read_uploads(voice_note=voice_note, video=video, image=image)
    media = media_store.save_all(uploads, base_url=request_base_url(request))

    proof = ProofService(session).submit_proof(payload, media)
    return ok(ProofRead.model_validate(proof), message="Proof saved successfully.", status_code=status.HTTP_201_CREATED)


@router.get("")
def query_proofs(
    user_id: str | None = Query(None),
    ticket_id: str | None = Query(None),
    workinstruction_id: str | None = Query(None),
    session: Session = Depends(get_db),
):
    result = ProofService(session).query(user_id=user_id, ticket_id=ticket_id, workinstruction_id=workinstruction_id)
    return ok(result.proofs, count=result.count)


@router.delete("/proofs/delete-all")
def delete_all_proofs(session: Session = Depends(get_db)):
    deleted = ProofService(session).purge()
    return ok({"deleted_count": deleted}, message="All proofs deleted successfully.")
