from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from helpdesk.api.responses import ok, read_uploads, request_base_url
from helpdesk.core.errors import validate_payload
from helpdesk.schemas import (
    ResponseCreate,
    ResponseRead,
    ResponseStatusUpdate,
    SatisfactionCreate,
    SatisfactionRead,
    SatisfactionUpdate,
)
from helpdesk.services.db import get_db
from helpdesk.services.media import MediaStore, get_media_store
from helpdesk.services.responses import ResponseService, SatisfactionService

router = APIRouter(prefix="/response", tags=["responses"])
satisfy_router = APIRouter(prefix="/satisfy", tags=["responses"])


@router.post("")
def create_response(
    request: Request,
    ticket_id: str | None = Form(None),
    user_id: str | None = Form(None),
    response_person_id: str | None = Form(None),
    type: str | None = Form(None),
    description: str | None = Form(None),
    priority: str | None = Form(None),
    deadline: str | None = Form(None),
    rights: str | None = Form(None),
    voice_note: UploadFile | None = File(None),
    video: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    payload = validate_payload(
        ResponseCreate,
        {
            "ticket_id": ticket_id,
            "user_id": user_id,
            "response_person_id": response_person_id,
            "type": type,
            "description": description,
            "priority": priority,
            "deadline": deadline,
            "rights": rights,
        },
    )
    uploads = read_uploads(voice_note=voice_note, video=video, image=image)
    media = media_store.save_all(uploads, base_url=request_base_url(request))

    response = ResponseService(session).create_response(payload, media)
    return ok(ResponseRead.model_validate(response), message="Response created successfully.", status_code=status.HTTP_201_CREATED)


@router.get("")
def query_responses(
    ticket_id: str | None = Query(None),
    response_person_id: str | None = Query(None),
    user_id: str | None = Query(None),
    session: Session = Depends(get_db),
):
    items = ResponseService(session).query(ticket_id, response_person_id=response_person_id, user_id=user_id)
    return ok(items, count=len(items))


@router.patch("/{response_id}/status")
def update_response_status(response_id: str, payload: ResponseStatusUpdate, session: Session = Depends(get_db)):
    response = ResponseService(session).update_status(response_id, payload)
    return ok(ResponseRead.model_validate(response), message="Response status updated successfully.")


@satisfy_router.post("")
def record_satisfaction(
    request: Request,
    ticket_id: str | None = Form(None),
    user_id: str | None = Form(None),
    response_person_id: str | None = Form(None),
    type: str | None = Form(None),
    description: str | None = Form(None),
    priority: str | None = Form(None),
    voice_note: UploadFile | None = File(None),
    video: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    payload = validate_payload(
        SatisfactionCreate,
        {
            "ticket_id": ticket_id,
            "user_id": user_id,
            "response_person_id": response_person_id,
            "type": type,
            "description": description,
            "priority": priority,
        },
    )
    uploads = read_uploads(voice_note=voice_note, video=video, image=image)
    media = media_store.save_all(uploads, base_url=request_base_url(request))

    record = SatisfactionService(session).record(payload, media)
    return ok(SatisfactionRead.model_validate(record), message="Satisfy record created successfully.", status_code=status.HTTP_201_CREATED)


@satisfy_router.get("")
def query_satisfaction(
    ticket_id: str | None = Query(None),
    response_person_id: str | None = Query(None),
    user_id: str | None = Query(None),
    session: Session = Depends(get_db),
):
    items = SatisfactionService(session).query(ticket_id, response_person_id=response_person_id, user_id=user_id)
    return ok(items, count=len(items))


@satisfy_router.put("/{record_id}")
def update_satisfaction(
    record_id: str,
    request: Request,
    type: str | None = Form(None),
    description: str | None = Form(None),
    priority: str | None = Form(None),
    status_: str | None = Form(None, alias="status"),
    voice_note: UploadFile | None = File(None),
    video: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    payload = validate_payload(
        SatisfactionUpdate,
        {"type": type, "description": description, "priority": priority, "status": status_},
    )
    uploads = read_uploads(voice_note=voice_note, video=video, image=image)
    media = media_store.save_all(uploads, base_url=request_base_url(request))

    record = SatisfactionService(session).update(record_id, payload, media)
    return ok(SatisfactionRead.model_validate(record), message="Satisfy record updated successfully.")


@satisfy_router.delete("/responses/delete-all")
def delete_all_satisfaction(session: Session = Depends(get_db)):
    deleted = SatisfactionService(session).purge()
    return ok({"deleted_count": deleted}, message="All responses deleted successfully.")
