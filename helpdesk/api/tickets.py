from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from helpdesk.api.responses import ok, parse_range, read_uploads, request_base_url
from helpdesk.core.errors import validate_payload
from helpdesk.schemas import (
    TicketCreate,
    TicketForward,
    TicketRead,
    TicketStatusUpdate,
    TicketWithSender,
)
from helpdesk.services.db import get_db
from helpdesk.services.directory import DirectoryService
from helpdesk.services.media import MediaStore, get_media_store
from helpdesk.services.reports import ReportService
from helpdesk.services.tickets import TicketService

router = APIRouter(prefix="/ticket", tags=["tickets"])


@router.post("")
def create_ticket(
    request: Request,
    user_id: str | None = Form(None),
    recipient_ids: str | None = Form(None),
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
        TicketCreate,
        {
            "user_id": user_id,
            "recipient_ids": recipient_ids,
            "type": type,
            "description": description,
            "priority": priority,
            "deadline": deadline,
            "rights": rights,
        },
    )
    uploads = read_uploads(voice_note=voice_note, video=video, image=image)
    media = media_store.save_all(uploads, base_url=request_base_url(request))

    ticket = TicketService(session).create_ticket(payload, media)
    return ok(
        TicketRead.model_validate(ticket),
        message="Ticket created successfully.",
        status_code=status.HTTP_201_CREATED,
    )


@router.put("/forward")
def forward_ticket(payload: TicketForward, session: Session = Depends(get_db)):
    ticket = TicketService(session).forward_ticket(payload)
    return ok(TicketRead.model_validate(ticket), message="Ticket forwarded successfully.")


@router.patch("/update-status")
def update_ticket_status(payload: TicketStatusUpdate, session: Session = Depends(get_db)):
    ticket = TicketService(session).update_status(payload)
    return ok(TicketRead.model_validate(ticket), message="Ticket status updated successfully.")


@router.get("/summary/{user_id}")
def creator_summary(
    user_id: str,
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    session: Session = Depends(get_db),
):
    start, end = parse_range(from_, to)
    totals = TicketService(session).creator_summary(user_id, start=start, end=end)
    return ok({"user_id": user_id, **totals.model_dump(mode="json")})


@router.get("/filter")
def filter_tickets(
    user_id: str = Query(...),
    status_: str = Query(..., alias="status"),
    from_: str | None = Query(None, alias="from"),
    to: str | None = Query(None),
    session: Session = Depends(get_db),
):
    # A range is honoured only when both ends are given, otherwise month-to-date.
    start, end = parse_range(from_, to) if from_ and to else (None, None)
    tickets = ReportService(session).filter_with_assignments(user_id, status=status_, start=start, end=end)
    return ok(tickets)


@router.get("/filtertwo")
def delegated_tickets(
    user_id: str | None = Query(None),
    manager_id: str | None = Query(None),
    session: Session = Depends(get_db),
):
    tickets = ReportService(session).delegated_tickets(user_id=user_id, manager_id=manager_id)
    return ok(tickets)


@router.get("/tickets")
def tickets_for_user(
    user_id: str = Query(...),
    status_: str | None = Query(None, alias="status"),
    session: Session = Depends(get_db),
):
    tickets = TicketService(session).tickets_for_user(user_id, status=status_)
    return ok([TicketRead.model_validate(t) for t in tickets], count=len(tickets))


@router.get("/tickets/overdue")
def overdue_tickets(
    user_id: str | None = Query(None),
    recipient_id: str | None = Query(None),
    session: Session = Depends(get_db),
):
    return ok(ReportService(session).overdue(user_id=user_id, recipient_id=recipient_id))


@router.get("/tickets/categorized")
def categorized_tickets(session: Session = Depends(get_db)):
    return ok(ReportService(session).categorized())


@router.delete("/tickets/delete-all")
def delete_all_tickets(session: Session = Depends(get_db)):
    deleted = TicketService(session).purge()
    return ok({"deleted_count": deleted}, message="All tickets deleted successfully.")


@router.get("/recipient/totaltickets/{recipient_id}")
def recipient_totals(recipient_id: str, session: Session = Depends(get_db)):
    totals = TicketService(session).recipient_totals(recipient_id)
    return ok({"recipient_id": recipient_id, **totals.model_dump(mode="json")})


@router.get("/recipient/{recipient_id}")
def tickets_for_recipient(
    recipient_id: str,
    status_: str | None = Query(None, alias="status"),
    type_: str | None = Query(None, alias="type"),
    session: Session = Depends(get_db),
):
    tickets = TicketService(session).tickets_for_recipient(recipient_id, status=status_, type_=type_)
    senders = DirectoryService(session).briefs(t.user_id for t in tickets)
    details = [TicketWithSender(ticket=TicketRead.model_validate(t), sender=senders.get(t.user_id)) for t in tickets]
    return ok(details, count=len(details))


@router.get("/count-today/{user_id}")
def count_today(user_id: str, session: Session = Depends(get_db)):
    return ok(TicketService(session).count_today(user_id))


@router.get("/admin-summary")
def admin_summary(user_id: str = Query(...), session: Session = Depends(get_db)):
    return ok(ReportService(session).admin_summary(user_id))


@router.get("/getmedia/{filename}")
def get_media(filename: str, media_store: MediaStore = Depends(get_media_store)):
    return FileResponse(media_store.resolve(filename))


@router.get("/{ticket_id}")
def get_ticket(ticket_id: str, session: Session = Depends(get_db)):
    return ok(TicketRead.model_validate(TicketService(session).get_ticket(ticket_id)))
