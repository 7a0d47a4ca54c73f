from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from helpdesk.api.responses import ok, read_uploads, request_base_url
from helpdesk.core.errors import validate_payload
from helpdesk.schemas import AssignmentCreate, AssignmentRead, AssignmentStatusUpdate
from helpdesk.services.assignments import AssignmentService
from helpdesk.services.db import get_db
from helpdesk.services.media import MediaStore, get_media_store

router = APIRouter(prefix="/assign", tags=["assignments"])


@router.post("/assign")
def create_assignment(
    request: Request,
    user_id: str | None = Form(None),
    assign_to: str | None = Form(None),
    details: str | None = Form(None),
    priority: str | None = Form(None),
    target_date: str | None = Form(None),
    status_: str | None = Form(None, alias="status"),
    ticket_id: str | None = Form(None),
    voice_note: UploadFile | None = File(None),
    video: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    session: Session = Depends(get_db),
    media_store: MediaStore = Depends(get_media_store),
):
    payload = validate_payload(
        AssignmentCreate,
        {
            "user_id": user_id,
            "assign_to": assign_to,
            "details": details,
            "priority": priority,
            "target_date": target_date,
            "status": status_,
            "ticket_id": ticket_id,
        },
    )
    uploads = read_uploads(voice_note=voice_note, video=video, image=image)
    media = media_store.save_all(uploads, base_url=request_base_url(request))

    assignment = AssignmentService(session).create_assignment(payload, media)
    return ok(AssignmentRead.model_validate(assignment), status_code=status.HTTP_201_CREATED)


@router.get("/assign")
def query_assignments(
    user_id: str = Query(...),
    recipient_id: str | None = Query(None),
    status_: str | None = Query(None, alias="status"),
    session: Session = Depends(get_db),
):
    result = AssignmentService(session).query(user_id, recipient_id=recipient_id, status=status_)
    return ok(result)


@router.get("/assign/by-date-category")
def assignments_by_date(
    user_id: str = Query(...),
    recipient_id: str = Query(...),
    session: Session = Depends(get_db),
):
    return ok(AssignmentService(session).by_date_category(user_id, recipient_id))


@router.get("/assign/count")
def assignment_count(recipient_id: str = Query(...), session: Session = Depends(get_db)):
    count = AssignmentService(session).count_for_assignee(recipient_id)
    return ok({"recipient_id": recipient_id, "assignment_count": count})


@router.get("/adminreport-count")
def assignee_report(user_id: str = Query(...), session: Session = Depends(get_db)):
    return ok(AssignmentService(session).assignee_report(user_id))


@router.get("/admin-assignments")
def role_assignments(
    role: str = Query("Admin"),
    status_: str | None = Query("Working", alias="status"),
    session: Session = Depends(get_db),
):
    result = AssignmentService(session).role_assignments(role, status=status_)
    return ok(result, message=f"{role} users with their assignments")


@router.get("/assignments/working")
def working_assignments(session: Session = Depends(get_db)):
    service = AssignmentService(session)
    items = service.with_people(service.list_all(status="Working"))
    return ok(items, count=len(items))


@router.get("/assignments")
def all_assignments(session: Session = Depends(get_db)):
    service = AssignmentService(session)
    items = service.with_people(service.list_all())
    return ok(items, count=len(items))


@router.delete("/assignments/delete-all")
def delete_all_assignments(session: Session = Depends(get_db)):
    deleted = AssignmentService(session).purge()
    return ok({"deleted_count": deleted}, message="All assignments deleted successfully.")


@router.put("/update-status/{assignment_id}")
def update_assignment_status(assignment_id: str, payload: AssignmentStatusUpdate, session: Session = Depends(get_db)):
    assignment = AssignmentService(session).update_status(assignment_id, payload.status)
    return ok(AssignmentRead.model_validate(assignment), message="Status updated successfully.")
