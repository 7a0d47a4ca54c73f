from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from helpdesk.api.responses import ok
from helpdesk.schemas import ReminderCreate, ReminderRead
from helpdesk.services.db import get_db
from helpdesk.services.reminders import ReminderService

router = APIRouter(prefix="/reminder", tags=["reminders"])


@router.post("/reminder")
def send_reminder(payload: ReminderCreate, session: Session = Depends(get_db)):
    outcome = ReminderService(session).send_reminder(payload)
    reminder = ReminderRead.model_validate(outcome.reminder)

    if outcome.capped:
        return ok(reminder, message="All reminders are sent already.", capped=True)
    if outcome.created:
        return ok(reminder, message="Reminder created.", capped=False, status_code=status.HTTP_201_CREATED)
    return ok(reminder, message="Reminder count updated.", capped=False)


@router.get("/reminders/{ticket_id}")
def reminders_for_ticket(ticket_id: str, session: Session = Depends(get_db)):
    return ok(ReminderService(session).for_ticket(ticket_id))
