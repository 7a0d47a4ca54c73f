from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from helpdesk.api.responses import ok
from helpdesk.schemas import UserCreate, UserRead
from helpdesk.services.db import get_db
from helpdesk.services.directory import DirectoryService

router = APIRouter(prefix="/users", tags=["directory"])


@router.post("")
def create_user(payload: UserCreate, session: Session = Depends(get_db)):
    user = DirectoryService(session).create_user(payload)
    return ok(UserRead.model_validate(user), message="User created.", status_code=status.HTTP_201_CREATED)


@router.get("")
def list_users(role: str | None = Query(None), session: Session = Depends(get_db)):
    users = DirectoryService(session).list_users(role)
    return ok([UserRead.model_validate(u) for u in users], count=len(users))
