from __future__ import annotations

from typing import Iterable

from loguru import logger
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from helpdesk.core.errors import ConflictError
from helpdesk.models import User
from helpdesk.schemas import UserBrief, UserCreate


class DirectoryService:
    """Resolves user ids to profile fields for joins and role checks."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        return self.session.get(User, user_id)

    def get_many(self, user_ids: Iterable[str | None]) -> dict[str, User]:
        ids = {uid for uid in user_ids if uid}
        if not ids:
            return {}
        stmt = select(User).where(User.id.in_(ids))
        return {user.id: user for user in self.session.scalars(stmt)}

    def by_role(self, role: str) -> list[User]:
        stmt = select(User).where(User.role == role).order_by(User.full_name)
        return list(self.session.scalars(stmt))

    def list_users(self, role: str | None = None) -> list[User]:
        if role:
            return self.by_role(role)
        return list(self.session.scalars(select(User).order_by(User.full_name)))

    def create_user(self, payload: UserCreate) -> User:
        clauses = [User.email == payload.email, User.username == payload.username]
        if payload.cnic:
            clauses.append(User.cnic == payload.cnic)
        existing = self.session.scalars(select(User).where(or_(*clauses))).first()
        if existing:
            duplicated = [
                name
                for name, ours, theirs in (
                    ("email", payload.email, existing.email),
                    ("username", payload.username, existing.username),
                    ("cnic", payload.cnic, existing.cnic),
                )
                if ours and ours == theirs
            ]
            raise ConflictError(f"User with the same {', '.join(duplicated)} already exists.", fields=duplicated)

        user = User(**payload.model_dump())
        self.session.add(user)
        self.session.flush()
        logger.info("Created user id={user_id} role={role}", user_id=user.id, role=user.role)
        return user

    def briefs(self, user_ids: Iterable[str | None]) -> dict[str, UserBrief]:
        return {uid: UserBrief.model_validate(user) for uid, user in self.get_many(user_ids).items()}


def get_directory_service(session: Session) -> DirectoryService:
    return DirectoryService(session=session)
