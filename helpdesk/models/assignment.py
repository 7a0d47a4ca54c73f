from __future__ import annotations

from datetime import datetime
from typing import Iterable

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UTCDateTime, new_id, utc_now


class AssignmentAssignee(Base):
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    assignment_id: Mapped[str] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"), index=True, nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Assignment(Base):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    # Null for a standalone task that was never attached to a ticket.
    ticket_id: Mapped[str | None] = mapped_column(String(32), index=True, nullable=True)
    user_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False)
    voice_note_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    priority: Mapped[str] = mapped_column(String(32), nullable=False)
    target_date: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)

    assignees: Mapped[list[AssignmentAssignee]] = relationship(
        order_by=AssignmentAssignee.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def assign_to(self) -> list[str]:
        return [a.user_id for a in self.assignees]

    def set_assignees(self, user_ids: Iterable[str]) -> None:
        self.assignees = [AssignmentAssignee(user_id=uid, position=i) for i, uid in enumerate(user_ids)]
