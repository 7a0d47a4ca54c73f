from __future__ import annotations

from datetime import datetime
from typing import Iterable

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, UTCDateTime, new_id, utc_now


class TicketRecipient(Base):
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ticket_id: Mapped[str] = mapped_column(ForeignKey("tickets.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Ticket(Base):
    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(32), index=True, nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    priority: Mapped[str] = mapped_column(String(32), nullable=False)
    deadline: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    voice_note_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending", index=True)
    rights: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    recipients: Mapped[list[TicketRecipient]] = relationship(
        order_by=TicketRecipient.position,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def recipient_ids(self) -> list[str]:
        return [r.user_id for r in self.recipients]

    def set_recipients(self, user_ids: Iterable[str]) -> None:
        self.recipients = [TicketRecipient(user_id=uid, position=i) for i, uid in enumerate(user_ids)]
