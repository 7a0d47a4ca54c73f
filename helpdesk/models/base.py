from __future__ import annotations

import re
from datetime import datetime, timezone

from nanoid import generate
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy.types import TypeDecorator

from helpdesk.utils.time import utc_now  # noqa: F401

ID_SIZE = 21
ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{%d}$" % ID_SIZE)


def new_id() -> str:
    return generate(size=ID_SIZE)


def is_valid_id(value: str | None) -> bool:
    return bool(value) and ID_PATTERN.match(value) is not None


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, always hands back aware UTC (SQLite drops tzinfo)."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    def process_result_value(self, value: datetime | None, dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Base(DeclarativeBase):
    @declared_attr.directive
    def __tablename__(cls) -> str:
        snake = re.sub(r"(?<!^)(?=[A-Z])", "_", cls.__name__).lower()
        return f"{snake}s"
