from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from helpdesk.core.config import get_settings
from helpdesk.models import Base


def enable_sqlite_savepoints(engine: Engine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINT works on pysqlite."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:
        connection.exec_driver_sql("BEGIN")


_settings = get_settings()
_database_url = _settings.database_url
_url = make_url(_database_url)

if _url.drivername.startswith("sqlite") and _url.database and _url.database != ":memory:":
    db_path = Path(_url.database).expanduser()
    if db_path.parent:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    # Rebuild URL so SQLAlchemy can handle relative paths nicely
    _database_url = f"sqlite:///{db_path}"

_engine = create_engine(
    _database_url,
    echo=False,
    connect_args={"check_same_thread": False} if _url.drivername.startswith("sqlite") else {},
)
if _url.drivername.startswith("sqlite"):
    enable_sqlite_savepoints(_engine)

SessionLocal = sessionmaker(bind=_engine, autocommit=False, autoflush=False, expire_on_commit=False)


def init_db() -> None:
    Base.metadata.create_all(bind=_engine)


@contextmanager
def db_session() -> Generator[Session, None, None]:
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Generator[Session, None, None]:
    with db_session() as session:
        yield session
