from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, DateTime, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings
from .errors import PersistenceError

Base = declarative_base()


class Link(Base):
    __tablename__ = "flipbook_links"

    identifier = Column("filename", String, primary_key=True)
    storage_url = Column("blob_url", String, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), nullable=False, index=True)


_engine: Optional[Engine] = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(get_settings().DATABASE_URL, pool_pre_ping=True)
        SessionLocal.configure(bind=_engine)
    return _engine


def init_db() -> None:
    Base.metadata.create_all(bind=get_engine())


def open_session() -> Session:
    """Session bound to the configured database; engine setup errors become PersistenceError."""
    try:
        get_engine()
    except (SQLAlchemyError, ImportError) as exc:
        raise PersistenceError("Failed to connect to the database.") from exc
    return SessionLocal()
