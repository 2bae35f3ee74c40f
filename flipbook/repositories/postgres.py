from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .base import MAX_HISTORY_LIMIT, LinkRepository
from .. import storage
from ..errors import PersistenceError
from ..sql_models import Link as LinkModel

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class PostgresLinkRepository(LinkRepository):
    def __init__(self, db: Session):
        self.db = db

    def _upsert_construct(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERTS[dialect]
        except KeyError:
            raise PersistenceError(
                "Failed to finalize permanent link. Database error."
            ) from NotImplementedError(
                f"link upserts need a postgresql or sqlite database, not {dialect!r}"
            )

    def upsert(self, identifier: str, storage_url: str, now: datetime) -> None:
        self._check_link(identifier, storage_url)
        insert = self._upsert_construct()
        stmt = insert(LinkModel.__table__).values(
            filename=identifier, blob_url=storage_url, uploaded_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["filename"],
            set_={
                "blob_url": stmt.excluded.blob_url,
                "uploaded_at": stmt.excluded.uploaded_at,
            },
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to finalize permanent link. Database error.") from exc

    def get(self, identifier: str) -> Optional[storage.LinkRecord]:
        try:
            link_model = self.db.get(LinkModel, identifier, populate_existing=True)
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Internal server error during database lookup.") from exc
        if link_model:
            return storage.LinkRecord.model_validate(link_model)
        return None

    def list_recent(self, limit: int = MAX_HISTORY_LIMIT) -> List[storage.LinkRecord]:
        query = (
            select(LinkModel)
            .order_by(LinkModel.uploaded_at.desc(), LinkModel.identifier.asc())
            .limit(self._check_limit(limit))
        )
        try:
            link_models = self.db.execute(query).scalars().all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to fetch history.") from exc
        return [storage.LinkRecord.model_validate(link) for link in link_models]

    def ping(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError("Failed to connect to the database.") from exc
