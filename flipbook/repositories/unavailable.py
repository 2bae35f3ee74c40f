from __future__ import annotations

from datetime import datetime
from typing import List, NoReturn, Optional

from .base import MAX_HISTORY_LIMIT, LinkRepository
from .. import storage
from ..errors import PersistenceError


class UnavailableLinkRepository(LinkRepository):
    """
    Stands in when no database session could be opened. Every call raises
    the original PersistenceError so handlers report it like any other
    registry outage.
    """

    def __init__(self, error: PersistenceError) -> None:
        self.error = error

    def _fail(self) -> NoReturn:
        raise PersistenceError(self.error.message) from self.error

    def upsert(self, identifier: str, storage_url: str, now: datetime) -> None:
        self._fail()

    def get(self, identifier: str) -> Optional[storage.LinkRecord]:
        self._fail()

    def list_recent(self, limit: int = MAX_HISTORY_LIMIT) -> List[storage.LinkRecord]:
        self._fail()

    def ping(self) -> None:
        self._fail()
