from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from .base import MAX_HISTORY_LIMIT, LinkRepository
from .. import storage


class InMemoryLinkRepository(LinkRepository):
    def __init__(self, store: Optional[storage.InMemoryLinkStore] = None) -> None:
        self.store = store or storage.InMemoryLinkStore()

    def upsert(self, identifier: str, storage_url: str, now: datetime) -> None:
        self._check_link(identifier, storage_url)
        self.store.put(
            storage.LinkRecord(identifier=identifier, storage_url=storage_url, uploaded_at=now)
        )

    def get(self, identifier: str) -> Optional[storage.LinkRecord]:
        return self.store.get(identifier)

    def list_recent(self, limit: int = MAX_HISTORY_LIMIT) -> List[storage.LinkRecord]:
        return self.store.recent(self._check_limit(limit))

    def ping(self) -> None:
        return None
