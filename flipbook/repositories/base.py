from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from urllib.parse import urlparse

from .. import storage

MAX_HISTORY_LIMIT = 50


class LinkRepository(ABC):
    """
    Link registry: identifier -> storage URL, newest uploads first.
    Every call goes to the backing store; nothing is cached.
    """

    max_limit: int = MAX_HISTORY_LIMIT

    @abstractmethod
    def upsert(self, identifier: str, storage_url: str, now: datetime) -> None:
        raise NotImplementedError

    @abstractmethod
    def get(self, identifier: str) -> Optional[storage.LinkRecord]:
        raise NotImplementedError

    @abstractmethod
    def list_recent(self, limit: int = MAX_HISTORY_LIMIT) -> List[storage.LinkRecord]:
        raise NotImplementedError

    @abstractmethod
    def ping(self) -> None:
        raise NotImplementedError

    def _check_link(self, identifier: str, storage_url: str) -> None:
        if not identifier:
            raise ValueError("identifier must be non-empty")
        parsed = urlparse(storage_url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"storage_url must be an absolute URL: {storage_url!r}")

    def _check_limit(self, limit: int) -> int:
        if limit < 1:
            raise ValueError("limit must be positive")
        return min(limit, self.max_limit)
