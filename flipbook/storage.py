from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class LinkRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    identifier: str
    storage_url: str
    uploaded_at: datetime


class InMemoryLinkStore:
    """Lock-guarded identifier -> LinkRecord map for local development."""

    def __init__(self) -> None:
        self._links: Dict[str, LinkRecord] = {}
        self._lock = threading.Lock()

    def put(self, record: LinkRecord) -> None:
        with self._lock:
            self._links[record.identifier] = record

    def get(self, identifier: str) -> Optional[LinkRecord]:
        with self._lock:
            record = self._links.get(identifier)
        return record.model_copy() if record else None

    def recent(self, limit: int) -> List[LinkRecord]:
        with self._lock:
            rows = list(self._links.values())
        rows.sort(key=lambda r: r.identifier)
        rows.sort(key=lambda r: r.uploaded_at, reverse=True)
        return [r.model_copy() for r in rows[:limit]]
