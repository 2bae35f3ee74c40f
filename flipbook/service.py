from __future__ import annotations

import logging
import os
import re
import secrets
from datetime import datetime, timezone
from typing import Callable, List, Optional
from urllib.parse import urlencode

from . import models, storage
from .errors import (
    FileTooLarge,
    InvalidFileType,
    LinkNotFound,
    MalformedRequest,
    PersistenceError,
    StorageError,
    UploadFailed,
)
from .object_store import MinioBlobStore
from .repositories import MAX_HISTORY_LIMIT, LinkRepository

log = logging.getLogger("flipbook.service")

PDF_CONTENT_TYPE = "application/pdf"
MAX_BASENAME_LENGTH = 50
_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def make_identifier(filename: str, now: datetime, token: Optional[str] = None) -> str:
    """
    Storage-key-safe identifier: sanitized base name, millisecond timestamp
    and a random hex token, e.g. ``report-1718000000000-a1b2c3.pdf``.
    """
    stem = os.path.splitext(os.path.basename(filename or ""))[0]
    safe_name = _UNSAFE_CHARS.sub("-", stem)[:MAX_BASENAME_LENGTH] or "document"
    token = token or secrets.token_hex(3)
    millis = int(now.timestamp() * 1000)
    return f"{safe_name}-{millis}-{token}.pdf"


def shareable_url(frontend_url: str, identifier: str) -> str:
    return f"{frontend_url.rstrip('/')}/?{urlencode({'file': identifier})}"


class LinkService:
    """
    Coordinates blob storage and the link registry for uploads, shared link
    lookups and the recent uploads list.
    """

    def __init__(
        self,
        blobs: MinioBlobStore,
        links: LinkRepository,
        *,
        max_upload_bytes: int,
        frontend_url: str,
        history_default_limit: int = MAX_HISTORY_LIMIT,
        history_max_limit: int = MAX_HISTORY_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.blobs = blobs
        self.links = links
        self.max_upload_bytes = max_upload_bytes
        self.frontend_url = frontend_url
        self.history_default_limit = history_default_limit
        self.history_max_limit = min(history_max_limit, MAX_HISTORY_LIMIT)
        self.clock = clock

    def validate_upload(self, filename: Optional[str], content_type: Optional[str], size: int) -> None:
        if not filename:
            raise MalformedRequest('No PDF file uploaded. Field name must be "bookbuddy".')
        if (content_type or "").split(";")[0].strip().lower() != PDF_CONTENT_TYPE:
            raise InvalidFileType()
        if size > self.max_upload_bytes:
            raise FileTooLarge(f"File too large. Maximum size is {self.max_upload_bytes} bytes.")

    def upload(self, filename: Optional[str], content_type: Optional[str], content: bytes) -> models.UploadResult:
        self.validate_upload(filename, content_type, len(content))

        now = self.clock()
        identifier = make_identifier(filename, now)
        try:
            url = self.blobs.put(identifier, content, PDF_CONTENT_TYPE)
        except StorageError as exc:
            log.error("Blob upload failed for %s", identifier, exc_info=True)
            raise UploadFailed("Failed to save file to cloud storage.") from exc

        try:
            self.links.upsert(identifier, url, now)
        except (PersistenceError, ValueError) as exc:
            log.error("Registry write failed for %s", identifier, exc_info=True)
            self._discard_orphan(identifier)
            raise UploadFailed("Failed to finalize permanent link. Database error.") from exc

        log.info("Uploaded %s (%d bytes)", identifier, len(content))
        return models.UploadResult(
            identifier=identifier,
            storage_url=url,
            shareable_url=shareable_url(self.frontend_url, identifier),
        )

    def _discard_orphan(self, identifier: str) -> None:
        try:
            self.blobs.delete(identifier)
        except StorageError:
            log.warning("Could not remove orphaned blob %s", identifier, exc_info=True)

    def resolve(self, identifier: Optional[str]) -> storage.LinkRecord:
        if not identifier or not identifier.strip():
            raise MalformedRequest("Missing filename query parameter.")
        record = self.links.get(identifier)
        if record is None:
            raise LinkNotFound(f"File not found for ID: {identifier}")
        return record

    def history(self, limit: Optional[int] = None) -> List[storage.LinkRecord]:
        if limit is None:
            limit = self.history_default_limit
        if limit < 1:
            raise MalformedRequest("limit must be a positive integer.")
        return self.links.list_recent(min(limit, self.history_max_limit))

    def check_registry(self) -> None:
        self.links.ping()
