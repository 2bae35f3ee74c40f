from __future__ import annotations

from fastapi import status


class FlipbookError(Exception):
    """
    Base error carrying the HTTP status and the message shown to clients.
    The message never includes internal details; those go to the logs.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MalformedRequest(FlipbookError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Malformed request."


class InvalidFileType(FlipbookError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE
    message = "Only PDF files are allowed!"


class FileTooLarge(FlipbookError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    message = "File too large."


class LinkNotFound(FlipbookError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "File not found."


class PersistenceError(FlipbookError):
    message = "Internal server error during database access."


class StorageError(FlipbookError):
    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Failed to save file to cloud storage."


class UploadFailed(FlipbookError):
    message = "Upload failed. Please try again."
