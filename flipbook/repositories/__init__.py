from .base import MAX_HISTORY_LIMIT, LinkRepository
from .postgres import PostgresLinkRepository
from .in_memory import InMemoryLinkRepository
from .unavailable import UnavailableLinkRepository

__all__ = [
    "MAX_HISTORY_LIMIT",
    "PostgresLinkRepository",
    "InMemoryLinkRepository",
    "LinkRepository",
    "UnavailableLinkRepository",
]
