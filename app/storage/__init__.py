"""
Storage layer exports.
"""

from __future__ import annotations

from functools import lru_cache

from app.config import StorageSettings, get_storage_settings
from app.storage.base import ReadingStorage
from app.storage.memory_storage import InMemoryReadingStorage
from app.storage.sqlalchemy_storage import SQLAlchemyReadingStorage


def build_reading_storage(settings: StorageSettings) -> ReadingStorage:
    """
    Pick the storage implementation once, from configuration.
    """

    if settings.backend == "memory":
        return InMemoryReadingStorage()

    from db.session import get_session_factory

    return SQLAlchemyReadingStorage(session_factory=get_session_factory())


@lru_cache(maxsize=1)
def get_reading_storage() -> ReadingStorage:
    """
    Return the process-wide storage collaborator.
    """

    return build_reading_storage(get_storage_settings())


__all__ = [
    "InMemoryReadingStorage",
    "ReadingStorage",
    "SQLAlchemyReadingStorage",
    "build_reading_storage",
    "get_reading_storage",
]
