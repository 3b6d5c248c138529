"""
Record repository layer.

The analytics engine consumes read-only record snapshots through the
``RecordRepository`` contract. The in-memory implementation is the default
wiring; production deployments provide their own implementation backed by
the organization's record store.
"""

from functools import lru_cache

from orgpulse.config import get_settings

from .base import RecordRepository
from .memory import InMemoryRecordRepository


@lru_cache
def get_repository() -> RecordRepository:
    """
    Get cached repository instance (singleton).

    Loads ``records_path`` when configured, otherwise starts empty.

    Returns:
        RecordRepository implementation instance
    """
    settings = get_settings()
    if settings.records_path:
        return InMemoryRecordRepository.from_json_file(settings.records_path)
    return InMemoryRecordRepository()


__all__ = [
    "RecordRepository",
    "InMemoryRecordRepository",
    "get_repository",
]
