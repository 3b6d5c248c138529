"""
In-memory record repository.

Holds validated records in process memory, optionally loaded from a JSON
document of the form::

    {
        "initiatives": [{...}, ...],
        "issues": [{...}, ...],
        "clusters": [{...}, ...],
        "audit_events": [{...}, ...]
    }

Used by the CLI script, the default HTTP wiring and the test suite.
"""

import json
from pathlib import Path
from typing import Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from orgpulse.exceptions import RepositoryError
from orgpulse.models.records import (
    AuditEventRecord,
    InitiativeRecord,
    IssueClusterRecord,
    IssueRecord,
    TimeRange,
)

from .base import RecordRepository

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class InMemoryRecordRepository(RecordRepository):
    """
    Record repository backed by in-process lists.

    Records are kept sorted by creation time so reads satisfy the repository
    ordering contract regardless of insertion order.
    """

    def __init__(
        self,
        initiatives: Iterable[InitiativeRecord] = (),
        issues: Iterable[IssueRecord] = (),
        clusters: Iterable[IssueClusterRecord] = (),
        audit_events: Iterable[AuditEventRecord] = (),
    ):
        self._initiatives = sorted(initiatives, key=lambda r: r.created_at)
        self._issues = sorted(issues, key=lambda r: r.created_at)
        self._clusters = list(clusters)
        self._audit_events = sorted(audit_events, key=lambda r: r.timestamp)

    @classmethod
    def from_payload(cls, payload: dict) -> "InMemoryRecordRepository":
        """
        Build a repository from a decoded JSON document.

        A record that cannot be coerced (e.g. missing its identifier or
        timestamp) is skipped with a warning; the rest of the document loads.

        Raises:
            RepositoryError: If a record section is not a list
        """
        return cls(
            initiatives=_load_section(payload, "initiatives", InitiativeRecord),
            issues=_load_section(payload, "issues", IssueRecord),
            clusters=_load_section(payload, "clusters", IssueClusterRecord),
            audit_events=_load_section(payload, "audit_events", AuditEventRecord),
        )

    @classmethod
    def from_json_file(cls, path: Path | str) -> "InMemoryRecordRepository":
        """
        Load records from a JSON file.

        Raises:
            RepositoryError: If the file is missing, unreadable or invalid
        """
        path = Path(path)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise RepositoryError(f"Cannot load records from {path}: {e}") from e

        if not isinstance(payload, dict):
            raise RepositoryError(f"Records file {path} must contain a JSON object")

        repository = cls.from_payload(payload)
        logger.info(
            "records_loaded",
            path=str(path),
            initiatives=len(repository._initiatives),
            issues=len(repository._issues),
            clusters=len(repository._clusters),
            audit_events=len(repository._audit_events),
        )
        return repository

    def fetch_initiatives(
        self, time_range: Optional[TimeRange] = None
    ) -> list[InitiativeRecord]:
        return [r for r in self._initiatives if _in_range(time_range, r.created_at)]

    def fetch_issues(self, time_range: Optional[TimeRange] = None) -> list[IssueRecord]:
        return [r for r in self._issues if _in_range(time_range, r.created_at)]

    def fetch_audit_events(
        self, time_range: Optional[TimeRange] = None
    ) -> list[AuditEventRecord]:
        return [r for r in self._audit_events if _in_range(time_range, r.timestamp)]

    def fetch_clusters(self) -> list[IssueClusterRecord]:
        return list(self._clusters)


def _load_section(payload: dict, kind: str, model: type[T]) -> list[T]:
    raw = payload.get(kind) or []
    if not isinstance(raw, list):
        raise RepositoryError(f"Invalid record payload: '{kind}' must be a list")

    records = []
    for index, item in enumerate(raw):
        try:
            records.append(model(**item))
        except (ValidationError, TypeError) as e:
            logger.warning("record_skipped", kind=kind, index=index, error=str(e))
    return records


def _in_range(time_range: Optional[TimeRange], moment) -> bool:
    return time_range is None or time_range.contains(moment)
