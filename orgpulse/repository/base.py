"""
Abstract record repository interface for OrgPulse.

The record store is an external collaborator: the analytics engine only
consumes read-only snapshots of initiatives, issues, issue clusters and audit
events. This module defines the contract every record source must satisfy so
the engine can run against a database, an API client or an in-memory fixture
without changing analytical code.
"""

from abc import ABC, abstractmethod
from typing import Optional

from orgpulse.models.records import (
    AuditEventRecord,
    InitiativeRecord,
    IssueClusterRecord,
    IssueRecord,
    TimeRange,
)


class RecordRepository(ABC):
    """
    Abstract base class for all record sources.

    Implementations should ensure:
    - Records are returned ordered by creation time ascending
      (audit events by timestamp)
    - A ``None`` or empty time range means "no filter, return all"
    - Reads are side-effect free and safe to issue concurrently
    - Failures surface as ``RepositoryError``; retries, if any, happen here
      and never inside the analytics engine
    """

    @abstractmethod
    def fetch_initiatives(
        self, time_range: Optional[TimeRange] = None
    ) -> list[InitiativeRecord]:
        """
        Read initiative records created within the time range.

        Args:
            time_range: Optional creation-time filter

        Returns:
            Initiatives ordered by ``created_at`` ascending

        Raises:
            RepositoryError: If the record store cannot be read
        """
        pass

    @abstractmethod
    def fetch_issues(self, time_range: Optional[TimeRange] = None) -> list[IssueRecord]:
        """
        Read issue records created within the time range.

        Args:
            time_range: Optional creation-time filter

        Returns:
            Issues ordered by ``created_at`` ascending

        Raises:
            RepositoryError: If the record store cannot be read
        """
        pass

    @abstractmethod
    def fetch_audit_events(
        self, time_range: Optional[TimeRange] = None
    ) -> list[AuditEventRecord]:
        """
        Read audit events recorded within the time range.

        Args:
            time_range: Optional timestamp filter

        Returns:
            Audit events ordered by ``timestamp`` ascending

        Raises:
            RepositoryError: If the record store cannot be read
        """
        pass

    @abstractmethod
    def fetch_clusters(self) -> list[IssueClusterRecord]:
        """
        Read all issue clusters.

        Clusters are reference data and are never time-filtered.

        Raises:
            RepositoryError: If the record store cannot be read
        """
        pass
