"""
Pytest configuration and shared fixtures for the OrgPulse test suite.

Provides record factories, snapshot builders, an in-memory repository and an
API client wired to a test-scoped insights service.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

import pytest

# Set testing environment BEFORE importing the app
os.environ["TESTING"] = "true"
os.environ["RECORDS_PATH"] = ""

from orgpulse.models.insights import (
    AnomalyResult,
    RecommendationResult,
    TrendResult,
)
from orgpulse.models.enums import (
    AnomalyType,
    ClusterSeverity,
    InitiativeStatus,
    Priority,
    RecommendationCategory,
    Severity,
)
from orgpulse.models.records import (
    AuditEventRecord,
    InitiativeRecord,
    IssueClusterRecord,
    IssueRecord,
    RecordSnapshot,
)
from orgpulse.repository.base import RecordRepository
from orgpulse.repository.memory import InMemoryRecordRepository

# Saturday; every test computes relative to this fixed capture time
NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


def make_initiative(
    status: InitiativeStatus = InitiativeStatus.ACTIVE,
    created_at: Optional[datetime] = None,
    **overrides,
) -> InitiativeRecord:
    """Factory function for creating test InitiativeRecord objects."""
    created_at = created_at or NOW - timedelta(days=5)
    defaults = dict(
        initiative_id=f"ini_{uuid4().hex[:8]}",
        status=status,
        progress=50.0,
        created_at=created_at,
        updated_at=created_at,
    )
    defaults.update(overrides)
    return InitiativeRecord(**defaults)


def make_issue(
    severity_score: Optional[float] = 40.0,
    created_at: Optional[datetime] = None,
    **overrides,
) -> IssueRecord:
    """Factory function for creating test IssueRecord objects."""
    defaults = dict(
        issue_id=f"iss_{uuid4().hex[:8]}",
        severity_score=severity_score,
        votes=0,
        created_at=created_at or NOW - timedelta(days=5),
    )
    defaults.update(overrides)
    return IssueRecord(**defaults)


def make_cluster(
    cluster_id: str = "cl_001",
    severity: ClusterSeverity = ClusterSeverity.HIGH,
    initiative_ids: tuple = (),
    **overrides,
) -> IssueClusterRecord:
    """Factory function for creating test IssueClusterRecord objects."""
    defaults = dict(
        cluster_id=cluster_id,
        name=f"Cluster {cluster_id}",
        severity=severity,
        initiative_ids=initiative_ids,
        created_at=NOW - timedelta(days=20),
    )
    defaults.update(overrides)
    return IssueClusterRecord(**defaults)


def make_audit_event(
    action: str = "VIEW_DASHBOARD",
    timestamp: Optional[datetime] = None,
    **overrides,
) -> AuditEventRecord:
    """Factory function for creating test AuditEventRecord objects."""
    defaults = dict(
        event_id=f"evt_{uuid4().hex[:8]}",
        action=action,
        timestamp=timestamp or NOW - timedelta(days=2),
    )
    defaults.update(overrides)
    return AuditEventRecord(**defaults)


def make_snapshot(
    initiatives=(),
    issues=(),
    clusters=(),
    audit_events=(),
    captured_at: datetime = NOW,
) -> RecordSnapshot:
    """Factory function for creating test RecordSnapshot objects."""
    return RecordSnapshot(
        initiatives=tuple(initiatives),
        issues=tuple(issues),
        clusters=tuple(clusters),
        audit_events=tuple(audit_events),
        captured_at=captured_at,
    )


# ---------------------------------------------------------------------------
# Result factories
# ---------------------------------------------------------------------------


def make_trend(
    metric: str = "Initiative Completion Rate",
    change_percent: int = 5,
    confidence: int = 85,
    **overrides,
) -> TrendResult:
    """Factory function for creating test TrendResult objects."""
    defaults = dict(
        metric=metric,
        current_value=50.0,
        predicted_value=max(0.0, min(100.0, 50.0 + change_percent)),
        change_percent=change_percent,
        confidence=confidence,
        timeframe="30 days",
        factors=[],
        recommendation="Maintain current trajectory",
    )
    defaults.update(overrides)
    return TrendResult(**defaults)


def make_anomaly(
    severity: Severity = Severity.HIGH,
    title: str = "Unusual Issue Creation Spike",
    detected_at: datetime = NOW,
    **overrides,
) -> AnomalyResult:
    """Factory function for creating test AnomalyResult objects."""
    defaults = dict(
        anomaly_id=f"volume-spike-{uuid4().hex[:6]}",
        type=AnomalyType.VOLUME_SPIKE,
        severity=severity,
        title=title,
        description="Issue creation has increased by 80% above normal",
        detected_at=detected_at,
        expected_value=10.0,
        actual_value=18.0,
        deviation=8.0,
        root_causes=[],
        suggested_action="Investigate root causes and implement preventive measures",
        impact_area="Operational Stability",
    )
    defaults.update(overrides)
    return AnomalyResult(**defaults)


def make_recommendation(
    priority: Priority = Priority.MEDIUM,
    success_probability: int = 75,
    category: RecommendationCategory = RecommendationCategory.EFFICIENCY,
    title: Optional[str] = None,
    **overrides,
) -> RecommendationResult:
    """Factory function for creating test RecommendationResult objects."""
    rec_id = overrides.pop("recommendation_id", f"rec-{uuid4().hex[:6]}")
    defaults = dict(
        recommendation_id=rec_id,
        priority=priority,
        category=category,
        title=title or f"Recommendation {rec_id}",
        description="Rule fired",
        expected_impact="Some impact",
        time_to_implement="1-2 weeks",
        resource_requirement="Low",
        success_probability=success_probability,
        related_metrics=[],
        action_steps=[],
    )
    defaults.update(overrides)
    return RecommendationResult(**defaults)


# ---------------------------------------------------------------------------
# Repository doubles
# ---------------------------------------------------------------------------


class FailingRepository(RecordRepository):
    """Repository whose reads always fail, for degradation tests."""

    def __init__(self, error: Exception = None):
        self.error = error or ConnectionError("record store unreachable")

    def fetch_initiatives(self, time_range=None):
        raise self.error

    def fetch_issues(self, time_range=None):
        raise self.error

    def fetch_audit_events(self, time_range=None):
        raise self.error

    def fetch_clusters(self):
        raise self.error


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def empty_snapshot() -> RecordSnapshot:
    return make_snapshot()


@pytest.fixture
def populated_repository() -> InMemoryRecordRepository:
    """
    Repository with a mixed, realistic record set:
    rising completion, a critical-heavy issue backlog and low assistant usage.
    """
    initiatives = [
        make_initiative(
            status=InitiativeStatus.COMPLETED if i >= 12 else InitiativeStatus.ACTIVE,
            created_at=NOW - timedelta(days=60 - i),
            estimated_hours=100.0,
            actual_hours=90.0,
            budget=10_000.0,
        )
        for i in range(20)
    ]
    issues = [
        make_issue(
            severity_score=90.0 if i % 2 == 0 else 30.0,
            created_at=NOW - timedelta(days=25 - i),
        )
        for i in range(24)
    ]
    events = [
        make_audit_event(
            action="AI_ANALYZE_ISSUE" if i % 10 == 0 else "VIEW_DASHBOARD",
            timestamp=NOW - timedelta(days=20, hours=-i),
        )
        for i in range(30)
    ]
    return InMemoryRecordRepository(
        initiatives=initiatives,
        issues=issues,
        clusters=[make_cluster()],
        audit_events=events,
    )


@pytest.fixture
def client(populated_repository):
    """
    FastAPI TestClient backed by a cache-less insights service over the
    populated in-memory repository.
    """
    from fastapi.testclient import TestClient

    from orgpulse.main import app
    from orgpulse.services import InsightsService, get_insights_service

    service = InsightsService(repository=populated_repository, lookback_days=0)
    app.dependency_overrides[get_insights_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
