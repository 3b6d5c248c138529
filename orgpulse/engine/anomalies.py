"""
Anomaly Detector — threshold checks over recent operational records.

Runs three independent checks over the trailing window (default 30 days)
ending at the snapshot's capture time:

    1. Volume spike   — latest weekly issue count vs. mean weekly count
    2. Schedule slip  — overdue, unfinished initiatives vs. recent population
    3. Adoption drop  — assistant-feature audit events vs. a 20% baseline

Each check is wrapped in its own failure boundary: an unexpected error in one
check is logged and yields no anomaly from that check while the others still
run. Identifiers and timestamps derive from the snapshot, so repeated runs on
the same snapshot produce identical results.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Optional

import structlog

from orgpulse.models.enums import AnomalyType, Severity
from orgpulse.models.insights import AnomalyResult
from orgpulse.models.records import IssueRecord, RecordSnapshot

from .windows import mean

logger = structlog.get_logger(__name__)

# Volume spike: last week above 1.5x the weekly mean is high, above 2x critical
SPIKE_RATIO = 1.5
CRITICAL_SPIKE_RATIO = 2.0

# Schedule slip: more than 30% overdue is anomalous; 10% overdue is expected
OVERDUE_RATIO = 0.3
EXPECTED_OVERDUE_RATIO = 0.1

# Adoption: 20% of activity expected to use assistant features, below 70% of that is a drop
EXPECTED_ADOPTION_RATIO = 0.2
ADOPTION_FLOOR = 0.7


def week_start(moment: datetime) -> date:
    """Sunday-aligned start of the week containing moment (UTC)."""
    day = moment.date()
    return day - timedelta(days=(day.weekday() + 1) % 7)


def group_by_week(issues: list[IssueRecord]) -> list[tuple[date, int]]:
    """
    Count issues per week.

    Returns:
        (week_start, count) pairs for non-empty weeks, oldest first
    """
    counts: dict[date, int] = {}
    for issue in issues:
        key = week_start(issue.created_at)
        counts[key] = counts.get(key, 0) + 1
    return sorted(counts.items())


def spike_severity(actual: float, expected: float) -> Optional[Severity]:
    """
    Classify a volume spike from the actual/expected ratio.

    Returns:
        CRITICAL above 2x, HIGH above 1.5x, otherwise None (no spike)
    """
    if expected <= 0:
        return None
    if actual > expected * CRITICAL_SPIKE_RATIO:
        return Severity.CRITICAL
    if actual > expected * SPIKE_RATIO:
        return Severity.HIGH
    return None


class AnomalyDetector:
    """
    Detects abnormal recent behavior in a record snapshot.

    Attributes:
        window_days: Trailing days scanned by every check
        assistant_prefix: Audit action prefix marking assistant usage

    Example:
        >>> detector = AnomalyDetector(window_days=30)
        >>> anomalies = detector.detect_anomalies(snapshot)
        >>> [a.type.value for a in anomalies]
        ['volume_spike']
    """

    def __init__(self, window_days: int = 30, assistant_prefix: str = "AI_"):
        if window_days < 1:
            raise ValueError("window_days must be at least 1")
        self.window_days = window_days
        self.assistant_prefix = assistant_prefix
        self.logger = structlog.get_logger(__name__)

    def detect_anomalies(
        self,
        snapshot: RecordSnapshot,
        window_days: Optional[int] = None,
    ) -> list[AnomalyResult]:
        """
        Run all checks against the snapshot.

        Args:
            snapshot: Record snapshot; ``captured_at`` ends the window
            window_days: Override the default window length

        Returns:
            Zero to three anomalies, in check order
        """
        days = window_days if window_days is not None else self.window_days
        if days < 1:
            raise ValueError("window_days must be at least 1")
        since = snapshot.captured_at - timedelta(days=days)

        checks: list[tuple[str, Callable[[RecordSnapshot, datetime], Optional[AnomalyResult]]]] = [
            ("volume_spike", self._check_volume_spike),
            ("schedule_slip", self._check_schedule_slip),
            ("adoption_drop", self._check_adoption_drop),
        ]

        anomalies = []
        for check_name, check in checks:
            try:
                result = check(snapshot, since)
            except Exception as e:
                self.logger.warning(
                    "anomaly_check_failed",
                    check=check_name,
                    error=str(e),
                    exc_info=True,
                )
                continue
            if result is not None:
                anomalies.append(result)

        self.logger.info(
            "anomaly_detection_complete",
            window_days=days,
            checks_run=len(checks),
            anomalies_detected=len(anomalies),
            types=[a.type.value for a in anomalies],
        )
        return anomalies

    def _anomaly_id(self, anomaly_type: AnomalyType, snapshot: RecordSnapshot) -> str:
        stamp = snapshot.captured_at.strftime("%Y%m%d%H%M%S")
        return f"{anomaly_type.value.replace('_', '-')}-{stamp}"

    def _check_volume_spike(
        self, snapshot: RecordSnapshot, since: datetime
    ) -> Optional[AnomalyResult]:
        """Latest weekly issue volume against the mean weekly volume."""
        recent = [
            i for i in snapshot.issues if since <= i.created_at <= snapshot.captured_at
        ]
        weeks = group_by_week(recent)
        if not weeks:
            return None

        expected = mean(count for _, count in weeks)
        actual = float(weeks[-1][1])
        severity = spike_severity(actual, expected)
        if severity is None:
            return None

        increase_pct = round((actual - expected) / expected * 100)
        return AnomalyResult(
            anomaly_id=self._anomaly_id(AnomalyType.VOLUME_SPIKE, snapshot),
            type=AnomalyType.VOLUME_SPIKE,
            severity=severity,
            title="Unusual Issue Creation Spike",
            description=f"Issue creation has increased by {increase_pct}% above normal",
            detected_at=snapshot.captured_at,
            expected_value=expected,
            actual_value=actual,
            deviation=actual - expected,
            root_causes=["Process changes", "System instability", "Communication breakdown"],
            suggested_action="Investigate root causes and implement preventive measures",
            impact_area="Operational Stability",
        )

    def _check_schedule_slip(
        self, snapshot: RecordSnapshot, since: datetime
    ) -> Optional[AnomalyResult]:
        """Overdue unfinished initiatives among recently touched ones."""
        now = snapshot.captured_at
        touched = [
            i
            for i in snapshot.initiatives
            if i.updated_at is not None and since <= i.updated_at <= now
        ]
        overdue = [
            i
            for i in touched
            if i.timeline_end is not None and i.timeline_end < now and not i.is_completed
        ]

        if len(overdue) <= len(touched) * OVERDUE_RATIO:
            return None

        expected = len(touched) * EXPECTED_OVERDUE_RATIO
        actual = float(len(overdue))
        return AnomalyResult(
            anomaly_id=self._anomaly_id(AnomalyType.SCHEDULE_SLIP, snapshot),
            type=AnomalyType.SCHEDULE_SLIP,
            severity=Severity.HIGH,
            title="High Initiative Delay Rate",
            description=f"{len(overdue)} initiatives are past their deadlines",
            detected_at=now,
            expected_value=expected,
            actual_value=actual,
            deviation=actual - expected,
            root_causes=["Resource constraints", "Scope creep", "External dependencies"],
            suggested_action="Review project timelines and resource allocation",
            impact_area="Strategic Delivery",
        )

    def _check_adoption_drop(
        self, snapshot: RecordSnapshot, since: datetime
    ) -> Optional[AnomalyResult]:
        """Assistant-feature usage against the expected share of activity."""
        events = [
            e for e in snapshot.audit_events if since <= e.timestamp <= snapshot.captured_at
        ]
        expected = len(events) * EXPECTED_ADOPTION_RATIO
        actual = float(sum(1 for e in events if e.uses_assistant(self.assistant_prefix)))

        if not actual < expected * ADOPTION_FLOOR:
            return None

        return AnomalyResult(
            anomaly_id=self._anomaly_id(AnomalyType.ADOPTION_DROP, snapshot),
            type=AnomalyType.ADOPTION_DROP,
            severity=Severity.MEDIUM,
            title="AI Utilization Below Expected",
            description=(
                f"{round(actual / len(events) * 100)}% of recent activity used AI features, "
                f"against an expected {round(EXPECTED_ADOPTION_RATIO * 100)}%"
            ),
            detected_at=snapshot.captured_at,
            expected_value=expected,
            actual_value=actual,
            deviation=actual - expected,
            root_causes=["User training needs", "System performance issues", "Workflow changes"],
            suggested_action="Review AI system performance and user adoption",
            impact_area="Operational Efficiency",
        )
