"""
Reference scenarios for the analytics pipeline.

Each scenario pins one documented behavior end to end on a small, fully
specified record set.
"""

from datetime import timedelta

import pytest

from orgpulse.engine import (
    compose_summary,
    detect_anomalies,
    forecast_trend,
    generate_recommendations,
)
from orgpulse.models.enums import (
    AnomalyType,
    InitiativeStatus,
    OverallStatus,
    Priority,
    Severity,
)
from tests.conftest import (
    NOW,
    make_initiative,
    make_issue,
    make_recommendation,
    make_snapshot,
    make_trend,
)


class TestReferenceScenarios:
    def test_scenario_empty_records_forecast_zero(self, empty_snapshot):
        trend = forecast_trend("Initiative Completion Rate", empty_snapshot)

        assert trend.current_value == 0
        assert trend.predicted_value == 0
        assert trend.confidence == 85
        assert trend.change_percent == 0

    def test_scenario_last_week_issue_spike_is_critical(self):
        # NOW is Saturday 2026-10-17; one Wednesday per week, 30 issues in total
        weekly = [
            (NOW - timedelta(days=24), 3),
            (NOW - timedelta(days=17), 3),
            (NOW - timedelta(days=10), 4),
            (NOW - timedelta(days=3), 20),
        ]
        issues = [make_issue(created_at=day) for day, count in weekly for _ in range(count)]
        assert len(issues) == 30

        anomalies = detect_anomalies(make_snapshot(issues=issues))

        assert len(anomalies) == 1
        spike = anomalies[0]
        assert spike.type == AnomalyType.VOLUME_SPIKE
        assert spike.severity == Severity.CRITICAL
        assert spike.expected_value == pytest.approx(7.5)
        assert spike.actual_value == 20.0

    def test_scenario_overdue_initiatives_slip(self):
        deadline = NOW - timedelta(days=1)
        initiatives = [
            make_initiative(status=InitiativeStatus.ACTIVE, timeline_end=deadline)
            for _ in range(4)
        ] + [
            make_initiative(status=InitiativeStatus.ACTIVE, timeline_end=NOW + timedelta(days=30))
            for _ in range(6)
        ]

        anomalies = detect_anomalies(make_snapshot(initiatives=initiatives))

        slips = [a for a in anomalies if a.type == AnomalyType.SCHEDULE_SLIP]
        assert len(slips) == 1
        assert slips[0].severity == Severity.HIGH
        assert slips[0].expected_value == pytest.approx(1.0)

    def test_scenario_critical_issue_share_recommends_prevention(self):
        issues = [
            make_issue(
                severity_score=90.0 if i < 30 else 20.0,
                ai_summary="Analyzed",
                created_at=NOW - timedelta(hours=i),
            )
            for i in range(100)
        ]

        recs = generate_recommendations(make_snapshot(issues=issues))

        assert len(recs) == 1
        assert recs[0].recommendation_id == "proactive-issue-prevention"
        assert recs[0].priority == Priority.CRITICAL

    def test_scenario_mostly_positive_trends_are_excellent(self):
        trends = [make_trend(metric=f"Metric {i}", change_percent=4) for i in range(5)]
        trends += [make_trend(metric=f"Metric {i}", change_percent=-3) for i in range(5, 7)]
        recs = [
            make_recommendation(priority=Priority.HIGH),
            make_recommendation(priority=Priority.CRITICAL),
            make_recommendation(priority=Priority.LOW),
        ]

        summary = compose_summary(trends, [], recs)

        assert summary.overall_status == OverallStatus.EXCELLENT
