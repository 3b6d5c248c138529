"""
Property-based tests using Hypothesis for the OrgPulse analytics engine.

These tests verify bounds, ordering and determinism invariants across the
engine components for arbitrary record sets.
"""

from datetime import timedelta

import hypothesis.strategies as st
from hypothesis import given, settings

from orgpulse.engine.anomalies import AnomalyDetector
from orgpulse.engine.forecasting import TrendForecaster
from orgpulse.engine.recommendations import RULES, RecommendationEngine
from orgpulse.engine.summary import MAX_INSIGHTS, SummaryComposer
from orgpulse.engine.windows import split_windows
from orgpulse.models.enums import (
    InitiativeStatus,
    OverallStatus,
    Priority,
    Severity,
)
from tests.conftest import (
    NOW,
    make_anomaly,
    make_audit_event,
    make_initiative,
    make_issue,
    make_recommendation,
    make_snapshot,
    make_trend,
)

severity_scores = st.one_of(st.none(), st.floats(min_value=0.0, max_value=100.0))
hours = st.one_of(st.none(), st.floats(min_value=0.5, max_value=1000.0))


@st.composite
def snapshots(draw):
    """Arbitrary snapshots spread over the 60 days before NOW."""
    initiative_specs = draw(
        st.lists(
            st.tuples(
                st.sampled_from(list(InitiativeStatus)),
                hours,
                hours,
                st.booleans(),
                st.integers(min_value=-30, max_value=30),
            ),
            max_size=30,
        )
    )
    issue_specs = draw(
        st.lists(st.tuples(severity_scores, st.booleans()), max_size=40)
    )
    actions = draw(st.lists(st.sampled_from(["AI_SUMMARIZE", "VIEW", "EDIT"]), max_size=40))

    initiatives = [
        make_initiative(
            status=status,
            created_at=NOW - timedelta(hours=i * 30 + 1),
            estimated_hours=estimated,
            actual_hours=actual,
            budget=1000.0 if budgeted else None,
            timeline_end=NOW + timedelta(days=deadline_offset),
        )
        for i, (status, estimated, actual, budgeted, deadline_offset) in enumerate(initiative_specs)
    ]
    issues = [
        make_issue(
            severity_score=score,
            ai_summary="Analyzed" if analyzed else None,
            created_at=NOW - timedelta(hours=i * 20 + 1),
        )
        for i, (score, analyzed) in enumerate(issue_specs)
    ]
    events = [
        make_audit_event(action=action, timestamp=NOW - timedelta(hours=i * 15 + 1))
        for i, action in enumerate(actions)
    ]
    return make_snapshot(initiatives=initiatives, issues=issues, audit_events=events)


# =============================================================================
# Window Properties
# =============================================================================


@given(n=st.integers(min_value=0, max_value=60), size=st.integers(min_value=1, max_value=20))
@settings(max_examples=100)
def test_prop_windows_are_full_or_empty(n: int, size: int):
    recent, prior = split_windows(list(range(n)), size)

    assert len(recent) in (0, size)
    assert len(prior) in (0, size)
    if prior:
        assert recent
        assert prior[-1] + 1 == recent[0]


# =============================================================================
# Trend Forecaster Properties
# =============================================================================


@given(snapshot=snapshots(), window_size=st.integers(min_value=1, max_value=15))
@settings(max_examples=100, deadline=None)
def test_prop_forecasts_stay_in_range(snapshot, window_size: int):
    for trend in TrendForecaster(window_size=window_size).forecast_all(snapshot):
        assert 0.0 <= trend.current_value <= 100.0
        assert 0.0 <= trend.predicted_value <= 100.0
        assert -100 <= trend.change_percent <= 100
        assert 0 <= trend.confidence <= 100
        assert trend.recommendation


@given(snapshot=snapshots())
@settings(max_examples=50, deadline=None)
def test_prop_forecasts_are_deterministic(snapshot):
    forecaster = TrendForecaster()
    assert forecaster.forecast_all(snapshot) == forecaster.forecast_all(snapshot)


# =============================================================================
# Anomaly Detector Properties
# =============================================================================


@given(snapshot=snapshots())
@settings(max_examples=100, deadline=None)
def test_prop_anomalies_bounded_and_deterministic(snapshot):
    detector = AnomalyDetector()
    first = detector.detect_anomalies(snapshot)
    second = detector.detect_anomalies(snapshot)

    assert first == second
    assert len(first) <= 3
    assert len({a.type for a in first}) == len(first)
    for anomaly in first:
        assert anomaly.detected_at == snapshot.captured_at
        if anomaly.deviation > 0:
            assert anomaly.actual_value > anomaly.expected_value


# =============================================================================
# Recommendation Engine Properties
# =============================================================================


@given(snapshot=snapshots(), limit=st.integers(min_value=1, max_value=6))
@settings(max_examples=100, deadline=None)
def test_prop_recommendations_unique_ordered_and_limited(snapshot, limit: int):
    recs = RecommendationEngine(limit=limit).generate_recommendations(snapshot)
    ids = [r.recommendation_id for r in recs]
    rule_order = [rule.rule_id for rule in RULES]

    assert len(recs) <= limit
    assert len(set(ids)) == len(ids)
    assert ids == sorted(ids, key=rule_order.index)
    assert all(0 <= r.success_probability <= 100 for r in recs)


# =============================================================================
# Summary Composer Properties
# =============================================================================


@given(
    changes=st.lists(st.integers(min_value=-100, max_value=100), max_size=8),
    severities=st.lists(st.sampled_from(list(Severity)), max_size=4),
    priorities=st.lists(st.sampled_from(list(Priority)), max_size=6),
)
@settings(max_examples=100, deadline=None)
def test_prop_summary_bounds(changes, severities, priorities):
    trends = [make_trend(metric=f"M{i}", change_percent=c) for i, c in enumerate(changes)]
    anomalies = [make_anomaly(severity=s) for s in severities]
    recs = [make_recommendation(priority=p) for p in priorities]

    summary = SummaryComposer().compose_summary(trends, anomalies, recs)

    assert summary.overall_status in OverallStatus
    assert 1 <= len(summary.key_insights) <= MAX_INSIGHTS
    assert len(summary.recommended_actions) <= 3
    assert 0 <= summary.confidence_score <= 100
    if trends and Severity.CRITICAL in severities:
        assert summary.overall_status == OverallStatus.CRITICAL
    if not trends:
        assert summary.overall_status == OverallStatus.ATTENTION
