"""Dashboard roll-up statistics over trends, anomalies and recommendations."""

from typing import Sequence

from orgpulse.models.enums import Priority, Severity
from orgpulse.models.insights import (
    AnomalyOverview,
    AnomalyResult,
    IntelligenceOverview,
    RecommendationOverview,
    RecommendationResult,
    TrendResult,
    TrendsOverview,
)

from .windows import mean

HIGH_IMPACT_PROBABILITY = 80


def build_overview(
    trends: Sequence[TrendResult],
    anomalies: Sequence[AnomalyResult],
    recommendations: Sequence[RecommendationResult],
) -> IntelligenceOverview:
    """
    Summarize the three result lists for a dashboard header.

    Ties (largest change, latest detection) resolve to the first item in
    input order. Inputs are not reordered.
    """
    top_trend = None
    if trends:
        top_trend = max(trends, key=lambda t: abs(t.change_percent)).metric

    most_recent = None
    if anomalies:
        most_recent = max(anomalies, key=lambda a: a.detected_at).title

    return IntelligenceOverview(
        trends=TrendsOverview(
            total_trends=len(trends),
            positive_trends=sum(1 for t in trends if t.change_percent > 0),
            average_confidence=round(mean(t.confidence for t in trends)),
            top_trend=top_trend,
        ),
        anomalies=AnomalyOverview(
            total_anomalies=len(anomalies),
            critical_anomalies=sum(1 for a in anomalies if a.severity == Severity.CRITICAL),
            high_anomalies=sum(1 for a in anomalies if a.severity == Severity.HIGH),
            most_recent=most_recent,
        ),
        recommendations=RecommendationOverview(
            total_recommendations=len(recommendations),
            critical_actions=sum(1 for r in recommendations if r.priority == Priority.CRITICAL),
            high_impact_actions=sum(
                1 for r in recommendations if r.success_probability > HIGH_IMPACT_PROBABILITY
            ),
            average_success_probability=round(
                mean(r.success_probability for r in recommendations)
            ),
        ),
    )
