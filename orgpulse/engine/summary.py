"""
Summary Composer — executive status synthesis.

Combines trend, anomaly and recommendation results into one
``ExecutiveSummary``. Overall status precedence (first match wins):

    0. Any failed upstream stage, or no trends at all  -> attention
    1. Any critical anomaly                           -> critical
    2. More than 2 critical/high recommendations      -> attention
    3. At least 70% of trends with positive change    -> excellent
    4. Otherwise                                      -> good

The composer never raises. An internal failure yields a fallback summary
with status ``attention`` and an explanatory insight.
"""

from datetime import datetime
from typing import Iterable, Optional, Sequence

import structlog

from orgpulse.models.enums import OverallStatus, Priority, RecommendationCategory, Severity
from orgpulse.models.insights import (
    AnomalyResult,
    ExecutiveSummary,
    RecommendationResult,
    TrendResult,
)
from orgpulse.models.records import utc_now

from .windows import mean

logger = structlog.get_logger(__name__)

MAX_INSIGHTS = 5
MAX_RECOMMENDED_ACTIONS = 3
MAJOR_CHANGE_THRESHOLD = 10
HIGH_PRIORITY_LIMIT = 2
EXCELLENT_POSITIVE_SHARE = 0.7
HIGH_CONFIDENCE_PROBABILITY = 80
OPPORTUNITY_PROBABILITY = 85

STAGE_LABELS = {
    "trends": "Trend forecasting",
    "anomalies": "Anomaly detection",
    "recommendations": "Recommendation generation",
    "snapshot": "Record retrieval",
}

NO_TREND_DATA_INSIGHT = "Not enough historical data to forecast trends for this period"


def derive_status(
    trends: Sequence[TrendResult],
    anomalies: Sequence[AnomalyResult],
    recommendations: Sequence[RecommendationResult],
    failed_stages: Sequence[str] = (),
) -> OverallStatus:
    """Apply the status precedence rules."""
    if failed_stages or not trends:
        return OverallStatus.ATTENTION

    if any(a.severity == Severity.CRITICAL for a in anomalies):
        return OverallStatus.CRITICAL

    urgent = sum(1 for r in recommendations if r.priority.rank >= Priority.HIGH.rank)
    if urgent > HIGH_PRIORITY_LIMIT:
        return OverallStatus.ATTENTION

    positive = sum(1 for t in trends if t.change_percent > 0)
    if positive >= len(trends) * EXCELLENT_POSITIVE_SHARE:
        return OverallStatus.EXCELLENT

    return OverallStatus.GOOD


def _stage_failure_insight(stage: str) -> str:
    label = STAGE_LABELS.get(stage, stage.replace("_", " ").capitalize())
    return f"{label} is unavailable; this summary is based on partial results"


def _major_change(trend: TrendResult) -> str:
    direction = "increased" if trend.change_percent > 0 else "decreased"
    return f"{trend.metric}: {direction} by {abs(trend.change_percent)}%"


class SummaryComposer:
    """
    Builds executive summaries from analytical results.

    Attributes:
        period: Evaluation period label attached to every summary
    """

    def __init__(self, period: str = "Last 30 days"):
        self.period = period
        self.logger = structlog.get_logger(__name__)

    def compose_summary(
        self,
        trends: Optional[Iterable[TrendResult]],
        anomalies: Optional[Iterable[AnomalyResult]],
        recommendations: Optional[Iterable[RecommendationResult]],
        failed_stages: Sequence[str] = (),
        generated_at: Optional[datetime] = None,
    ) -> ExecutiveSummary:
        """
        Compose the executive summary.

        Args:
            trends: Trend forecasts (None is treated as a failed stage)
            anomalies: Detected anomalies (None is treated as a failed stage)
            recommendations: Recommendations (None is treated as a failed stage)
            failed_stages: Names of upstream stages that raised
            generated_at: Generation timestamp (defaults to now)

        Returns:
            ExecutiveSummary; never raises
        """
        generated_at = generated_at or utc_now()
        try:
            return self._compose(
                trends, anomalies, recommendations, list(failed_stages), generated_at
            )
        except Exception as e:
            self.logger.error("summary_composition_failed", error=str(e), exc_info=True)
            return self.fallback_summary(generated_at)

    def fallback_summary(self, generated_at: Optional[datetime] = None) -> ExecutiveSummary:
        """Degraded summary used when composition itself fails."""
        return ExecutiveSummary(
            period=self.period,
            overall_status=OverallStatus.ATTENTION,
            key_insights=["Unable to generate insights due to an internal error"],
            major_changes=[],
            upcoming_risks=[],
            opportunities=[],
            recommended_actions=[],
            confidence_score=0,
            generated_at=generated_at or utc_now(),
        )

    def _compose(
        self,
        trends: Optional[Iterable[TrendResult]],
        anomalies: Optional[Iterable[AnomalyResult]],
        recommendations: Optional[Iterable[RecommendationResult]],
        failed_stages: list[str],
        generated_at: datetime,
    ) -> ExecutiveSummary:
        for stage, values in (
            ("trends", trends),
            ("anomalies", anomalies),
            ("recommendations", recommendations),
        ):
            if values is None and stage not in failed_stages:
                failed_stages.append(stage)

        trends = list(trends or [])
        anomalies = list(anomalies or [])
        recommendations = list(recommendations or [])

        status = derive_status(trends, anomalies, recommendations, failed_stages)

        insights = [_stage_failure_insight(stage) for stage in failed_stages]
        if not trends:
            insights.append(NO_TREND_DATA_INSIGHT)
        else:
            positive = sum(1 for t in trends if t.change_percent > 0)
            high_confidence = sum(
                1 for r in recommendations if r.success_probability > HIGH_CONFIDENCE_PROBABILITY
            )
            insights.extend(
                [
                    f"{positive} of {len(trends)} key metrics show positive trends",
                    f"{len(anomalies)} operational anomalies detected requiring attention",
                    f"{high_confidence} high-confidence improvement opportunities identified",
                ]
            )

        summary = ExecutiveSummary(
            period=self.period,
            overall_status=status,
            key_insights=insights[:MAX_INSIGHTS],
            major_changes=[
                _major_change(t)
                for t in trends
                if abs(t.change_percent) > MAJOR_CHANGE_THRESHOLD
            ],
            upcoming_risks=[
                a.title for a in anomalies if a.severity.rank >= Severity.HIGH.rank
            ],
            opportunities=[
                r.title
                for r in recommendations
                if r.category == RecommendationCategory.OPPORTUNITY
                or r.success_probability > OPPORTUNITY_PROBABILITY
            ],
            recommended_actions=[
                r.title for r in recommendations if r.priority.rank >= Priority.HIGH.rank
            ][:MAX_RECOMMENDED_ACTIONS],
            confidence_score=round(mean((t.confidence for t in trends), default=0.0)),
            generated_at=generated_at,
        )

        self.logger.info(
            "summary_composed",
            overall_status=summary.overall_status.value,
            trends=len(trends),
            anomalies=len(anomalies),
            recommendations=len(recommendations),
            failed_stages=failed_stages,
        )
        return summary
