"""
Analytical result models produced by the OrgPulse engine.

Every result is built fresh from a snapshot on each invocation and is never
persisted by the engine. Field names are the interchange contract for HTTP
and CLI callers (``model_dump(mode="json")``).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    AnomalyType,
    OverallStatus,
    Priority,
    RecommendationCategory,
    Severity,
)
from .records import utc_now


class TrendResult(BaseModel):
    """
    Forecast for one tracked organizational metric.

    Attributes:
        metric: Metric display name
        current_value: Value over the full snapshot (0-100)
        predicted_value: Current value adjusted by the windowed delta, clamped to 0-100
        change_percent: round(predicted - current)
        confidence: Fixed per-metric confidence baseline (0-100)
        timeframe: Forecast horizon label
        factors: Contributing-factor labels
        recommendation: Suggested response to the forecast direction
    """

    metric: str = Field(description="Metric display name")
    current_value: float = Field(ge=0.0, le=100.0, description="Current value")
    predicted_value: float = Field(ge=0.0, le=100.0, description="Predicted value")
    change_percent: int = Field(description="Signed change, predicted minus current")
    confidence: int = Field(ge=0, le=100, description="Forecast confidence 0-100")
    timeframe: str = Field(description="Forecast horizon label")
    factors: list[str] = Field(default_factory=list, description="Contributing factors")
    recommendation: str = Field(min_length=1, description="Recommended response")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "metric": "Initiative Completion Rate",
                "current_value": 40.0,
                "predicted_value": 50.0,
                "change_percent": 10,
                "confidence": 85,
                "timeframe": "30 days",
                "factors": ["Historical completion patterns"],
                "recommendation": "Maintain current trajectory",
            }
        }
    )


class AnomalyResult(BaseModel):
    """
    A statistically abnormal recent behavior.

    Severity is a deterministic function of how far the actual value deviates
    from the expected baseline. Deviation is signed: actual minus expected.
    """

    anomaly_id: str = Field(description="Deterministic anomaly identifier")
    type: AnomalyType = Field(description="Anomaly classification")
    severity: Severity = Field(description="Deviation severity")
    title: str = Field(description="Short headline")
    description: str = Field(description="Human-readable explanation")
    detected_at: datetime = Field(description="Snapshot time the anomaly was detected at")
    expected_value: float = Field(description="Expected baseline value")
    actual_value: float = Field(description="Observed value")
    deviation: float = Field(description="Signed deviation, actual minus expected")
    root_causes: list[str] = Field(default_factory=list, description="Candidate root causes")
    suggested_action: str = Field(description="Suggested response")
    impact_area: str = Field(description="Affected organizational area")

    @field_validator("expected_value", "actual_value", "deviation")
    @classmethod
    def round_values(cls, v: float) -> float:
        return round(v, 4)


class RecommendationResult(BaseModel):
    """
    A prioritized improvement recommendation.

    Only ever emitted when its triggering rule holds on the current snapshot.
    """

    recommendation_id: str = Field(description="Stable rule identifier")
    priority: Priority = Field(description="Recommendation priority")
    category: RecommendationCategory = Field(description="Business area improved")
    title: str = Field(description="Short headline")
    description: str = Field(description="Why the rule fired")
    expected_impact: str = Field(description="Expected impact text")
    time_to_implement: str = Field(description="Implementation time estimate")
    resource_requirement: str = Field(description="Resource requirement text")
    success_probability: int = Field(ge=0, le=100, description="Success probability 0-100")
    related_metrics: list[str] = Field(default_factory=list, description="Related metrics")
    action_steps: list[str] = Field(default_factory=list, description="Ordered action steps")


class ExecutiveSummary(BaseModel):
    """
    Synthesized organizational status for the evaluation period.

    ``overall_status`` is derived from the trend, anomaly and recommendation
    inputs by the summary composer and is never set independently.
    """

    period: str = Field(description="Evaluation period label")
    overall_status: OverallStatus = Field(description="Derived overall status")
    key_insights: list[str] = Field(default_factory=list, description="Ordered insights")
    major_changes: list[str] = Field(default_factory=list, description="Large metric moves")
    upcoming_risks: list[str] = Field(default_factory=list, description="Risk titles")
    opportunities: list[str] = Field(default_factory=list, description="Opportunity titles")
    recommended_actions: list[str] = Field(
        default_factory=list, max_length=3, description="Top recommended action titles"
    )
    confidence_score: int = Field(ge=0, le=100, description="Mean trend confidence")
    generated_at: datetime = Field(default_factory=utc_now, description="Generation time")


class TrendsOverview(BaseModel):
    """Roll-up statistics over trend forecasts."""

    total_trends: int = 0
    positive_trends: int = 0
    average_confidence: int = 0
    top_trend: Optional[str] = None


class AnomalyOverview(BaseModel):
    """Roll-up statistics over detected anomalies."""

    total_anomalies: int = 0
    critical_anomalies: int = 0
    high_anomalies: int = 0
    most_recent: Optional[str] = None


class RecommendationOverview(BaseModel):
    """Roll-up statistics over recommendations."""

    total_recommendations: int = 0
    critical_actions: int = 0
    high_impact_actions: int = 0
    average_success_probability: int = 0


class IntelligenceOverview(BaseModel):
    """Dashboard roll-up across all three analytical outputs."""

    trends: TrendsOverview = Field(default_factory=TrendsOverview)
    anomalies: AnomalyOverview = Field(default_factory=AnomalyOverview)
    recommendations: RecommendationOverview = Field(default_factory=RecommendationOverview)


class InsightsReport(BaseModel):
    """
    Complete output of one orchestrated pipeline run.

    ``failed_stages`` lists the analytical stages that raised; their result
    lists are empty and the summary reflects the degradation.
    """

    trends: list[TrendResult] = Field(default_factory=list)
    anomalies: list[AnomalyResult] = Field(default_factory=list)
    recommendations: list[RecommendationResult] = Field(default_factory=list)
    summary: ExecutiveSummary
    overview: IntelligenceOverview = Field(default_factory=IntelligenceOverview)
    narrative: Optional[str] = Field(default=None, description="Optional generated narrative")
    failed_stages: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=utc_now)
