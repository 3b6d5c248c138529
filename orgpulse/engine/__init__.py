"""
OrgPulse analytics engine.

This package contains the pure analytical components:

- Window aggregation: recent vs. prior window measures
- Trend forecasting: per-metric projection with fixed confidence
- Anomaly detection: volume spike, schedule slip and adoption drop checks
- Recommendation generation: ordered business rules
- Summary composition: overall status and executive insights

Every component is a pure function of its inputs: no shared mutable state,
no I/O, safe to call concurrently. The module-level functions below use
default-configured instances; build the classes directly for custom settings.
"""

from typing import Iterable, Optional, Sequence

from orgpulse.models.insights import (
    AnomalyResult,
    ExecutiveSummary,
    RecommendationResult,
    TrendResult,
)
from orgpulse.models.records import RecordSnapshot

from .anomalies import AnomalyDetector
from .forecasting import TrendForecaster
from .overview import build_overview
from .recommendations import RecommendationEngine
from .summary import SummaryComposer
from .windows import split_windows, window_delta

__all__ = [
    "AnomalyDetector",
    "RecommendationEngine",
    "SummaryComposer",
    "TrendForecaster",
    "build_overview",
    "compose_summary",
    "detect_anomalies",
    "forecast_trend",
    "generate_recommendations",
    "split_windows",
    "window_delta",
]


def forecast_trend(metric_name: str, snapshot: RecordSnapshot) -> TrendResult:
    """Forecast one tracked metric with default settings."""
    return TrendForecaster().forecast_trend(metric_name, snapshot)


def detect_anomalies(snapshot: RecordSnapshot, window_days: int = 30) -> list[AnomalyResult]:
    """Run all anomaly checks over the trailing window."""
    return AnomalyDetector(window_days=window_days).detect_anomalies(snapshot)


def generate_recommendations(snapshot: RecordSnapshot) -> list[RecommendationResult]:
    """Evaluate all recommendation rules with the default limit."""
    return RecommendationEngine().generate_recommendations(snapshot)


def compose_summary(
    trends: Optional[Iterable[TrendResult]],
    anomalies: Optional[Iterable[AnomalyResult]],
    recommendations: Optional[Iterable[RecommendationResult]],
    failed_stages: Sequence[str] = (),
) -> ExecutiveSummary:
    """Compose an executive summary; never raises."""
    return SummaryComposer().compose_summary(
        trends, anomalies, recommendations, failed_stages=failed_stages
    )
