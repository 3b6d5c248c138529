"""
Trend Forecaster — heuristic next-period projection for organizational metrics.

Each tracked metric is measured over the full snapshot (current value) and
over two adjacent windows of the most recent records (trajectory). The
predicted value is the current value moved by the windowed delta and clamped
to the metric's natural range.

Confidence is a fixed baseline per metric family. It does not vary with
sample size.

Tracked metrics:
    completion  — share of initiatives completed
    criticality — share of issues with severity score >= 80
    adoption    — share of audit events that used an assistant feature
    efficiency  — mean estimated/actual effort ratio of budgeted initiatives
"""

from dataclasses import dataclass, field
from typing import Callable, Sequence

import structlog

from orgpulse.exceptions import UnknownMetricError
from orgpulse.models.insights import TrendResult
from orgpulse.models.records import InitiativeRecord, RecordSnapshot

from .windows import DEFAULT_WINDOW_SIZE, mean, ratio, window_delta

logger = structlog.get_logger(__name__)

CRITICAL_SEVERITY_THRESHOLD = 80.0

# Efficiency assumed for an estimated initiative with no actual hours recorded yet
DEFAULT_RECORD_EFFICIENCY = 80.0

VALUE_FLOOR = 0.0
VALUE_CEILING = 100.0


@dataclass(frozen=True)
class MetricDefinition:
    """
    How one tracked metric is sourced, measured and explained.

    ``measure`` maps a window of records to a value; ``scale`` converts that
    value to points on the 0-100 range (100 for ratios, 1 for values that are
    already percentages).
    """

    key: str
    name: str
    confidence: int
    records: Callable[[RecordSnapshot], Sequence]
    measure: Callable[[Sequence], float]
    scale: float
    rising_recommendation: str
    falling_recommendation: str
    factors: tuple[str, ...] = field(default=())


def clamp(value: float, lo: float = VALUE_FLOOR, hi: float = VALUE_CEILING) -> float:
    return max(lo, min(hi, value))


def record_efficiency(initiative: InitiativeRecord) -> float:
    """Estimated vs. actual effort as a percentage (100 = on estimate)."""
    if initiative.estimated_hours and initiative.actual_hours:
        return initiative.estimated_hours / initiative.actual_hours * 100
    return DEFAULT_RECORD_EFFICIENCY


def _budgeted_initiatives(snapshot: RecordSnapshot) -> list[InitiativeRecord]:
    return sorted(
        (i for i in snapshot.initiatives if i.budget and i.estimated_hours),
        key=lambda i: i.created_at,
    )


def build_metric_definitions(
    assistant_prefix: str = "AI_",
    critical_threshold: float = CRITICAL_SEVERITY_THRESHOLD,
) -> list[MetricDefinition]:
    """Build the tracked metric registry in reporting order."""
    return [
        MetricDefinition(
            key="completion",
            name="Initiative Completion Rate",
            confidence=85,
            records=lambda s: sorted(s.initiatives, key=lambda i: i.created_at),
            measure=lambda window: ratio(window, lambda i: i.is_completed),
            scale=100.0,
            rising_recommendation="Maintain current trajectory",
            falling_recommendation="Review initiative resource allocation",
            factors=(
                "Historical completion patterns",
                "Resource allocation",
                "Current initiative complexity",
            ),
        ),
        MetricDefinition(
            key="criticality",
            name="Critical Issue Rate",
            confidence=78,
            records=lambda s: sorted(s.issues, key=lambda i: i.created_at),
            measure=lambda window: ratio(window, lambda i: i.is_critical(critical_threshold)),
            scale=100.0,
            rising_recommendation="Increase proactive issue prevention",
            falling_recommendation="Current issue management is effective",
            factors=(
                "Issue creation patterns",
                "Resolution velocity",
                "Organizational capacity",
            ),
        ),
        MetricDefinition(
            key="adoption",
            name="AI Utilization Rate",
            confidence=72,
            records=lambda s: sorted(s.audit_events, key=lambda e: e.timestamp),
            measure=lambda window: ratio(window, lambda e: e.uses_assistant(assistant_prefix)),
            scale=100.0,
            rising_recommendation="Continue AI training and capability expansion",
            falling_recommendation="Investigate declining AI feature adoption",
            factors=("AI adoption patterns", "User training", "System capabilities"),
        ),
        MetricDefinition(
            key="efficiency",
            name="Resource Efficiency",
            confidence=68,
            records=_budgeted_initiatives,
            measure=lambda window: mean(record_efficiency(i) for i in window),
            scale=1.0,
            rising_recommendation="Sustain current estimation and delivery practices",
            falling_recommendation="Focus on process standardization and knowledge sharing",
            factors=("Learning curve effects", "Process optimization", "Team experience"),
        ),
    ]


class TrendForecaster:
    """
    Forecasts tracked organizational metrics from a record snapshot.

    Attributes:
        window_size: Records per recent/prior window
        timeframe: Forecast horizon label attached to every result
        metrics: Tracked metric registry, in reporting order

    Example:
        >>> forecaster = TrendForecaster()
        >>> trend = forecaster.forecast_trend("Initiative Completion Rate", snapshot)
        >>> trend.confidence
        85
    """

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        timeframe: str = "30 days",
        assistant_prefix: str = "AI_",
    ):
        if window_size < 1:
            raise ValueError("window_size must be at least 1")
        self.window_size = window_size
        self.timeframe = timeframe
        self.metrics = build_metric_definitions(assistant_prefix=assistant_prefix)
        self._by_lookup = {}
        for definition in self.metrics:
            self._by_lookup[definition.key] = definition
            self._by_lookup[definition.name.lower()] = definition
        self.logger = structlog.get_logger(__name__)

    @property
    def metric_names(self) -> list[str]:
        return [m.name for m in self.metrics]

    def resolve(self, metric_name: str) -> MetricDefinition:
        """
        Look up a metric by display name or key (case-insensitive).

        Raises:
            UnknownMetricError: If the metric is not tracked
        """
        definition = self._by_lookup.get(metric_name.strip().lower())
        if definition is None:
            raise UnknownMetricError(metric_name)
        return definition

    def forecast_trend(self, metric_name: str, snapshot: RecordSnapshot) -> TrendResult:
        """
        Forecast one metric.

        Args:
            metric_name: Display name (e.g. "Critical Issue Rate") or key
            snapshot: Record snapshot to measure

        Returns:
            TrendResult; with no source records the current and predicted
            values and the change are all 0

        Raises:
            UnknownMetricError: If the metric is not tracked
        """
        definition = self.resolve(metric_name)
        records = list(definition.records(snapshot))

        if records:
            current = clamp(definition.measure(records) * definition.scale)
            delta = window_delta(
                records, definition.measure, size=self.window_size, scale=definition.scale
            )
        else:
            current = 0.0
            delta = 0.0

        predicted = clamp(current + delta)
        change = round(predicted - current)

        self.logger.debug(
            "trend_forecast_computed",
            metric=definition.key,
            records=len(records),
            current=round(current, 2),
            delta=round(delta, 2),
            predicted=round(predicted, 2),
        )

        return TrendResult(
            metric=definition.name,
            current_value=round(current, 1),
            predicted_value=round(predicted, 1),
            change_percent=change,
            confidence=definition.confidence,
            timeframe=self.timeframe,
            factors=list(definition.factors),
            recommendation=(
                definition.rising_recommendation
                if change > 0
                else definition.falling_recommendation
            ),
        )

    def forecast_all(self, snapshot: RecordSnapshot) -> list[TrendResult]:
        """Forecast every tracked metric, in reporting order."""
        trends = [self.forecast_trend(m.key, snapshot) for m in self.metrics]
        self.logger.info(
            "trend_forecasts_complete",
            metrics=len(trends),
            positive=sum(1 for t in trends if t.change_percent > 0),
        )
        return trends
