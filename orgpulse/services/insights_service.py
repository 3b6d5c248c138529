"""
Insights Service — orchestrates snapshot retrieval and the analytics pipeline.

Fetches a record snapshot (four independent repository reads issued
concurrently), runs trend forecasting, anomaly detection and recommendation
generation in isolated stages, composes the executive summary and, when a
narrative generator is configured, attaches a generated narrative.

Failure semantics:
    - Repository failures surface as RepositoryError from ``load_snapshot``
    - ``build_report`` never raises for upstream failures: a failed snapshot
      or stage degrades the report (empty results, summary status attention)
    - Narrative failures are logged and leave ``narrative`` unset
"""

import asyncio
from datetime import datetime, timedelta
from typing import Callable, Optional, TypeVar

import structlog

from orgpulse.config import Settings
from orgpulse.engine.anomalies import AnomalyDetector
from orgpulse.engine.forecasting import TrendForecaster
from orgpulse.engine.overview import build_overview
from orgpulse.engine.recommendations import RecommendationEngine
from orgpulse.engine.summary import SummaryComposer
from orgpulse.exceptions import RepositoryError
from orgpulse.models.insights import (
    AnomalyResult,
    ExecutiveSummary,
    InsightsReport,
    RecommendationResult,
    TrendResult,
)
from orgpulse.models.records import RecordSnapshot, TimeRange, ensure_utc, utc_now
from orgpulse.repository.base import RecordRepository

from .cache import InsightsCache
from .narrative import NarrativeGenerator, build_narrative_prompt

T = TypeVar("T")


class InsightsService:
    """
    Runs the full insights pipeline against a record repository.

    Attributes:
        repository: Record source
        forecaster: Trend forecaster
        detector: Anomaly detector
        recommender: Recommendation engine
        composer: Summary composer
        narrative_generator: Optional narrative collaborator
        cache: Optional report cache
        lookback_days: Days of issues and audit events per snapshot (0 = no
            filter); never shorter than the anomaly window
    """

    def __init__(
        self,
        repository: RecordRepository,
        forecaster: Optional[TrendForecaster] = None,
        detector: Optional[AnomalyDetector] = None,
        recommender: Optional[RecommendationEngine] = None,
        composer: Optional[SummaryComposer] = None,
        narrative_generator: Optional[NarrativeGenerator] = None,
        cache: Optional[InsightsCache] = None,
        lookback_days: int = 90,
    ):
        if lookback_days < 0:
            raise ValueError("lookback_days must not be negative")
        self.repository = repository
        self.forecaster = forecaster or TrendForecaster()
        self.detector = detector or AnomalyDetector()
        self.recommender = recommender or RecommendationEngine()
        self.composer = composer or SummaryComposer()
        self.narrative_generator = narrative_generator
        self.cache = cache
        self.lookback_days = lookback_days
        self.logger = structlog.get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        repository: RecordRepository,
        narrative_generator: Optional[NarrativeGenerator] = None,
    ) -> "InsightsService":
        """Wire every component from application settings."""
        cache = None
        if settings.insights_cache_ttl_seconds > 0:
            cache = InsightsCache(ttl_seconds=settings.insights_cache_ttl_seconds)

        return cls(
            repository=repository,
            forecaster=TrendForecaster(
                window_size=settings.window_size,
                timeframe=settings.forecast_timeframe,
                assistant_prefix=settings.assistant_action_prefix,
            ),
            detector=AnomalyDetector(
                window_days=settings.anomaly_window_days,
                assistant_prefix=settings.assistant_action_prefix,
            ),
            recommender=RecommendationEngine(limit=settings.recommendation_limit),
            composer=SummaryComposer(period=settings.summary_period),
            narrative_generator=narrative_generator,
            cache=cache,
            lookback_days=settings.snapshot_lookback_days,
        )

    # =========================================================================
    # Snapshot retrieval
    # =========================================================================

    async def load_snapshot(
        self,
        lookback_days: Optional[int] = None,
        now: Optional[datetime] = None,
        window_days: Optional[int] = None,
    ) -> RecordSnapshot:
        """
        Fetch a point-in-time snapshot from the repository.

        The four reads are independent and dispatched concurrently. The
        lookback bounds issues and audit events by creation time; initiatives
        and clusters are always read whole, since the schedule-slip check
        selects initiatives by last update rather than creation.

        Args:
            lookback_days: Override the configured lookback (0 = no filter)
            now: Snapshot reference time (defaults to current UTC time)
            window_days: Anomaly window the snapshot must cover; widens the
                lookback when longer

        Raises:
            RepositoryError: If any read fails
        """
        captured_at = ensure_utc(now) if now else utc_now()
        days = self._effective_lookback(lookback_days, window_days)
        time_range = None
        if days > 0:
            time_range = TimeRange(start=captured_at - timedelta(days=days), end=captured_at)

        try:
            initiatives, issues, audit_events, clusters = await asyncio.gather(
                asyncio.to_thread(self.repository.fetch_initiatives),
                asyncio.to_thread(self.repository.fetch_issues, time_range),
                asyncio.to_thread(self.repository.fetch_audit_events, time_range),
                asyncio.to_thread(self.repository.fetch_clusters),
            )
        except RepositoryError:
            self.logger.error("snapshot_fetch_failed", lookback_days=days, exc_info=True)
            raise
        except Exception as e:
            self.logger.error("snapshot_fetch_failed", lookback_days=days, error=str(e))
            raise RepositoryError(f"Record repository unavailable: {e}") from e

        snapshot = RecordSnapshot(
            initiatives=initiatives,
            issues=issues,
            clusters=clusters,
            audit_events=audit_events,
            captured_at=captured_at,
        )
        self.logger.info(
            "snapshot_loaded",
            lookback_days=days,
            initiatives=len(snapshot.initiatives),
            issues=len(snapshot.issues),
            clusters=len(snapshot.clusters),
            audit_events=len(snapshot.audit_events),
        )
        return snapshot

    def _effective_lookback(
        self, lookback_days: Optional[int], window_days: Optional[int] = None
    ) -> int:
        """Lookback in days, never shorter than the anomaly window (0 = no filter)."""
        days = self.lookback_days if lookback_days is None else lookback_days
        if days <= 0:
            return 0
        return max(days, window_days or self.detector.window_days)

    # =========================================================================
    # Individual entry points
    # =========================================================================

    async def get_trends(self) -> list[TrendResult]:
        snapshot = await self.load_snapshot()
        return self.forecaster.forecast_all(snapshot)

    async def get_trend(self, metric_name: str) -> TrendResult:
        """
        Raises:
            UnknownMetricError: If the metric is not tracked
            RepositoryError: If the snapshot cannot be fetched
        """
        self.forecaster.resolve(metric_name)
        snapshot = await self.load_snapshot()
        return self.forecaster.forecast_trend(metric_name, snapshot)

    async def get_anomalies(self, window_days: Optional[int] = None) -> list[AnomalyResult]:
        snapshot = await self.load_snapshot(window_days=window_days)
        return self.detector.detect_anomalies(snapshot, window_days=window_days)

    async def get_recommendations(self) -> list[RecommendationResult]:
        """Recommendation rules read the whole record set, never a lookback slice."""
        snapshot = await self.load_snapshot(lookback_days=0)
        return self.recommender.generate_recommendations(snapshot)

    async def get_summary(self) -> ExecutiveSummary:
        """Executive summary; degraded rather than raising on upstream failure."""
        report = await self.build_report()
        return report.summary

    # =========================================================================
    # Full pipeline
    # =========================================================================

    async def build_report(
        self,
        lookback_days: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> InsightsReport:
        """
        Run the whole pipeline and assemble a report.

        The record set is read once, unfiltered. Recommendations run over all
        of it; trends and anomalies run over the lookback slice.

        Reports are cached (when a cache is configured) only for the current
        time and only when every stage succeeded.

        Args:
            lookback_days: Override the configured lookback (0 = no filter)
            now: Snapshot reference time; disables caching when given
        """
        days = self._effective_lookback(lookback_days)
        cache_key = ("report", days)
        use_cache = self.cache is not None and now is None

        if use_cache:
            cached = self.cache.get(cache_key)
            if cached is not None:
                self.logger.debug("insights_cache_hit", lookback_days=days)
                return cached

        try:
            full_snapshot = await self.load_snapshot(lookback_days=0, now=now)
        except RepositoryError as e:
            self.logger.warning("report_degraded", reason="snapshot_unavailable", error=str(e))
            failed_stages = ["snapshot", "trends", "anomalies", "recommendations"]
            summary = self.composer.compose_summary(
                None, None, None, failed_stages=failed_stages, generated_at=ensure_utc(now)
            )
            return InsightsReport(
                summary=summary,
                overview=build_overview([], [], []),
                failed_stages=failed_stages,
                generated_at=summary.generated_at,
            )

        snapshot = full_snapshot
        if days > 0:
            snapshot = full_snapshot.since(full_snapshot.captured_at - timedelta(days=days))

        failed_stages: list[str] = []
        trends = self._run_stage(
            "trends", lambda: self.forecaster.forecast_all(snapshot), failed_stages
        )
        anomalies = self._run_stage(
            "anomalies", lambda: self.detector.detect_anomalies(snapshot), failed_stages
        )
        recommendations = self._run_stage(
            "recommendations",
            lambda: self.recommender.generate_recommendations(full_snapshot),
            failed_stages,
        )

        summary = self.composer.compose_summary(
            trends,
            anomalies,
            recommendations,
            failed_stages=failed_stages,
            generated_at=snapshot.captured_at,
        )

        report = InsightsReport(
            trends=trends,
            anomalies=anomalies,
            recommendations=recommendations,
            summary=summary,
            overview=build_overview(trends, anomalies, recommendations),
            narrative=await self._generate_narrative(
                summary, trends, anomalies, recommendations
            ),
            failed_stages=failed_stages,
            generated_at=snapshot.captured_at,
        )

        self.logger.info(
            "insights_report_built",
            overall_status=summary.overall_status.value,
            failed_stages=failed_stages,
            has_narrative=report.narrative is not None,
        )

        if use_cache and not failed_stages:
            self.cache.set(cache_key, report)
        return report

    def _run_stage(
        self,
        stage: str,
        compute: Callable[[], list[T]],
        failed_stages: list[str],
    ) -> list[T]:
        """Run one analytical stage; a failure records the stage and yields no results."""
        try:
            return compute()
        except Exception as e:
            self.logger.error("pipeline_stage_failed", stage=stage, error=str(e), exc_info=True)
            failed_stages.append(stage)
            return []

    async def _generate_narrative(
        self,
        summary: ExecutiveSummary,
        trends: list[TrendResult],
        anomalies: list[AnomalyResult],
        recommendations: list[RecommendationResult],
    ) -> Optional[str]:
        if self.narrative_generator is None:
            return None

        prompt = build_narrative_prompt(summary, trends, anomalies, recommendations)
        try:
            text = await asyncio.to_thread(self.narrative_generator.generate, prompt)
        except Exception as e:
            self.logger.warning("narrative_generation_failed", error=str(e))
            return None

        text = (text or "").strip()
        return text or None
