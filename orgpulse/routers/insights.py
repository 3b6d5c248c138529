"""
Organizational insights router.

Exposes the analytics pipeline over HTTP:
- Trend forecasts (all tracked metrics, or one by name)
- Anomalies over a trailing window
- Prioritized recommendations
- Executive summary (always answered, degraded on upstream failure)
- Dashboard: the full report with overview roll-ups
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from orgpulse.exceptions import RepositoryError, UnknownMetricError
from orgpulse.services import InsightsService, get_insights_service
from orgpulse.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


def _unavailable(e: RepositoryError) -> HTTPException:
    logger.warning("insights_source_unavailable", error=str(e))
    return HTTPException(status_code=503, detail="Record source unavailable")


@router.get("/trends")
async def get_trends(service: InsightsService = Depends(get_insights_service)):
    """Forecast every tracked metric, in fixed metric order."""
    logger.info("insights_trends")
    try:
        trends = await service.get_trends()
    except RepositoryError as e:
        raise _unavailable(e)
    return {"success": True, "data": [t.model_dump(mode="json") for t in trends]}


@router.get("/trends/{metric}")
async def get_trend(metric: str, service: InsightsService = Depends(get_insights_service)):
    """
    Forecast a single metric.

    The metric may be given by display name ("Critical Issue Rate") or key
    ("criticality"), case-insensitively.
    """
    logger.info("insights_trend", metric=metric)
    try:
        trend = await service.get_trend(metric)
    except UnknownMetricError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RepositoryError as e:
        raise _unavailable(e)
    return {"success": True, "data": trend.model_dump(mode="json")}


@router.get("/anomalies")
async def get_anomalies(
    window_days: Optional[int] = Query(None, ge=1, le=365),
    service: InsightsService = Depends(get_insights_service),
):
    """Run the anomaly checks over the trailing window (default from settings)."""
    logger.info("insights_anomalies", window_days=window_days)
    try:
        anomalies = await service.get_anomalies(window_days=window_days)
    except RepositoryError as e:
        raise _unavailable(e)
    return {"success": True, "data": [a.model_dump(mode="json") for a in anomalies]}


@router.get("/recommendations")
async def get_recommendations(service: InsightsService = Depends(get_insights_service)):
    logger.info("insights_recommendations")
    try:
        recommendations = await service.get_recommendations()
    except RepositoryError as e:
        raise _unavailable(e)
    return {"success": True, "data": [r.model_dump(mode="json") for r in recommendations]}


@router.get("/summary")
async def get_summary(service: InsightsService = Depends(get_insights_service)):
    """
    Executive summary.

    Never fails on upstream errors: a degraded summary with status
    ``attention`` is returned instead.
    """
    logger.info("insights_summary")
    summary = await service.get_summary()
    return {"success": True, "data": summary.model_dump(mode="json")}


@router.get("/dashboard")
async def get_dashboard(service: InsightsService = Depends(get_insights_service)):
    """Full report: results, overview statistics, summary and optional narrative."""
    logger.info("insights_dashboard")
    report = await service.build_report()
    return {"success": True, "data": report.model_dump(mode="json")}
