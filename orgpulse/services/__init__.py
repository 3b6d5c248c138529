"""
Service layer.
Services orchestrate record retrieval, the analytics engine and optional
collaborators (narrative generation, result caching).
"""

from functools import lru_cache

from orgpulse.config import get_settings
from orgpulse.repository import get_repository

from .cache import InsightsCache
from .insights_service import InsightsService
from .narrative import NarrativeGenerator, build_narrative_prompt


@lru_cache
def get_insights_service() -> InsightsService:
    """Get the application-wide insights service (singleton)."""
    return InsightsService.from_settings(get_settings(), repository=get_repository())


__all__ = [
    "InsightsCache",
    "InsightsService",
    "NarrativeGenerator",
    "build_narrative_prompt",
    "get_insights_service",
]
