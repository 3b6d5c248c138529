"""
Narrative generation boundary.

An optional collaborator turns a structured prompt into free text (for
example a hosted language model). The analytics core never depends on it:
every analytical output is computed without it, and a missing or failing
generator only means the report carries no narrative.
"""

import json
from typing import Protocol, Sequence

from orgpulse.models.insights import (
    AnomalyResult,
    ExecutiveSummary,
    RecommendationResult,
    TrendResult,
)


class NarrativeGenerator(Protocol):
    """Anything that can turn a prompt into narrative text."""

    def generate(self, prompt: str) -> str:
        """
        Produce narrative text for the prompt.

        Raises:
            NarrativeError: If no narrative can be produced
        """
        ...


def build_narrative_prompt(
    summary: ExecutiveSummary,
    trends: Sequence[TrendResult],
    anomalies: Sequence[AnomalyResult],
    recommendations: Sequence[RecommendationResult],
) -> str:
    """
    Build the structured prompt handed to a narrative generator.

    The payload is JSON so generators can either echo it into a template or
    pass it to a model verbatim.
    """
    payload = {
        "period": summary.period,
        "overall_status": summary.overall_status.value,
        "key_insights": summary.key_insights,
        "trends": [
            {"metric": t.metric, "change_percent": t.change_percent, "confidence": t.confidence}
            for t in trends
        ],
        "anomalies": [
            {"title": a.title, "severity": a.severity.value, "impact_area": a.impact_area}
            for a in anomalies
        ],
        "recommendations": [
            {"title": r.title, "priority": r.priority.value} for r in recommendations
        ],
    }
    return (
        "Write a concise executive status narrative (3-5 sentences) for the "
        "organizational health data below. Lead with the overall status, then the "
        "most important risk and the top recommended action.\n\n"
        + json.dumps(payload, indent=2)
    )
