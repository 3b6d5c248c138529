"""
Recommendation Engine — rule-driven improvement recommendations.

Evaluates independent business rules against the current snapshot, in a
fixed order:

    1. cluster-initiative-creation  — high-severity clusters (5+ issues) with no initiative
    2. ai-adoption-acceleration     — AI analysis covers < 60% of issues
    3. resource-optimization        — > 20% of initiatives overrun estimates by > 30%
    4. proactive-issue-prevention   — > 25% of issues are critical (severity >= 80)

A rule whose predicate does not hold emits nothing. Results keep evaluation
order (the tie-break), are deduplicated by id and truncated to ``limit``.
They are never re-sorted by priority.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import structlog

from orgpulse.models.enums import ClusterSeverity, Priority, RecommendationCategory
from orgpulse.models.insights import RecommendationResult
from orgpulse.models.records import RecordSnapshot

from .forecasting import CRITICAL_SEVERITY_THRESHOLD

logger = structlog.get_logger(__name__)

DEFAULT_LIMIT = 6

MIN_CLUSTER_ISSUES = 5
AI_COVERAGE_TARGET = 60.0
OVERRUN_FACTOR = 1.3
OVERRUN_SHARE = 0.2
CRITICAL_SHARE = 25.0


@dataclass(frozen=True)
class RecommendationRule:
    """A named predicate + builder; ``evaluate`` returns None when the rule does not hold."""

    rule_id: str
    evaluate: Callable[[RecordSnapshot], Optional[RecommendationResult]]


def _cluster_initiative_creation(snapshot: RecordSnapshot) -> Optional[RecommendationResult]:
    member_counts: dict[str, int] = {}
    for issue in snapshot.issues:
        if issue.cluster_id:
            member_counts[issue.cluster_id] = member_counts.get(issue.cluster_id, 0) + 1

    unaddressed = [
        c
        for c in snapshot.clusters
        if c.severity == ClusterSeverity.HIGH
        and member_counts.get(c.cluster_id, 0) >= MIN_CLUSTER_ISSUES
        and not c.initiative_ids
    ]
    if not unaddressed:
        return None

    return RecommendationResult(
        recommendation_id="cluster-initiative-creation",
        priority=Priority.HIGH,
        category=RecommendationCategory.EFFICIENCY,
        title="Create Initiatives for High-Impact Issue Clusters",
        description=(
            f"{len(unaddressed)} high-impact clusters with {MIN_CLUSTER_ISSUES}+ issues "
            "lack dedicated initiatives"
        ),
        expected_impact="Reduce systemic issues by 40-60%",
        time_to_implement="2-4 weeks",
        resource_requirement="Medium - Project management and domain expertise",
        success_probability=85,
        related_metrics=["Issue Resolution Rate", "Strategic Health Score"],
        action_steps=[
            "Prioritize clusters by business impact",
            "Assign initiative owners",
            "Define success criteria",
            "Allocate necessary resources",
        ],
    )


def _ai_adoption_acceleration(snapshot: RecordSnapshot) -> Optional[RecommendationResult]:
    if not snapshot.issues:
        return None

    analyzed = sum(1 for i in snapshot.issues if i.has_ai_analysis)
    coverage = analyzed / len(snapshot.issues) * 100
    if coverage >= AI_COVERAGE_TARGET:
        return None

    return RecommendationResult(
        recommendation_id="ai-adoption-acceleration",
        priority=Priority.MEDIUM,
        category=RecommendationCategory.EFFICIENCY,
        title="Accelerate AI Analysis Adoption",
        description=(
            f"Only {round(coverage)}% of issues have AI analysis - "
            "significant opportunity for insights"
        ),
        expected_impact="Improve decision quality by 25-35%",
        time_to_implement="1-2 weeks",
        resource_requirement="Low - Training and process updates",
        success_probability=90,
        related_metrics=["AI Efficiency Score", "Issue Resolution Time"],
        action_steps=[
            "Train teams on AI analysis tools",
            "Update workflows to include AI analysis",
            "Create best practice guidelines",
            "Monitor adoption metrics",
        ],
    )


def _resource_optimization(snapshot: RecordSnapshot) -> Optional[RecommendationResult]:
    overrunning = [
        i
        for i in snapshot.initiatives
        if i.actual_hours
        and i.estimated_hours
        and i.actual_hours > i.estimated_hours * OVERRUN_FACTOR
    ]
    if len(overrunning) <= len(snapshot.initiatives) * OVERRUN_SHARE:
        return None

    return RecommendationResult(
        recommendation_id="resource-optimization",
        priority=Priority.HIGH,
        category=RecommendationCategory.COST,
        title="Optimize Resource Allocation and Estimation",
        description=f"{len(overrunning)} initiatives exceed time estimates by 30%+",
        expected_impact="Reduce resource waste by 15-25%",
        time_to_implement="3-6 weeks",
        resource_requirement="Medium - Process improvement and training",
        success_probability=75,
        related_metrics=["Resource Efficiency", "Initiative Velocity"],
        action_steps=[
            "Analyze estimation accuracy patterns",
            "Improve estimation methodologies",
            "Implement better project tracking",
            "Provide estimation training",
        ],
    )


def _proactive_issue_prevention(snapshot: RecordSnapshot) -> Optional[RecommendationResult]:
    if not snapshot.issues:
        return None

    critical = sum(1 for i in snapshot.issues if i.is_critical(CRITICAL_SEVERITY_THRESHOLD))
    critical_rate = critical / len(snapshot.issues) * 100
    if critical_rate <= CRITICAL_SHARE:
        return None

    return RecommendationResult(
        recommendation_id="proactive-issue-prevention",
        priority=Priority.CRITICAL,
        category=RecommendationCategory.RISK,
        title="Implement Proactive Issue Prevention",
        description=(
            f"{round(critical_rate)}% of issues are critical - indicates reactive management"
        ),
        expected_impact="Reduce critical issues by 30-50%",
        time_to_implement="4-8 weeks",
        resource_requirement="High - Process redesign and monitoring systems",
        success_probability=70,
        related_metrics=["Critical Issue Rate", "Strategic Health Score"],
        action_steps=[
            "Implement early warning systems",
            "Create proactive monitoring dashboards",
            "Train teams on prevention strategies",
            "Establish regular health checks",
        ],
    )


# Evaluation order is the tie-break for truncation
RULES = (
    RecommendationRule("cluster-initiative-creation", _cluster_initiative_creation),
    RecommendationRule("ai-adoption-acceleration", _ai_adoption_acceleration),
    RecommendationRule("resource-optimization", _resource_optimization),
    RecommendationRule("proactive-issue-prevention", _proactive_issue_prevention),
)


class RecommendationEngine:
    """
    Generates recommendations by evaluating rules in a fixed order.

    Attributes:
        rules: Ordered rules to evaluate
        limit: Maximum number of recommendations returned
    """

    def __init__(self, rules=RULES, limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        self.rules = tuple(rules)
        self.limit = limit
        self.logger = structlog.get_logger(__name__)

    def generate_recommendations(self, snapshot: RecordSnapshot) -> list[RecommendationResult]:
        """
        Evaluate every rule and return the triggered recommendations.

        Returns:
            At most ``limit`` recommendations in rule-evaluation order
        """
        triggered = []
        for rule in self.rules:
            result = rule.evaluate(snapshot)
            if result is not None:
                triggered.append(result)

        seen = set()
        unique = []
        for rec in triggered:
            if rec.recommendation_id not in seen:
                seen.add(rec.recommendation_id)
                unique.append(rec)

        top = unique[: self.limit]

        self.logger.info(
            "recommendations_generated",
            rules_evaluated=len(self.rules),
            triggered=len(triggered),
            returned=len(top),
            ids=[r.recommendation_id for r in top],
        )
        return top
