"""
Enumeration types for OrgPulse.

All enums inherit from str to ensure JSON serialization compatibility.
Ordered classifications (severity, priority, overall status) expose a
numeric ``rank`` so comparisons never depend on string order.
"""

from enum import Enum


class InitiativeStatus(str, Enum):
    """Lifecycle status of an improvement initiative."""

    PROPOSED = "proposed"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"


class ClusterSeverity(str, Enum):
    """Severity label assigned to a cluster of related issues."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AnomalyType(str, Enum):
    """
    Kinds of abnormal recent behavior detected in operational records.

    Each type corresponds to one independent detection check.
    """

    VOLUME_SPIKE = "volume_spike"
    SCHEDULE_SLIP = "schedule_slip"
    ADOPTION_DROP = "adoption_drop"
    OTHER = "other"


class Severity(str, Enum):
    """
    Severity levels for detected anomalies.

    Strictly ordered: low < medium < high < critical.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self.value]


class Priority(str, Enum):
    """
    Priority levels for improvement recommendations.

    Strictly ordered: low < medium < high < critical.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self.value]


class RecommendationCategory(str, Enum):
    """Business area a recommendation improves."""

    EFFICIENCY = "efficiency"
    COST = "cost"
    STRATEGY = "strategy"
    RISK = "risk"
    OPPORTUNITY = "opportunity"


class OverallStatus(str, Enum):
    """
    Coarse-grained organizational health classification.

    Ordered from healthiest to least healthy: excellent > good > attention > critical.
    Only ever derived by the summary composer.
    """

    EXCELLENT = "excellent"
    GOOD = "good"
    ATTENTION = "attention"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _STATUS_RANKS[self.value]


_LEVEL_RANKS = {"low": 0, "medium": 1, "high": 2, "critical": 3}

# Higher rank = healthier
_STATUS_RANKS = {"critical": 0, "attention": 1, "good": 2, "excellent": 3}
