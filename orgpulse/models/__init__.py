"""
Pydantic v2 data models for OrgPulse.

Model Organization:
    - enums: Enumeration types for consistent classification
    - records: Immutable operational records and the snapshot that groups them
    - insights: Trend, anomaly, recommendation, summary and report results
"""

from .enums import (
    AnomalyType,
    ClusterSeverity,
    InitiativeStatus,
    OverallStatus,
    Priority,
    RecommendationCategory,
    Severity,
)
from .insights import (
    AnomalyOverview,
    AnomalyResult,
    ExecutiveSummary,
    InsightsReport,
    IntelligenceOverview,
    RecommendationOverview,
    RecommendationResult,
    TrendResult,
    TrendsOverview,
)
from .records import (
    AuditEventRecord,
    InitiativeRecord,
    IssueClusterRecord,
    IssueRecord,
    RecordSnapshot,
    TimeRange,
)

__all__ = [
    # Enumerations
    "AnomalyType",
    "ClusterSeverity",
    "InitiativeStatus",
    "OverallStatus",
    "Priority",
    "RecommendationCategory",
    "Severity",
    # Records
    "AuditEventRecord",
    "InitiativeRecord",
    "IssueClusterRecord",
    "IssueRecord",
    "RecordSnapshot",
    "TimeRange",
    # Results
    "AnomalyOverview",
    "AnomalyResult",
    "ExecutiveSummary",
    "InsightsReport",
    "IntelligenceOverview",
    "RecommendationOverview",
    "RecommendationResult",
    "TrendResult",
    "TrendsOverview",
]
