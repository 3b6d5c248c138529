"""
Operational record models consumed by the analytics engine.

Records are owned by the record store; the engine only ever reads them, so
every model here is frozen. Timestamps are normalized to timezone-aware UTC
(naive datetimes are interpreted as UTC) so that records from different
sources compare safely.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import ClusterSeverity, InitiativeStatus

_INITIATIVE_STATUSES = {s.value for s in InitiativeStatus}
_CLUSTER_SEVERITIES = {s.value for s in ClusterSeverity}


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _clamp_score(v):
    """Clamp numeric input into 0-100; non-numeric input is left for validation."""
    if v is None or isinstance(v, bool):
        return v
    try:
        score = float(v)
    except (TypeError, ValueError):
        return v
    return min(max(score, 0.0), 100.0)


def _is_negative(v) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and v < 0


class _Record(BaseModel):
    """Shared configuration for immutable record snapshots."""

    model_config = ConfigDict(frozen=True, extra="ignore")


class InitiativeRecord(_Record):
    """
    An improvement initiative tracked by the organization.

    Attributes:
        initiative_id: Record store identifier
        status: Lifecycle status (case-insensitive; unrecognized labels such
            as ``DRAFT`` or ``PLANNING`` coalesce to proposed)
        progress: Completion progress 0-100 (missing coalesces to 0,
            out-of-range values are clamped)
        budget: Optional monetary budget
        roi_percent: Optional realized return percentage
        estimated_hours: Optional estimated effort (negative means unknown)
        actual_hours: Optional actual effort spent (negative means unknown)
        timeline_start: Optional planned start
        timeline_end: Optional planned end (deadline)
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    initiative_id: str = Field(description="Record store identifier")
    status: InitiativeStatus = Field(description="Lifecycle status")
    progress: float = Field(default=0.0, ge=0.0, le=100.0, description="Progress 0-100")
    budget: Optional[float] = Field(default=None, description="Monetary budget")
    roi_percent: Optional[float] = Field(default=None, description="Realized ROI percentage")
    estimated_hours: Optional[float] = Field(default=None, ge=0.0, description="Estimated effort")
    actual_hours: Optional[float] = Field(default=None, ge=0.0, description="Actual effort")
    timeline_start: Optional[datetime] = Field(default=None, description="Planned start")
    timeline_end: Optional[datetime] = Field(default=None, description="Planned end")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, InitiativeStatus) or not isinstance(v, str):
            return v
        label = v.strip().lower()
        if label in _INITIATIVE_STATUSES:
            return label
        return InitiativeStatus.PROPOSED

    @field_validator("progress", mode="before")
    @classmethod
    def coalesce_progress(cls, v):
        return 0.0 if v is None else _clamp_score(v)

    @field_validator("estimated_hours", "actual_hours", mode="before")
    @classmethod
    def coalesce_hours(cls, v):
        return None if _is_negative(v) else v

    @field_validator("timeline_start", "timeline_end", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @model_validator(mode="before")
    @classmethod
    def default_updated_at(cls, data):
        """An initiative never updated since creation was last touched at creation."""
        if isinstance(data, dict) and data.get("updated_at") is None:
            data = {**data, "updated_at": data.get("created_at")}
        return data

    @property
    def is_completed(self) -> bool:
        return self.status == InitiativeStatus.COMPLETED


class IssueRecord(_Record):
    """
    A reported organizational issue.

    Attributes:
        issue_id: Record store identifier
        severity_score: Heat score 0-100, higher is more severe (optional,
            out-of-range values are clamped)
        votes: Engagement count (missing or negative coalesces to 0)
        cluster_id: Optional reference to the issue cluster it belongs to
        ai_summary: Assistant analysis text, present when the issue was analyzed
        created_at: Creation timestamp
    """

    issue_id: str = Field(description="Record store identifier")
    severity_score: Optional[float] = Field(
        default=None, ge=0.0, le=100.0, description="Severity score 0-100"
    )
    votes: int = Field(default=0, ge=0, description="Vote / engagement count")
    cluster_id: Optional[str] = Field(default=None, description="Issue cluster reference")
    ai_summary: Optional[str] = Field(default=None, description="Assistant analysis summary")
    created_at: datetime = Field(description="Creation timestamp")

    @field_validator("severity_score", mode="before")
    @classmethod
    def clamp_severity_score(cls, v):
        return _clamp_score(v)

    @field_validator("votes", mode="before")
    @classmethod
    def coalesce_votes(cls, v):
        if v is None or _is_negative(v):
            return 0
        return v

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def has_ai_analysis(self) -> bool:
        return bool(self.ai_summary and self.ai_summary.strip())

    def is_critical(self, threshold: float = 80.0) -> bool:
        """Missing severity is never critical."""
        return self.severity_score is not None and self.severity_score >= threshold


class IssueClusterRecord(_Record):
    """
    A group of related issues.

    Attributes:
        cluster_id: Record store identifier
        name: Cluster display name
        severity: Cluster severity label (case-insensitive; unrecognized
            labels coalesce to medium)
        initiative_ids: Initiatives linked to address this cluster
        created_at: Creation timestamp
    """

    cluster_id: str = Field(description="Record store identifier")
    name: str = Field(default="", description="Cluster display name")
    severity: ClusterSeverity = Field(
        default=ClusterSeverity.MEDIUM, description="Cluster severity label"
    )
    initiative_ids: tuple[str, ...] = Field(
        default=(), description="Linked initiative identifiers"
    )
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v):
        if v is None:
            return ClusterSeverity.MEDIUM
        if isinstance(v, str):
            label = v.strip().lower()
            return label if label in _CLUSTER_SEVERITIES else ClusterSeverity.MEDIUM
        return v

    @field_validator("initiative_ids", mode="before")
    @classmethod
    def coalesce_initiative_ids(cls, v):
        return () if v is None else v

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)


class AuditEventRecord(_Record):
    """
    A system activity event.

    Only used in aggregate. Actions starting with the assistant prefix
    (default ``AI_``) denote use of an assistant feature.
    """

    event_id: str = Field(description="Record store identifier")
    action: str = Field(default="", description="Action tag")
    timestamp: datetime = Field(description="Event timestamp")

    @field_validator("action", mode="before")
    @classmethod
    def coalesce_action(cls, v):
        return "" if v is None else v

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    def uses_assistant(self, prefix: str = "AI_") -> bool:
        return self.action.startswith(prefix)


class TimeRange(BaseModel):
    """
    Optional creation-time filter for repository reads.

    An empty range (no start, no end) means "no filter".
    """

    start: Optional[datetime] = Field(default=None, description="Inclusive lower bound")
    end: Optional[datetime] = Field(default=None, description="Inclusive upper bound")

    @field_validator("start", "end")
    @classmethod
    def normalize_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @model_validator(mode="after")
    def validate_bounds(self) -> "TimeRange":
        if self.start and self.end and self.end < self.start:
            raise ValueError("end must not precede start")
        return self

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, moment: Optional[datetime]) -> bool:
        if self.is_empty:
            return True
        if moment is None:
            return False
        moment = ensure_utc(moment)
        if self.start and moment < self.start:
            return False
        if self.end and moment > self.end:
            return False
        return True


class RecordSnapshot(_Record):
    """
    Immutable point-in-time read of all records used by one analytical call.

    ``captured_at`` is the reference "now" for every time-relative computation,
    which makes all engine outputs deterministic for a given snapshot.
    """

    initiatives: tuple[InitiativeRecord, ...] = Field(default=())
    issues: tuple[IssueRecord, ...] = Field(default=())
    clusters: tuple[IssueClusterRecord, ...] = Field(default=())
    audit_events: tuple[AuditEventRecord, ...] = Field(default=())
    captured_at: datetime = Field(default_factory=utc_now)

    @field_validator("captured_at")
    @classmethod
    def normalize_captured_at(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @property
    def is_empty(self) -> bool:
        return not (self.initiatives or self.issues or self.clusters or self.audit_events)

    def since(self, start: datetime) -> "RecordSnapshot":
        """
        Restrict issues and audit events to those at or after ``start``.

        Initiatives and clusters are kept whole: long-running initiatives are
        selected by update time downstream, not by creation time.
        """
        start = ensure_utc(start)
        return self.model_copy(
            update={
                "issues": tuple(i for i in self.issues if i.created_at >= start),
                "audit_events": tuple(e for e in self.audit_events if e.timestamp >= start),
            }
        )
