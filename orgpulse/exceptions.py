"""Exception types raised at the OrgPulse service boundaries."""


class OrgPulseError(Exception):
    """Base exception for all OrgPulse failures."""

    pass


class RepositoryError(OrgPulseError):
    """Raised when the record repository cannot supply a snapshot."""

    pass


class UnknownMetricError(OrgPulseError, ValueError):
    """Raised when a trend is requested for a metric that is not tracked."""

    def __init__(self, metric_name: str):
        self.metric_name = metric_name
        super().__init__(f"Unknown metric: {metric_name}")


class NarrativeError(OrgPulseError):
    """Raised when the narrative generator fails to produce text."""

    pass
