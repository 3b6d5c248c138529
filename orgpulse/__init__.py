"""
OrgPulse — organizational health signals from operational records.

Forecasts metric trends, flags anomalous recent behavior, recommends
improvements and composes an executive status summary from a point-in-time
snapshot of initiatives, issues, issue clusters and audit events.
"""

__version__ = "0.1.0"
