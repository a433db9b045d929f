"""
Reporting sub-package.

Contains:
- Report snapshot and summary types
- Timing, trend, issue and insight rules
- Report aggregator
- CSV / text / mailto exports
"""

from app.services.reporting.aggregator import ReportAggregator, generate_report, report_aggregator
from app.services.reporting.insights import DEFAULT_OBSERVATION, InsightSource, RuleBasedInsights
from app.services.reporting.types import (
    ExecutiveSummary,
    FlaggedIssue,
    ResponseSnapshot,
    RouteSnapshot,
    Severity,
    StopSnapshot,
    TrendDirection,
    TrendItem,
)

__all__ = [
    "ReportAggregator",
    "report_aggregator",
    "generate_report",
    "DEFAULT_OBSERVATION",
    "InsightSource",
    "RuleBasedInsights",
    "ExecutiveSummary",
    "FlaggedIssue",
    "ResponseSnapshot",
    "RouteSnapshot",
    "Severity",
    "StopSnapshot",
    "TrendDirection",
    "TrendItem",
]
