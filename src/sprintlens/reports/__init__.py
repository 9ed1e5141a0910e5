"""Sprint report engine - timelines, metrics, assignee rollup and HTML rendering."""

from sprintlens.reports.assignees import rollup_by_assignee
from sprintlens.reports.exceptions import ReportConfigError
from sprintlens.reports.generator import SprintReportGenerator, build_payload
from sprintlens.reports.metrics import (
    classify_tasks,
    compute_metrics,
    points,
    resolve_window,
)
from sprintlens.reports.models import (
    AssigneeStats,
    BurndownPoint,
    DayPoints,
    GeneratedReport,
    ReportSections,
    SprintMetrics,
    SprintSummaryConfig,
    SprintWindow,
    TaskLists,
    Timeline,
)
from sprintlens.reports.renderer import escape_html, render_html
from sprintlens.reports.timeline import TimelineIndex, build_timeline

__all__ = [
    "AssigneeStats",
    "BurndownPoint",
    "DayPoints",
    "GeneratedReport",
    "ReportConfigError",
    "ReportSections",
    "SprintMetrics",
    "SprintReportGenerator",
    "SprintSummaryConfig",
    "SprintWindow",
    "TaskLists",
    "Timeline",
    "TimelineIndex",
    "build_payload",
    "build_timeline",
    "classify_tasks",
    "compute_metrics",
    "escape_html",
    "points",
    "render_html",
    "resolve_window",
    "rollup_by_assignee",
]
