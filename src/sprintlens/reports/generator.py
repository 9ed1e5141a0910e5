"""Report generator - wires store snapshots into metrics, rollup and HTML.

Usage:
    generator = SprintReportGenerator(store)
    report = generator.generate_sprint_summary(config, sprint_id, org_id)
    report.data  # JSON-serializable payload
    report.html  # self-contained document
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any, Protocol

from sprintlens.reports.assignees import rollup_by_assignee
from sprintlens.reports.metrics import classify_tasks, compute_metrics, resolve_window
from sprintlens.reports.models import (
    AssigneeStats,
    GeneratedReport,
    SprintMetrics,
    SprintSummaryConfig,
    SprintWindow,
    TaskLists,
)
from sprintlens.reports.renderer import render_html
from sprintlens.reports.timeline import TimelineIndex
from sprintlens.state_store.exceptions import SprintNotFoundError
from sprintlens.state_store.models import (
    SprintSnapshot,
    StatusChangeEvent,
    TaskSnapshot,
    UserRef,
    as_utc,
)

logger = logging.getLogger(__name__)


class SprintDataSource(Protocol):
    """Read-only accessors the generator needs from the store."""

    def load_sprint_with_tasks(self, sprint_id: str) -> SprintSnapshot | None:
        """Load a sprint snapshot, or None if it doesn't exist."""
        ...

    def load_status_change_events(
        self, org_id: str, task_ids: Iterable[str]
    ) -> list[StatusChangeEvent]:
        """Load status-change events for the given tasks."""
        ...

    def resolve_users(self, user_ids: Iterable[str]) -> Sequence[UserRef]:
        """Resolve user IDs to display info."""
        ...


class SprintReportGenerator:
    """Generates sprint summary reports from store snapshots."""

    def __init__(self, source: SprintDataSource) -> None:
        """Initialize the generator.

        Args:
            source: Store providing sprint snapshots, events and user lookup.
        """
        self.source = source

    def generate_sprint_summary(
        self,
        config: SprintSummaryConfig,
        sprint_id: str,
        org_id: str,
        now: datetime | None = None,
    ) -> GeneratedReport:
        """Generate the sprint summary payload and HTML.

        Args:
            config: Template configuration.
            sprint_id: Sprint to report on.
            org_id: Organization the caller acts in.
            now: Reference time for open-ended windows (defaults to current UTC time).

        Returns:
            GeneratedReport with ``data`` and ``html``.

        Raises:
            SprintNotFoundError: If the sprint doesn't exist or belongs to another org.
        """
        now = as_utc(now) if now is not None else datetime.now(UTC)

        sprint = self.source.load_sprint_with_tasks(sprint_id)
        if sprint is None or sprint.org_id != org_id:
            raise SprintNotFoundError(f"Sprint '{sprint_id}' not found in org '{org_id}'")

        task_ids = [t.id for t in sprint.tasks]
        events = self.source.load_status_change_events(org_id, task_ids) if task_ids else []

        timelines = TimelineIndex(events).as_dict(task_ids)
        window = resolve_window(sprint, now)
        lists = classify_tasks(sprint.tasks, timelines, window)
        metrics = compute_metrics(
            sprint, timelines, window, lists, risk_threshold_pct=config.risk_threshold_pct
        )
        by_assignee = rollup_by_assignee(lists.completed, self.source.resolve_users)

        data = build_payload(sprint, window, metrics, lists, by_assignee)
        html = render_html(config, data, generated_at=now)

        logger.info(
            "Sprint report assembled for %s: %d tasks, %d/%d pts, completion=%d%%, reopened=%d",
            sprint.id,
            metrics.tasks_total,
            metrics.points_done,
            metrics.points_total,
            metrics.completion_pct,
            metrics.reopened,
        )
        return GeneratedReport(data=data, html=html)


def build_payload(
    sprint: SprintSnapshot,
    window: SprintWindow,
    metrics: SprintMetrics,
    lists: TaskLists,
    by_assignee: list[AssigneeStats],
) -> dict[str, Any]:
    """Build the JSON-serializable report payload."""
    return {
        "sprint": {
            "id": sprint.id,
            "name": sprint.name,
            "goal": sprint.goal,
            "status": sprint.status,
            "start_date": _iso(sprint.start_date),
            "end_date": _iso(sprint.end_date),
            "window_start": _iso(window.start),
            "window_end": _iso(window.end),
            "days": window.days,
        },
        "metrics": {
            "tasks_total": metrics.tasks_total,
            "points_total": metrics.points_total,
            "points_done": metrics.points_done,
            "completion_pct": metrics.completion_pct,
            "scoped_in": metrics.scoped_in,
            "carried_over": metrics.carried_over,
            "reopened": metrics.reopened,
            "at_risk": metrics.at_risk,
            "throughput": [asdict(p) for p in metrics.throughput],
        },
        "lists": {
            "completed": [slim_task(t) for t in lists.completed],
            "in_progress": [slim_task(t) for t in lists.in_progress],
            "not_done": [slim_task(t) for t in lists.not_done],
        },
        "burndown": [asdict(p) for p in metrics.burndown],
        "by_assignee": [asdict(a) for a in by_assignee],
    }


def slim_task(task: TaskSnapshot) -> dict[str, Any]:
    """Task fields shown in report lists."""
    return {
        "id": task.id,
        "title": task.title,
        "priority": task.priority,
        "type": task.type,
        "estimate": task.estimate,
        "assignee_id": task.assignee_id,
        "updated_at": _iso(task.updated_at),
    }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None
