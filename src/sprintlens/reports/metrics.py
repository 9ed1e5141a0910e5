"""Sprint metrics - window resolution, task classification and aggregation.

Velocity: points of completed tasks (unestimated tasks count as 1 point).
Completion: velocity as a share of all sprint points.
Throughput: completed points per calendar day of the window.
Burndown: open points at the end of each calendar day of the window.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, time, timedelta

from sprintlens.reports.models import (
    BurndownPoint,
    DayPoints,
    SprintMetrics,
    SprintWindow,
    TaskLists,
    Timeline,
)
from sprintlens.reports.timeline import DONE_STATUS
from sprintlens.state_store.models import SprintSnapshot, TaskSnapshot, TaskStatus

ONE_DAY = timedelta(days=1)
END_OF_DAY = time(23, 59, 59)


def points(task: TaskSnapshot) -> int:
    """Point value of a task; unestimated tasks count as 1."""
    return task.estimate if task.estimate is not None else 1


def current_status(task: TaskSnapshot) -> str:
    """Live column status, TODO when the task has no column."""
    return task.status or TaskStatus.TODO.value


def day_label(day: datetime) -> str:
    """Short label such as ``"Oct 5"``."""
    return f"{day:%b} {day.day}"


def resolve_window(sprint: SprintSnapshot, now: datetime) -> SprintWindow:
    """Resolve the reporting window, falling back to task creation and ``now``.

    ``days`` counts both boundary days and is at least 2.
    """
    start = sprint.start_date
    if start is None:
        start = min((t.created_at for t in sprint.tasks), default=now)
    end = sprint.end_date if sprint.end_date is not None else now
    days = max(1, math.ceil((end - start) / ONE_DAY)) + 1
    return SprintWindow(start=start, end=end, days=days)


def window_days(window: SprintWindow) -> list[datetime]:
    """Start instant of each day in the window."""
    return [window.start + i * ONE_DAY for i in range(window.days)]


def classify_tasks(
    tasks: Iterable[TaskSnapshot],
    timelines: Mapping[str, Timeline],
    window: SprintWindow,
) -> TaskLists:
    """Sort tasks into completed / in-progress / not-done lists.

    Each list applies its own predicate, so a task reopened after the window
    ended can be both completed and not done.
    """
    lists = TaskLists()
    for task in tasks:
        done_at = timelines[task.id].done_at
        status = current_status(task)

        if done_at is not None or status == DONE_STATUS:
            lists.completed.append(task)
        if status != DONE_STATUS and task.status is not None:
            lists.in_progress.append(task)
        if not (done_at is not None and done_at <= window.end) and status != DONE_STATUS:
            lists.not_done.append(task)
    return lists


def completion_pct(done: int, total: int) -> int:
    """Whole-number completion percentage, 0 when there is nothing to do."""
    if not total:
        return 0
    pct = math.floor(done / total * 100 + 0.5)
    return min(100, max(0, pct))


def compute_throughput(
    completed: Iterable[TaskSnapshot],
    timelines: Mapping[str, Timeline],
    window: SprintWindow,
) -> list[DayPoints]:
    """Completed points per day over ``[day, day + 1)``.

    Tasks done without a recorded DONE event count on the window end.
    """
    finished = [
        (timelines[t.id].done_at or window.end, points(t)) for t in completed
    ]
    result = []
    for day in window_days(window):
        next_day = day + ONE_DAY
        done = sum(pts for when, pts in finished if day <= when < next_day)
        result.append(DayPoints(day=day_label(day), points=done))
    return result


def compute_burndown(
    tasks: Iterable[TaskSnapshot],
    timelines: Mapping[str, Timeline],
    window: SprintWindow,
) -> list[BurndownPoint]:
    """Open points at each day's 23:59:59, one entry per window day."""
    tracked = [(timelines[t.id].done_at, points(t)) for t in tasks]
    result = []
    for day in window_days(window):
        cutoff = datetime.combine(day.date(), END_OF_DAY, tzinfo=day.tzinfo)
        remaining = sum(
            pts for done_at, pts in tracked if done_at is None or done_at > cutoff
        )
        result.append(BurndownPoint(day=day_label(day), remaining=remaining))
    return result


def compute_metrics(
    sprint: SprintSnapshot,
    timelines: Mapping[str, Timeline],
    window: SprintWindow,
    lists: TaskLists,
    risk_threshold_pct: int | None = None,
) -> SprintMetrics:
    """Aggregate sprint-level metrics."""
    m = SprintMetrics()

    m.tasks_total = len(sprint.tasks)
    m.points_total = sum(points(t) for t in sprint.tasks)
    m.points_done = sum(points(t) for t in lists.completed)
    m.completion_pct = completion_pct(m.points_done, m.points_total)

    m.scoped_in = sum(1 for t in sprint.tasks if window.start <= t.created_at <= window.end)
    m.carried_over = len(lists.not_done)
    m.reopened = sum(1 for t in sprint.tasks if timelines[t.id].reopened)
    m.at_risk = risk_threshold_pct is not None and m.completion_pct < risk_threshold_pct

    m.throughput = compute_throughput(lists.completed, timelines, window)
    m.burndown = compute_burndown(sprint.tasks, timelines, window)

    return m
