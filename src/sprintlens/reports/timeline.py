"""Timeline reconstruction - replays status-change events per task."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from typing import Any

from sprintlens.reports.models import Timeline
from sprintlens.state_store.models import StatusChangeEvent, TaskStatus

# Statuses that count as "work started"
IN_PROGRESS_STATUSES = frozenset({TaskStatus.IN_PROGRESS.value, TaskStatus.REVIEW.value})
DONE_STATUS = TaskStatus.DONE.value


def _target_status(meta: Any) -> str | None:
    """Extract the ``to`` status of a transition, or None if the metadata is unusable."""
    if not isinstance(meta, dict):
        return None
    to = meta.get("to")
    if not to or not isinstance(to, str):
        return None
    return to


def build_timeline(events: Iterable[StatusChangeEvent]) -> Timeline:
    """Fold one task's status-change events into a Timeline.

    Events are sorted by timestamp first; the store does not guarantee order.
    Events without a usable ``to`` status are skipped.
    """
    timeline = Timeline()
    ever_done = False

    for event in sorted(events, key=lambda e: e.created_at):
        to = _target_status(event.meta)
        if to is None:
            continue
        if timeline.started_at is None and to in IN_PROGRESS_STATUSES:
            timeline.started_at = event.created_at
        if timeline.done_at is None and to == DONE_STATUS:
            timeline.done_at = event.created_at
            ever_done = True
        if ever_done and to != DONE_STATUS:
            timeline.reopened = True

    return timeline


class TimelineIndex:
    """Per-task timelines for a single report generation.

    Groups the events once and memoizes each task's timeline on first access.
    An index is built per generation call and discarded with it.
    """

    def __init__(self, events: Iterable[StatusChangeEvent]) -> None:
        self._events: dict[str, list[StatusChangeEvent]] = defaultdict(list)
        for event in events:
            self._events[event.task_id].append(event)
        self._timelines: dict[str, Timeline] = {}

    def get(self, task_id: str) -> Timeline:
        """Return the timeline for a task (empty when it has no events)."""
        timeline = self._timelines.get(task_id)
        if timeline is None:
            timeline = build_timeline(self._events.get(task_id, ()))
            self._timelines[task_id] = timeline
        return timeline

    def __getitem__(self, task_id: str) -> Timeline:
        return self.get(task_id)

    def as_dict(self, task_ids: Iterable[str]) -> dict[str, Timeline]:
        """Materialize timelines for the given tasks."""
        return {task_id: self.get(task_id) for task_id in task_ids}
