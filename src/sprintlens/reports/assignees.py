"""Assignee rollup - completed work per person."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from sprintlens.reports.metrics import points
from sprintlens.reports.models import AssigneeStats
from sprintlens.state_store.models import TaskSnapshot, UserRef

UNASSIGNED_LABEL = "Unassigned"
UNKNOWN_LABEL = "Unknown"

UserResolver = Callable[[Iterable[str]], Sequence[UserRef]]


def rollup_by_assignee(
    completed: Sequence[TaskSnapshot],
    resolve_users: UserResolver,
) -> list[AssigneeStats]:
    """Group completed tasks by assignee, in order of first appearance.

    Args:
        completed: Completed tasks of the sprint.
        resolve_users: Lookup from user IDs to display info. Not called when
            nothing was completed.

    Returns:
        One entry per distinct assignee, with a synthetic "Unassigned" bucket
        for tasks without an assignee.
    """
    if not completed:
        return []

    assignee_ids = list(dict.fromkeys(t.assignee_id for t in completed if t.assignee_id))
    users = {u.id: u for u in resolve_users(assignee_ids)} if assignee_ids else {}

    buckets: dict[str | None, AssigneeStats] = {}
    for task in completed:
        key = task.assignee_id or None
        stats = buckets.get(key)
        if stats is None:
            stats = _new_bucket(key, users.get(key) if key else None)
            buckets[key] = stats
        stats.points_done += points(task)
        stats.tasks_done += 1

    return list(buckets.values())


def _new_bucket(assignee_id: str | None, user: UserRef | None) -> AssigneeStats:
    if not assignee_id:
        return AssigneeStats(name=UNASSIGNED_LABEL, email="")
    if user is None:
        return AssigneeStats(name=UNKNOWN_LABEL, email="")
    return AssigneeStats(name=user.name or user.email or UNKNOWN_LABEL, email=user.email or "")
