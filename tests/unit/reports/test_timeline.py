"""Unit tests for timeline reconstruction."""

from datetime import UTC, datetime, timedelta

import pytest

from sprintlens.reports import Timeline, TimelineIndex, build_timeline
from sprintlens.state_store import StatusChangeEvent

T0 = datetime(2026, 10, 5, 9, 0, tzinfo=UTC)


def at(hours: int) -> datetime:
    return T0 + timedelta(hours=hours)


@pytest.mark.unit
class TestBuildTimeline:
    """Tests for build_timeline."""

    def test_no_events_gives_empty_timeline(self) -> None:
        """A task without events has an empty, non-reopened timeline."""
        assert build_timeline([]) == Timeline()

    def test_reopened_sequence(self, make_event) -> None:
        """TODO -> IN_PROGRESS -> DONE -> IN_PROGRESS marks the task reopened."""
        events = [
            make_event("t", at(0), "todo", "backlog"),
            make_event("t", at(1), "in_progress", "todo"),
            make_event("t", at(2), "done", "in_progress"),
            make_event("t", at(3), "in_progress", "done"),
        ]

        timeline = build_timeline(events)

        assert timeline.started_at == at(1)
        assert timeline.done_at == at(2)
        assert timeline.reopened is True

    def test_events_sorted_before_folding(self, make_event) -> None:
        """Out-of-order events are replayed by timestamp."""
        events = [
            make_event("t", at(3), "in_progress"),
            make_event("t", at(2), "done"),
            make_event("t", at(1), "in_progress"),
        ]

        timeline = build_timeline(events)

        assert timeline.started_at == at(1)
        assert timeline.done_at == at(2)
        assert timeline.reopened is True

    def test_first_transitions_win(self, make_event) -> None:
        """started_at and done_at keep the first matching transition."""
        events = [
            make_event("t", at(1), "review"),
            make_event("t", at(2), "in_progress"),
            make_event("t", at(3), "done"),
            make_event("t", at(4), "review"),
            make_event("t", at(5), "done"),
        ]

        timeline = build_timeline(events)

        assert timeline.started_at == at(1)
        assert timeline.done_at == at(3)

    def test_reopened_is_sticky(self, make_event) -> None:
        """Returning to DONE does not clear the reopened flag."""
        events = [
            make_event("t", at(1), "done"),
            make_event("t", at(2), "todo"),
            make_event("t", at(3), "done"),
        ]

        assert build_timeline(events).reopened is True

    def test_done_without_reopen(self, make_event) -> None:
        """Staying in DONE never sets reopened."""
        events = [
            make_event("t", at(1), "in_progress"),
            make_event("t", at(2), "done"),
        ]

        assert build_timeline(events).reopened is False

    @pytest.mark.parametrize(
        "meta",
        [None, {}, {"from": "todo"}, {"to": None}, {"to": ""}, {"to": 3}, "done", ["to", "done"]],
    )
    def test_malformed_meta_is_ignored(self, meta) -> None:
        """Events without a usable 'to' status are no-ops."""
        events = [
            StatusChangeEvent(task_id="t", created_at=at(1), meta={"to": "done"}),
            StatusChangeEvent(task_id="t", created_at=at(2), meta=meta),
        ]

        timeline = build_timeline(events)

        assert timeline.done_at == at(1)
        assert timeline.started_at is None
        assert timeline.reopened is False


@pytest.mark.unit
class TestTimelineIndex:
    """Tests for TimelineIndex."""

    def test_groups_events_by_task(self, make_event) -> None:
        """Each task's timeline only sees its own events."""
        index = TimelineIndex(
            [
                make_event("a", at(1), "in_progress"),
                make_event("b", at(2), "done"),
                make_event("a", at(3), "done"),
            ]
        )

        assert index["a"].started_at == at(1)
        assert index["a"].done_at == at(3)
        assert index["b"].started_at is None
        assert index["b"].done_at == at(2)

    def test_unknown_task_gets_empty_timeline(self) -> None:
        """Tasks without events resolve to an empty timeline."""
        assert TimelineIndex([]).get("missing") == Timeline()

    def test_timelines_are_memoized(self, make_event) -> None:
        """Repeated lookups return the same Timeline object."""
        index = TimelineIndex([make_event("a", at(1), "done")])

        assert index.get("a") is index.get("a")

    def test_as_dict_covers_requested_tasks(self, make_event) -> None:
        """as_dict returns one entry per requested task."""
        index = TimelineIndex([make_event("a", at(1), "done")])

        timelines = index.as_dict(["a", "b"])

        assert set(timelines) == {"a", "b"}
        assert timelines["b"] == Timeline()

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        """Naive event timestamps compare equal to their UTC equivalent."""
        index = TimelineIndex(
            [
                StatusChangeEvent(
                    task_id="a", created_at=datetime(2026, 10, 5, 10), meta={"to": "done"}
                )
            ]
        )

        assert index["a"].done_at == at(1)
