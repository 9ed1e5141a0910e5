"""Unit tests for SprintReportGenerator."""

import json
from datetime import UTC, datetime

import pytest

from sprintlens.reports import SprintReportGenerator, SprintSummaryConfig
from sprintlens.state_store import SprintNotFoundError, UserRef

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


class FakeSource:
    """In-memory data source recording the calls it receives."""

    def __init__(self, sprint=None, events=(), users=()) -> None:
        self.sprint = sprint
        self.events = list(events)
        self.users = list(users)
        self.event_calls: list[tuple[str, list[str]]] = []
        self.user_calls: list[list[str]] = []

    def load_sprint_with_tasks(self, sprint_id):
        if self.sprint is not None and self.sprint.id == sprint_id:
            return self.sprint
        return None

    def load_status_change_events(self, org_id, task_ids):
        ids = list(task_ids)
        self.event_calls.append((org_id, ids))
        return [e for e in self.events if e.task_id in ids]

    def resolve_users(self, user_ids):
        ids = list(user_ids)
        self.user_calls.append(ids)
        return [u for u in self.users if u.id in ids]


@pytest.fixture
def source(make_task, make_sprint, make_event) -> FakeSource:
    """A sprint with one finished and one open task."""
    done = make_task(title="Ship API", estimate=3, status="done", assignee_id="u1")
    open_task = make_task(title="<b>Docs</b>", estimate=2, status="in_progress")
    events = [
        make_event(done.id, datetime(2026, 10, 6, 10, tzinfo=UTC), "done", "review"),
        make_event(open_task.id, datetime(2026, 10, 6, 11, tzinfo=UTC), "in_progress", "todo"),
    ]
    users = [UserRef(id="u1", name="Ada", email="ada@example.com")]
    return FakeSource(make_sprint([done, open_task]), events, users)


@pytest.mark.unit
class TestGenerateSprintSummary:
    """Tests for generate_sprint_summary."""

    def test_payload_shape(self, source: FakeSource) -> None:
        """Payload carries sprint, metrics, lists, burndown and rollup."""
        report = SprintReportGenerator(source).generate_sprint_summary(
            SprintSummaryConfig(), "sprint-1", "org-1", now=NOW
        )

        data = report.data
        assert set(data) == {"sprint", "metrics", "lists", "burndown", "by_assignee"}
        assert data["sprint"]["name"] == "Sprint 12"
        assert data["sprint"]["days"] == 6
        assert data["metrics"]["points_done"] == 3
        assert data["metrics"]["points_total"] == 5
        assert data["metrics"]["completion_pct"] == 60
        assert [t["title"] for t in data["lists"]["completed"]] == ["Ship API"]
        assert [t["title"] for t in data["lists"]["not_done"]] == ["<b>Docs</b>"]
        assert len(data["burndown"]) == data["sprint"]["days"]
        assert data["by_assignee"] == [
            {"name": "Ada", "email": "ada@example.com", "points_done": 3, "tasks_done": 1}
        ]

    def test_payload_is_json_serializable(self, source: FakeSource) -> None:
        """The payload survives a JSON round trip unchanged."""
        report = SprintReportGenerator(source).generate_sprint_summary(
            SprintSummaryConfig(), "sprint-1", "org-1", now=NOW
        )

        assert json.loads(json.dumps(report.data)) == report.data

    def test_html_escapes_titles(self, source: FakeSource) -> None:
        """User text reaches the HTML escaped."""
        report = SprintReportGenerator(source).generate_sprint_summary(
            SprintSummaryConfig(), "sprint-1", "org-1", now=NOW
        )

        assert "&lt;b&gt;Docs&lt;/b&gt;" in report.html
        assert "<b>Docs</b>" not in report.html

    def test_idempotent(self, source: FakeSource) -> None:
        """Two generations over the same snapshot are identical."""
        generator = SprintReportGenerator(source)

        config = SprintSummaryConfig()

        first = generator.generate_sprint_summary(config, "sprint-1", "org-1", now=NOW)
        second = generator.generate_sprint_summary(config, "sprint-1", "org-1", now=NOW)

        assert first.data == second.data
        assert first.html == second.html

    def test_missing_sprint(self, source: FakeSource) -> None:
        """Unknown sprints fail before any event is loaded."""
        with pytest.raises(SprintNotFoundError):
            SprintReportGenerator(source).generate_sprint_summary(
                SprintSummaryConfig(), "nope", "org-1", now=NOW
            )

        assert source.event_calls == []

    def test_cross_org_sprint(self, source: FakeSource) -> None:
        """A sprint of another org is reported as not found."""
        with pytest.raises(SprintNotFoundError):
            SprintReportGenerator(source).generate_sprint_summary(
                SprintSummaryConfig(), "sprint-1", "other-org", now=NOW
            )

        assert source.event_calls == []

    def test_empty_sprint(self, make_sprint) -> None:
        """A sprint without tasks produces a zeroed report."""
        source = FakeSource(make_sprint([], start_date=None, end_date=None))

        report = SprintReportGenerator(source).generate_sprint_summary(
            SprintSummaryConfig(), "sprint-1", "org-1", now=NOW
        )

        assert report.data["metrics"]["completion_pct"] == 0
        assert report.data["lists"] == {"completed": [], "in_progress": [], "not_done": []}
        assert all(b["remaining"] == 0 for b in report.data["burndown"])
        assert report.data["by_assignee"] == []
        assert source.event_calls == []
        assert source.user_calls == []

    def test_events_loaded_for_sprint_tasks(self, source: FakeSource) -> None:
        """Events are requested once, scoped to the org and sprint tasks."""
        SprintReportGenerator(source).generate_sprint_summary(
            SprintSummaryConfig(), "sprint-1", "org-1", now=NOW
        )

        assert source.event_calls == [("org-1", ["task-1", "task-2"])]
