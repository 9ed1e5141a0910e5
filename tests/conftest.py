"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from sprintlens.state_store import SprintSnapshot, StatusChangeEvent, TaskSnapshot


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures

SPRINT_START = datetime(2026, 10, 5, 9, 0, tzinfo=UTC)
SPRINT_END = datetime(2026, 10, 9, 17, 0, tzinfo=UTC)


@pytest.fixture
def make_task() -> Callable[..., TaskSnapshot]:
    """Factory for task snapshots with sensible defaults."""
    counter = {"n": 0}

    def _make(**overrides: Any) -> TaskSnapshot:
        counter["n"] += 1
        fields: dict[str, Any] = {
            "id": f"task-{counter['n']}",
            "title": f"Task {counter['n']}",
            "estimate": 1,
            "assignee_id": None,
            "created_at": SPRINT_START,
            "updated_at": SPRINT_START,
            "status": "todo",
            "type": "feature",
            "priority": "medium",
        }
        fields.update(overrides)
        return TaskSnapshot(**fields)

    return _make


@pytest.fixture
def make_sprint() -> Callable[..., SprintSnapshot]:
    """Factory for sprint snapshots (Oct 5 - Oct 9 2026 by default)."""

    def _make(tasks: list[TaskSnapshot] | None = None, **overrides: Any) -> SprintSnapshot:
        fields: dict[str, Any] = {
            "id": "sprint-1",
            "org_id": "org-1",
            "name": "Sprint 12",
            "goal": "Ship the thing",
            "status": "active",
            "start_date": SPRINT_START,
            "end_date": SPRINT_END,
            "tasks": tasks or [],
        }
        fields.update(overrides)
        return SprintSnapshot(**fields)

    return _make


@pytest.fixture
def make_event() -> Callable[..., StatusChangeEvent]:
    """Factory for status-change events moving a task to ``to``."""

    def _make(task_id: str, at: datetime, to: Any, frm: Any = None) -> StatusChangeEvent:
        return StatusChangeEvent(task_id=task_id, created_at=at, meta={"from": frm, "to": to})

    return _make
