"""Data models for the sprint report engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from sprintlens.reports.exceptions import ReportConfigError
from sprintlens.state_store.models import TaskSnapshot

DEFAULT_RISK_THRESHOLD_PCT = 60


@dataclass
class Timeline:
    """Lifecycle facts derived from a task's status-change events.

    Attributes:
        started_at: First transition into an in-progress-like status.
        done_at: First transition into DONE.
        reopened: True once the task left DONE after first reaching it.
    """

    started_at: datetime | None = None
    done_at: datetime | None = None
    reopened: bool = False


@dataclass
class SprintWindow:
    """Resolved reporting window of a sprint."""

    start: datetime
    end: datetime
    days: int


@dataclass
class TaskLists:
    """Sprint tasks classified for the report."""

    completed: list[TaskSnapshot] = field(default_factory=list)
    in_progress: list[TaskSnapshot] = field(default_factory=list)
    not_done: list[TaskSnapshot] = field(default_factory=list)


@dataclass
class DayPoints:
    """Points completed on one calendar day."""

    day: str
    points: int


@dataclass
class BurndownPoint:
    """Points still open at the end of one calendar day."""

    day: str
    remaining: int


@dataclass
class SprintMetrics:
    """Aggregated sprint metrics."""

    tasks_total: int = 0
    points_total: int = 0
    points_done: int = 0  # velocity
    completion_pct: int = 0  # 0-100
    scoped_in: int = 0
    carried_over: int = 0
    reopened: int = 0
    at_risk: bool = False
    throughput: list[DayPoints] = field(default_factory=list)
    burndown: list[BurndownPoint] = field(default_factory=list)

    @property
    def velocity(self) -> int:
        return self.points_done


@dataclass
class AssigneeStats:
    """Completed work of one assignee."""

    name: str
    email: str
    points_done: int = 0
    tasks_done: int = 0


@dataclass
class ReportSections:
    """Which sections a sprint summary renders."""

    overview: bool = True
    velocity: bool = True
    burndown: bool = True
    completed: bool = True
    in_progress: bool = True
    blockers: bool = True
    assignees: bool = True


@dataclass
class SprintSummaryConfig:
    """Configuration of a sprint summary report template.

    Attributes:
        sections: Section toggles.
        risk_threshold_pct: Completion below this percentage flags the sprint "at risk".
    """

    sections: ReportSections = field(default_factory=ReportSections)
    risk_threshold_pct: int | None = DEFAULT_RISK_THRESHOLD_PCT

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SprintSummaryConfig:
        """Build a config from stored template JSON, ignoring unknown keys.

        Raises:
            ReportConfigError: If a known key has the wrong type or range.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ReportConfigError("Report config must be an object")

        raw_sections = data.get("sections")
        if raw_sections is None:
            raw_sections = {}
        if not isinstance(raw_sections, dict):
            raise ReportConfigError("'sections' must be an object")

        known = ReportSections.__dataclass_fields__
        toggles: dict[str, bool] = {}
        for key, value in raw_sections.items():
            if key not in known:
                continue
            if not isinstance(value, bool):
                raise ReportConfigError(f"Section '{key}' must be true or false")
            toggles[key] = value

        threshold = data.get("risk_threshold_pct", DEFAULT_RISK_THRESHOLD_PCT)
        # bool is an int subclass
        if threshold is not None and (
            isinstance(threshold, bool)
            or not isinstance(threshold, int)
            or not 0 <= threshold <= 100
        ):
            raise ReportConfigError(
                f"'risk_threshold_pct' must be an integer from 0 to 100, got {threshold!r}"
            )

        return cls(sections=ReportSections(**toggles), risk_threshold_pct=threshold)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for storage on a report template."""
        return asdict(self)


@dataclass
class GeneratedReport:
    """Output of one report generation.

    Attributes:
        data: JSON-serializable metrics payload.
        html: Self-contained HTML document.
        pdf_url: Location of a rendered PDF, when one exists.
    """

    data: dict[str, Any]
    html: str
    pdf_url: str | None = None
