"""SQLAlchemy models and read projections for State Store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class TaskStatus(StrEnum):
    """Board column status of a task."""

    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    REVIEW = "review"
    DONE = "done"


class TaskType(StrEnum):
    """Task type enum."""

    FEATURE = "feature"
    BUG = "bug"
    CHORE = "chore"


class TaskPriority(StrEnum):
    """Task priority enum."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class SprintStatus(StrEnum):
    """Sprint status enum."""

    PLANNED = "planned"
    ACTIVE = "active"
    CLOSED = "closed"


class ActivityType(StrEnum):
    """Task activity type enum."""

    CREATED = "created"
    UPDATED = "updated"
    MOVED = "moved"
    STATUS_CHANGED = "status_changed"
    COMMENT_ADDED = "comment_added"


class ReportKind(StrEnum):
    """Report template kind."""

    SPRINT_SUMMARY = "sprint_summary"


class ReportFormat(StrEnum):
    """Report output format."""

    HTML = "html"
    PDF = "pdf"


class ReportRunStatus(StrEnum):
    """Report run lifecycle status."""

    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class DeliveryChannel(StrEnum):
    """Report delivery channel."""

    EMAIL = "email"


class DeliveryStatus(StrEnum):
    """Per-recipient delivery status."""

    SENT = "sent"
    ERROR = "error"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def as_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime (naive values are taken as UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as a naive UTC datetime for storage."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class User(Base):
    """User model - identity-provider user, used for assignee lookup."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __init__(
        self,
        email: str,
        id: str | None = None,
        name: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.email = email
        self.name = name

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r})>"


class Sprint(Base):
    """Sprint model - a time-boxed set of tasks."""

    __tablename__ = "sprints"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    goal: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    velocity_target: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    tasks: Mapped[list[Task]] = relationship(
        "Task", back_populates="sprint", order_by="Task.created_at"
    )

    def __init__(
        self,
        org_id: str,
        name: str,
        id: str | None = None,
        goal: str | None = None,
        status: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        velocity_target: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.org_id = org_id
        self.name = name
        self.goal = goal
        self.status = status if status is not None else SprintStatus.PLANNED.value
        self.start_date = to_naive_utc(start_date)
        self.end_date = to_naive_utc(end_date)
        self.velocity_target = velocity_target
        self.created_at = utcnow()

    @property
    def sprint_status(self) -> SprintStatus:
        """Get status as SprintStatus enum."""
        return SprintStatus(self.status)

    def __repr__(self) -> str:
        return f"<Sprint(id={self.id!r}, name={self.name!r}, status={self.status!r})>"


class Task(Base):
    """Task model - a unit of work, optionally placed in a sprint and a board column."""

    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    sprint_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("sprints.id"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    estimate: Mapped[int | None] = mapped_column(Integer, nullable=True)
    assignee_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    # NULL when the task is not placed in any board column
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    sprint: Mapped[Sprint | None] = relationship("Sprint", back_populates="tasks")
    activities: Mapped[list[TaskActivity]] = relationship(
        "TaskActivity", back_populates="task", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        org_id: str,
        title: str,
        id: str | None = None,
        sprint_id: str | None = None,
        estimate: int | None = None,
        assignee_id: str | None = None,
        status: str | None = TaskStatus.TODO.value,
        type: str = TaskType.FEATURE.value,
        priority: str = TaskPriority.MEDIUM.value,
        created_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.org_id = org_id
        self.title = title
        self.sprint_id = sprint_id
        self.estimate = estimate
        self.assignee_id = assignee_id
        self.status = status
        self.type = type
        self.priority = priority
        self.created_at = to_naive_utc(created_at) or utcnow()
        self.updated_at = self.created_at

    def __repr__(self) -> str:
        return f"<Task(id={self.id!r}, title={self.title!r}, status={self.status!r})>"


class TaskActivity(Base):
    """Task activity model - append-only log of task events."""

    __tablename__ = "task_activities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    task_id: Mapped[str] = mapped_column(String(36), ForeignKey("tasks.id"), nullable=False)
    actor_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    meta: Mapped[Any | None] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    task: Mapped[Task] = relationship("Task", back_populates="activities")

    def __init__(
        self,
        org_id: str,
        task_id: str,
        type: str,
        id: str | None = None,
        actor_id: str | None = None,
        meta: Any | None = None,
        created_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.org_id = org_id
        self.task_id = task_id
        self.type = type
        self.actor_id = actor_id
        self.meta = meta
        self.created_at = to_naive_utc(created_at) or utcnow()

    def __repr__(self) -> str:
        return f"<TaskActivity(id={self.id!r}, task_id={self.task_id!r}, type={self.type!r})>"


class ReportTemplate(Base):
    """Report template model - named report configuration for an organization."""

    __tablename__ = "report_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(30), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    format: Mapped[str] = mapped_column(String(10), nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(
        self,
        org_id: str,
        name: str,
        config: dict[str, Any],
        id: str | None = None,
        kind: str = ReportKind.SPRINT_SUMMARY.value,
        description: str | None = None,
        format: str = ReportFormat.HTML.value,
        active: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.org_id = org_id
        self.name = name
        self.kind = kind
        self.description = description
        self.format = format
        self.config = config
        self.active = active
        self.created_at = utcnow()

    def __repr__(self) -> str:
        return f"<ReportTemplate(id={self.id!r}, name={self.name!r}, kind={self.kind!r})>"


class ReportRun(Base):
    """Report run model - one generation of a report for a sprint."""

    __tablename__ = "report_runs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("report_templates.id"), nullable=False
    )
    sprint_id: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    format: Mapped[str] = mapped_column(String(10), nullable=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    html: Mapped[str | None] = mapped_column(Text, nullable=True)
    pdf_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    deliveries: Mapped[list[ReportDelivery]] = relationship(
        "ReportDelivery", back_populates="run", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        org_id: str,
        template_id: str,
        sprint_id: str,
        id: str | None = None,
        status: str | None = None,
        format: str = ReportFormat.HTML.value,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.org_id = org_id
        self.template_id = template_id
        self.sprint_id = sprint_id
        self.status = status if status is not None else ReportRunStatus.GENERATING.value
        self.format = format
        self.data = None
        self.html = None
        self.pdf_url = None
        self.error = None
        self.started_at = utcnow()
        self.finished_at = None
        self.created_at = self.started_at

    @property
    def run_status(self) -> ReportRunStatus:
        """Get status as ReportRunStatus enum."""
        return ReportRunStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<ReportRun(id={self.id!r}, sprint_id={self.sprint_id!r}, "
            f"status={self.status!r})>"
        )


class ReportDelivery(Base):
    """Report delivery model - one attempt to send a run to one recipient."""

    __tablename__ = "report_deliveries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    org_id: Mapped[str] = mapped_column(String(64), nullable=False)
    run_id: Mapped[str] = mapped_column(String(36), ForeignKey("report_runs.id"), nullable=False)
    channel: Mapped[str] = mapped_column(String(20), nullable=False)
    target: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    run: Mapped[ReportRun] = relationship("ReportRun", back_populates="deliveries")

    def __init__(
        self,
        org_id: str,
        run_id: str,
        target: str,
        status: str,
        id: str | None = None,
        channel: str = DeliveryChannel.EMAIL.value,
        error: str | None = None,
        sent_at: datetime | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.org_id = org_id
        self.run_id = run_id
        self.channel = channel
        self.target = target
        self.status = status
        self.error = error
        self.sent_at = to_naive_utc(sent_at)
        self.created_at = utcnow()

    def __repr__(self) -> str:
        return (
            f"<ReportDelivery(id={self.id!r}, target={self.target!r}, status={self.status!r})>"
        )


# Read projections handed to the report engine.


@dataclass
class TaskSnapshot:
    """Read-only projection of a sprint task."""

    id: str
    title: str
    estimate: int | None
    assignee_id: str | None
    created_at: datetime
    updated_at: datetime
    status: str | None
    type: str
    priority: str

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at)  # type: ignore[assignment]
        self.updated_at = as_utc(self.updated_at)  # type: ignore[assignment]


@dataclass
class SprintSnapshot:
    """Read-only projection of a sprint and its tasks (ordered by creation)."""

    id: str
    org_id: str
    name: str
    goal: str | None
    status: str
    start_date: datetime | None
    end_date: datetime | None
    tasks: list[TaskSnapshot] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.start_date = as_utc(self.start_date)
        self.end_date = as_utc(self.end_date)


@dataclass
class StatusChangeEvent:
    """A recorded status transition of a task.

    ``meta`` is the raw transition metadata, normally ``{"from": ..., "to": ...}``.
    """

    task_id: str
    created_at: datetime
    meta: Any = None

    def __post_init__(self) -> None:
        self.created_at = as_utc(self.created_at)  # type: ignore[assignment]


@dataclass
class UserRef:
    """Display information for an assignee."""

    id: str
    name: str | None
    email: str
