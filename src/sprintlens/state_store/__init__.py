"""State Store - Sprint/task snapshots, event log access and report-run persistence."""

from sprintlens.state_store.exceptions import (
    ReportRunNotFoundError,
    SprintNotFoundError,
    StateStoreError,
    TaskNotFoundError,
    TemplateNotFoundError,
)
from sprintlens.state_store.models import (
    ActivityType,
    DeliveryChannel,
    DeliveryStatus,
    ReportDelivery,
    ReportFormat,
    ReportKind,
    ReportRun,
    ReportRunStatus,
    ReportTemplate,
    Sprint,
    SprintSnapshot,
    SprintStatus,
    StatusChangeEvent,
    Task,
    TaskActivity,
    TaskPriority,
    TaskSnapshot,
    TaskStatus,
    TaskType,
    User,
    UserRef,
)
from sprintlens.state_store.store import StateStore

__all__ = [
    "ActivityType",
    "DeliveryChannel",
    "DeliveryStatus",
    "ReportDelivery",
    "ReportFormat",
    "ReportKind",
    "ReportRun",
    "ReportRunNotFoundError",
    "ReportRunStatus",
    "ReportTemplate",
    "Sprint",
    "SprintNotFoundError",
    "SprintSnapshot",
    "SprintStatus",
    "StateStore",
    "StateStoreError",
    "StatusChangeEvent",
    "Task",
    "TaskActivity",
    "TaskNotFoundError",
    "TaskPriority",
    "TaskSnapshot",
    "TaskStatus",
    "TaskType",
    "TemplateNotFoundError",
    "User",
    "UserRef",
]
