"""StateStore - Main API for State Store operations."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import select

from sprintlens.state_store.database import Database
from sprintlens.state_store.exceptions import (
    ReportRunNotFoundError,
    SprintNotFoundError,
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
    to_naive_utc,
    utcnow,
)


class StateStore:
    """Main API for State Store operations.

    Provides the read-only accessors the report engine consumes (sprint
    snapshots, status-change events, user lookup) plus persistence for
    sprints, tasks, report templates, report runs and deliveries.
    """

    def __init__(self, db_path: str = "sprintlens.db") -> None:
        """Initialize State Store with SQLite database.

        Creates database and tables if they don't exist.

        Args:
            db_path: Path to SQLite database file
        """
        self._db = Database(db_path)
        self._db.create_tables()

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- User Operations ---

    def create_user(self, email: str, name: str | None = None, user_id: str | None = None) -> User:
        """Create a user.

        Args:
            email: User email address
            name: Display name (optional)
            user_id: Identity-provider ID (generated when omitted)

        Returns:
            Created User object
        """
        with self._db.transaction() as session:
            user = User(id=user_id, email=email, name=name)
            session.add(user)
        return user

    def resolve_users(self, user_ids: Iterable[str]) -> list[UserRef]:
        """Look up display information for the given user IDs.

        Unknown IDs are silently absent from the result.
        """
        ids = sorted(set(user_ids))
        if not ids:
            return []
        with self._db.session() as session:
            stmt = select(User).where(User.id.in_(ids))
            return [
                UserRef(id=u.id, name=u.name, email=u.email)
                for u in session.execute(stmt).scalars()
            ]

    # --- Sprint Operations ---

    def create_sprint(
        self,
        org_id: str,
        name: str,
        goal: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        status: SprintStatus = SprintStatus.PLANNED,
        velocity_target: int | None = None,
    ) -> Sprint:
        """Create a new sprint.

        Args:
            org_id: Owning organization
            name: Sprint name
            goal: Sprint goal (optional)
            start_date: Planned start (optional)
            end_date: Planned end (optional)
            status: Initial status
            velocity_target: Target points (optional)

        Returns:
            Created Sprint object with generated ID
        """
        with self._db.transaction() as session:
            sprint = Sprint(
                org_id=org_id,
                name=name,
                goal=goal,
                status=status.value,
                start_date=start_date,
                end_date=end_date,
                velocity_target=velocity_target,
            )
            session.add(sprint)
        return sprint

    def get_sprint(self, org_id: str, sprint_id: str) -> Sprint:
        """Get sprint by ID within an organization.

        Raises:
            SprintNotFoundError: If the sprint doesn't exist or belongs to another org
        """
        with self._db.session() as session:
            sprint = session.get(Sprint, sprint_id)
            if sprint is None or sprint.org_id != org_id:
                raise SprintNotFoundError(f"Sprint with id '{sprint_id}' not found")
            return sprint

    def list_sprints(self, org_id: str) -> list[Sprint]:
        """List sprints of an organization, most recent first."""
        with self._db.session() as session:
            stmt = (
                select(Sprint).where(Sprint.org_id == org_id).order_by(Sprint.created_at.desc())
            )
            return list(session.execute(stmt).scalars().all())

    def start_sprint(self, org_id: str, sprint_id: str, at: datetime | None = None) -> Sprint:
        """Mark a sprint ACTIVE and stamp its start date."""
        return self._set_sprint_status(org_id, sprint_id, SprintStatus.ACTIVE, at, "start_date")

    def complete_sprint(self, org_id: str, sprint_id: str, at: datetime | None = None) -> Sprint:
        """Mark a sprint CLOSED and stamp its end date."""
        return self._set_sprint_status(org_id, sprint_id, SprintStatus.CLOSED, at, "end_date")

    def _set_sprint_status(
        self,
        org_id: str,
        sprint_id: str,
        status: SprintStatus,
        at: datetime | None,
        date_field: str,
    ) -> Sprint:
        with self._db.transaction() as session:
            sprint = session.get(Sprint, sprint_id)
            if sprint is None or sprint.org_id != org_id:
                raise SprintNotFoundError(f"Sprint with id '{sprint_id}' not found")
            sprint.status = status.value
            setattr(sprint, date_field, to_naive_utc(at) or utcnow())
        return sprint

    def load_sprint_with_tasks(self, sprint_id: str) -> SprintSnapshot | None:
        """Load a read-only snapshot of a sprint and its tasks.

        Tasks are ordered by creation time ascending.

        Returns:
            The snapshot, or None if the sprint doesn't exist
        """
        with self._db.session() as session:
            sprint = session.get(Sprint, sprint_id)
            if sprint is None:
                return None
            stmt = (
                select(Task)
                .where(Task.sprint_id == sprint_id)
                .order_by(Task.created_at.asc(), Task.id.asc())
            )
            tasks = [
                TaskSnapshot(
                    id=t.id,
                    title=t.title,
                    estimate=t.estimate,
                    assignee_id=t.assignee_id,
                    created_at=t.created_at,
                    updated_at=t.updated_at,
                    status=t.status,
                    type=t.type,
                    priority=t.priority,
                )
                for t in session.execute(stmt).scalars()
            ]
            return SprintSnapshot(
                id=sprint.id,
                org_id=sprint.org_id,
                name=sprint.name,
                goal=sprint.goal,
                status=sprint.status,
                start_date=sprint.start_date,
                end_date=sprint.end_date,
                tasks=tasks,
            )

    # --- Task Operations ---

    def create_task(
        self,
        org_id: str,
        title: str,
        sprint_id: str | None = None,
        estimate: int | None = None,
        assignee_id: str | None = None,
        status: TaskStatus | None = TaskStatus.TODO,
        task_type: TaskType = TaskType.FEATURE,
        priority: TaskPriority = TaskPriority.MEDIUM,
        created_at: datetime | None = None,
        actor_id: str | None = None,
    ) -> Task:
        """Create a task and record its CREATED activity.

        Args:
            org_id: Owning organization
            title: Task title
            sprint_id: Sprint the task belongs to (optional)
            estimate: Point estimate (optional)
            assignee_id: Assigned user ID (optional)
            status: Board column status, None for no column
            task_type: Task type
            priority: Task priority
            created_at: Creation timestamp (defaults to now)
            actor_id: User creating the task (optional)

        Returns:
            Created Task object
        """
        with self._db.transaction() as session:
            task = Task(
                org_id=org_id,
                title=title,
                sprint_id=sprint_id,
                estimate=estimate,
                assignee_id=assignee_id,
                status=status.value if status is not None else None,
                type=task_type.value,
                priority=priority.value,
                created_at=created_at,
            )
            session.add(task)
            session.add(
                TaskActivity(
                    org_id=org_id,
                    task_id=task.id,
                    actor_id=actor_id,
                    type=ActivityType.CREATED.value,
                    meta={"title": title},
                    created_at=task.created_at,
                )
            )
        return task

    def get_task(self, task_id: str) -> Task:
        """Get task by ID.

        Raises:
            TaskNotFoundError: If task doesn't exist
        """
        with self._db.session() as session:
            task = session.get(Task, task_id)
            if task is None:
                raise TaskNotFoundError(f"Task with id '{task_id}' not found")
            return task

    def change_task_status(
        self,
        task_id: str,
        status: TaskStatus | None,
        actor_id: str | None = None,
        at: datetime | None = None,
    ) -> Task:
        """Move a task to another column and append a STATUS_CHANGED event.

        Args:
            task_id: The task's unique ID
            status: New column status, None to take the task off the board
            actor_id: User performing the move (optional)
            at: Event timestamp (defaults to now)

        Returns:
            The updated Task object

        Raises:
            TaskNotFoundError: If task doesn't exist
        """
        when = to_naive_utc(at) or utcnow()
        with self._db.transaction() as session:
            task = session.get(Task, task_id)
            if task is None:
                raise TaskNotFoundError(f"Task with id '{task_id}' not found")

            previous = task.status
            task.status = status.value if status is not None else None
            task.updated_at = when
            session.add(
                TaskActivity(
                    org_id=task.org_id,
                    task_id=task.id,
                    actor_id=actor_id,
                    type=ActivityType.STATUS_CHANGED.value,
                    meta={"from": previous, "to": task.status},
                    created_at=when,
                )
            )
        return task

    def record_activity(
        self,
        task_id: str,
        activity_type: ActivityType,
        meta: Any = None,
        actor_id: str | None = None,
        at: datetime | None = None,
    ) -> TaskActivity:
        """Append a raw activity row for a task without touching the task itself.

        Raises:
            TaskNotFoundError: If task doesn't exist
        """
        with self._db.transaction() as session:
            task = session.get(Task, task_id)
            if task is None:
                raise TaskNotFoundError(f"Task with id '{task_id}' not found")
            activity = TaskActivity(
                org_id=task.org_id,
                task_id=task_id,
                actor_id=actor_id,
                type=activity_type.value,
                meta=meta,
                created_at=at,
            )
            session.add(activity)
        return activity

    def load_status_change_events(
        self, org_id: str, task_ids: Iterable[str]
    ) -> list[StatusChangeEvent]:
        """Load STATUS_CHANGED events for the given tasks, oldest first."""
        ids = list(task_ids)
        if not ids:
            return []
        with self._db.session() as session:
            stmt = (
                select(TaskActivity)
                .where(
                    TaskActivity.org_id == org_id,
                    TaskActivity.task_id.in_(ids),
                    TaskActivity.type == ActivityType.STATUS_CHANGED.value,
                )
                .order_by(TaskActivity.created_at.asc())
            )
            return [
                StatusChangeEvent(task_id=a.task_id, created_at=a.created_at, meta=a.meta)
                for a in session.execute(stmt).scalars()
            ]

    # --- Template Operations ---

    def create_template(
        self,
        org_id: str,
        name: str,
        config: dict[str, Any],
        kind: ReportKind = ReportKind.SPRINT_SUMMARY,
        description: str | None = None,
        report_format: ReportFormat = ReportFormat.HTML,
        active: bool = True,
    ) -> ReportTemplate:
        """Create a report template."""
        with self._db.transaction() as session:
            template = ReportTemplate(
                org_id=org_id,
                name=name,
                config=config,
                kind=kind.value,
                description=description,
                format=report_format.value,
                active=active,
            )
            session.add(template)
        return template

    def update_template(
        self,
        org_id: str,
        template_id: str,
        name: str | None = None,
        config: dict[str, Any] | None = None,
        kind: ReportKind | None = None,
        description: str | None = None,
        report_format: ReportFormat | None = None,
        active: bool | None = None,
    ) -> ReportTemplate:
        """Update template fields. Only provided fields are updated.

        Raises:
            TemplateNotFoundError: If template doesn't exist in the org
        """
        with self._db.transaction() as session:
            template = session.get(ReportTemplate, template_id)
            if template is None or template.org_id != org_id:
                raise TemplateNotFoundError(f"Template with id '{template_id}' not found")

            if name is not None:
                template.name = name
            if config is not None:
                template.config = config
            if kind is not None:
                template.kind = kind.value
            if description is not None:
                template.description = description
            if report_format is not None:
                template.format = report_format.value
            if active is not None:
                template.active = active
        return template

    def get_template(self, org_id: str, template_id: str) -> ReportTemplate:
        """Get template by ID within an organization.

        Raises:
            TemplateNotFoundError: If template doesn't exist in the org
        """
        with self._db.session() as session:
            template = session.get(ReportTemplate, template_id)
            if template is None or template.org_id != org_id:
                raise TemplateNotFoundError(f"Template with id '{template_id}' not found")
            return template

    def list_templates(self, org_id: str, active_only: bool = True) -> list[ReportTemplate]:
        """List templates of an organization, most recent first."""
        with self._db.session() as session:
            stmt = select(ReportTemplate).where(ReportTemplate.org_id == org_id)
            if active_only:
                stmt = stmt.where(ReportTemplate.active.is_(True))
            stmt = stmt.order_by(ReportTemplate.created_at.desc())
            return list(session.execute(stmt).scalars().all())

    def find_active_template(
        self, org_id: str, kind: ReportKind = ReportKind.SPRINT_SUMMARY
    ) -> ReportTemplate | None:
        """Return the most recent active template of a kind, if any."""
        with self._db.session() as session:
            stmt = (
                select(ReportTemplate)
                .where(
                    ReportTemplate.org_id == org_id,
                    ReportTemplate.kind == kind.value,
                    ReportTemplate.active.is_(True),
                )
                .order_by(ReportTemplate.created_at.desc())
                .limit(1)
            )
            return session.execute(stmt).scalar_one_or_none()

    # --- Report Run Operations ---

    def create_report_run(
        self,
        org_id: str,
        sprint_id: str,
        template_id: str,
        report_format: ReportFormat = ReportFormat.HTML,
    ) -> ReportRun:
        """Create a report run in GENERATING state."""
        with self._db.transaction() as session:
            run = ReportRun(
                org_id=org_id,
                template_id=template_id,
                sprint_id=sprint_id,
                status=ReportRunStatus.GENERATING.value,
                format=report_format.value,
            )
            session.add(run)
        return run

    def mark_run_ready(
        self,
        run_id: str,
        data: dict[str, Any],
        html: str,
        pdf_url: str | None = None,
    ) -> ReportRun:
        """Store generated output and move the run to READY.

        Raises:
            ReportRunNotFoundError: If run doesn't exist
        """
        with self._db.transaction() as session:
            run = self._require_run(session.get(ReportRun, run_id), run_id)
            run.data = data
            run.html = html
            run.pdf_url = pdf_url
            run.error = None
            run.status = ReportRunStatus.READY.value
            run.finished_at = utcnow()
        return run

    def mark_run_failed(self, run_id: str, error: str) -> ReportRun:
        """Move the run to FAILED with the captured error message.

        Raises:
            ReportRunNotFoundError: If run doesn't exist
        """
        with self._db.transaction() as session:
            run = self._require_run(session.get(ReportRun, run_id), run_id)
            run.status = ReportRunStatus.FAILED.value
            run.error = error
            run.finished_at = utcnow()
        return run

    def get_report_run(self, org_id: str, run_id: str) -> ReportRun:
        """Get report run by ID within an organization.

        Raises:
            ReportRunNotFoundError: If run doesn't exist in the org
        """
        with self._db.session() as session:
            run = session.get(ReportRun, run_id)
            if run is not None and run.org_id != org_id:
                run = None
            return self._require_run(run, run_id)

    def list_report_runs(
        self,
        org_id: str,
        status: ReportRunStatus | None = ReportRunStatus.READY,
        sprint_id: str | None = None,
        limit: int = 20,
    ) -> list[ReportRun]:
        """List report runs of an organization, most recent first.

        Args:
            org_id: Organization to list
            status: Filter by status (None = all). Defaults to READY.
            sprint_id: Filter by sprint (optional)
            limit: Max results
        """
        with self._db.session() as session:
            stmt = select(ReportRun).where(ReportRun.org_id == org_id)
            if status is not None:
                stmt = stmt.where(ReportRun.status == status.value)
            if sprint_id is not None:
                stmt = stmt.where(ReportRun.sprint_id == sprint_id)
            stmt = stmt.order_by(ReportRun.created_at.desc()).limit(limit)
            return list(session.execute(stmt).scalars().all())

    def get_latest_sprint_run(self, org_id: str, sprint_id: str) -> ReportRun | None:
        """Return the most recent READY run for a sprint, if any."""
        runs = self.list_report_runs(org_id, sprint_id=sprint_id, limit=1)
        return runs[0] if runs else None

    @staticmethod
    def _require_run(run: ReportRun | None, run_id: str) -> ReportRun:
        if run is None:
            raise ReportRunNotFoundError(f"Report run with id '{run_id}' not found")
        return run

    # --- Delivery Operations ---

    def record_delivery(
        self,
        org_id: str,
        run_id: str,
        target: str,
        status: DeliveryStatus,
        error: str | None = None,
        channel: DeliveryChannel = DeliveryChannel.EMAIL,
    ) -> ReportDelivery:
        """Record one delivery attempt. SENT deliveries are stamped with sent_at."""
        with self._db.transaction() as session:
            delivery = ReportDelivery(
                org_id=org_id,
                run_id=run_id,
                target=target,
                status=status.value,
                channel=channel.value,
                error=error,
                sent_at=utcnow() if status is DeliveryStatus.SENT else None,
            )
            session.add(delivery)
        return delivery

    def list_deliveries(self, run_id: str) -> list[ReportDelivery]:
        """List deliveries of a run in creation order."""
        with self._db.session() as session:
            stmt = (
                select(ReportDelivery)
                .where(ReportDelivery.run_id == run_id)
                .order_by(ReportDelivery.created_at.asc())
            )
            return list(session.execute(stmt).scalars().all())
