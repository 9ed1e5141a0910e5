"""Orchestrator - Report run lifecycle management."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sprintlens.logging import sanitize_for_log, truncate_output
from sprintlens.mailer import EmailSender, MailerError
from sprintlens.orchestrator.exceptions import (
    InvalidTemplateConfigError,
    ReportGenerationError,
    RunNotReadyError,
)
from sprintlens.orchestrator.models import DeliveryResult
from sprintlens.reports import ReportConfigError, SprintReportGenerator, SprintSummaryConfig
from sprintlens.state_store import (
    DeliveryStatus,
    ReportFormat,
    ReportKind,
    ReportRunStatus,
    StateStore,
)

if TYPE_CHECKING:
    from sprintlens.state_store import ReportRun, ReportTemplate

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_NAME = "Sprint Summary (default)"
DEFAULT_TEMPLATE_DESCRIPTION = "Overview, burndown, velocity, lists."
DEFAULT_SPRINT_CONFIG: dict[str, Any] = SprintSummaryConfig().to_dict()

MAX_ERROR_LENGTH = 2000


class ReportOrchestrator:
    """Drives report runs through GENERATING -> READY/FAILED and delivers them.

    The orchestrator owns everything around the pure report engine:
    - Resolves the template a run is generated from
    - Creates the run record before generating and closes it afterwards
    - Captures generation failures on the run
    - Emails READY runs and records one delivery per recipient
    """

    def __init__(
        self,
        state_store: StateStore,
        generator: SprintReportGenerator | None = None,
        email_sender: EmailSender | None = None,
    ) -> None:
        """Initialize the ReportOrchestrator.

        Args:
            state_store: StateStore instance for persistence.
            generator: Report generator (defaults to one reading from state_store).
            email_sender: Email sender (defaults to a development-mode sender).
        """
        self.state_store = state_store
        self.generator = generator or SprintReportGenerator(state_store)
        self.email_sender = email_sender or EmailSender()

    # --- Templates ---

    def ensure_default_template(self, org_id: str) -> ReportTemplate:
        """Return the active sprint summary template, creating the default one if missing."""
        template = self.state_store.find_active_template(org_id, ReportKind.SPRINT_SUMMARY)
        if template is not None:
            return template

        logger.info("Creating default sprint summary template for org %s", org_id)
        return self.state_store.create_template(
            org_id=org_id,
            name=DEFAULT_TEMPLATE_NAME,
            config=dict(DEFAULT_SPRINT_CONFIG),
            kind=ReportKind.SPRINT_SUMMARY,
            description=DEFAULT_TEMPLATE_DESCRIPTION,
        )

    def list_templates(self, org_id: str) -> list[ReportTemplate]:
        """List active templates, seeding the default template for a new org."""
        templates = self.state_store.list_templates(org_id)
        if templates:
            return templates
        return [self.ensure_default_template(org_id)]

    def upsert_template(
        self,
        org_id: str,
        name: str,
        config: dict[str, Any],
        template_id: str | None = None,
        kind: ReportKind = ReportKind.SPRINT_SUMMARY,
        description: str | None = None,
        report_format: ReportFormat = ReportFormat.HTML,
        active: bool = True,
    ) -> ReportTemplate:
        """Update the template with template_id, or create a new one.

        Raises:
            InvalidTemplateConfigError: If config cannot drive a sprint summary.
            TemplateNotFoundError: If template_id is given but doesn't exist in the org.
        """
        try:
            SprintSummaryConfig.from_dict(config)
        except ReportConfigError as e:
            raise InvalidTemplateConfigError(str(e)) from e

        if template_id:
            return self.state_store.update_template(
                org_id,
                template_id,
                name=name,
                config=config,
                kind=kind,
                description=description,
                report_format=report_format,
                active=active,
            )
        return self.state_store.create_template(
            org_id=org_id,
            name=name,
            config=config,
            kind=kind,
            description=description,
            report_format=report_format,
            active=active,
        )

    # --- Runs ---

    def generate_sprint_report(
        self,
        org_id: str,
        sprint_id: str,
        template_id: str | None = None,
        now: datetime | None = None,
    ) -> ReportRun:
        """Generate a sprint summary and persist it as a report run.

        Args:
            org_id: Organization the caller acts in.
            sprint_id: Sprint to report on.
            template_id: Template to use (defaults to the active sprint summary template).
            now: Reference time passed to the generator.

        Returns:
            The READY report run.

        Raises:
            SprintNotFoundError: If the sprint doesn't exist in the org (no run is created).
            TemplateNotFoundError: If template_id doesn't exist in the org.
            ReportGenerationError: If generation fails (the run is marked FAILED).
        """
        self.state_store.get_sprint(org_id, sprint_id)

        if template_id:
            template = self.state_store.get_template(org_id, template_id)
        else:
            template = self.ensure_default_template(org_id)

        run = self.state_store.create_report_run(
            org_id=org_id,
            sprint_id=sprint_id,
            template_id=template.id,
            report_format=ReportFormat(template.format),
        )
        logger.info(
            "Report run %s started for sprint %s (template=%s)", run.id, sprint_id, template.id
        )

        try:
            config = SprintSummaryConfig.from_dict(template.config)
            report = self.generator.generate_sprint_summary(config, sprint_id, org_id, now=now)
            run = self.state_store.mark_run_ready(
                run.id, data=report.data, html=report.html, pdf_url=report.pdf_url
            )
        except Exception as e:
            logger.exception("Report run %s failed", run.id)
            detail = sanitize_for_log(str(e) or type(e).__name__)
            message = truncate_output(detail, MAX_ERROR_LENGTH)
            self.state_store.mark_run_failed(run.id, message)
            raise ReportGenerationError(run.id, message) from e

        logger.info("Report run %s ready", run.id)
        return run

    def get_run(self, org_id: str, run_id: str) -> ReportRun:
        """Get a report run in any status."""
        return self.state_store.get_report_run(org_id, run_id)

    def get_ready_run(self, org_id: str, run_id: str) -> ReportRun:
        """Get a report run that finished successfully.

        Raises:
            ReportRunNotFoundError: If the run doesn't exist in the org.
            RunNotReadyError: If the run is not READY.
        """
        run = self.state_store.get_report_run(org_id, run_id)
        if run.status != ReportRunStatus.READY.value:
            raise RunNotReadyError(f"Report run '{run_id}' is {run.status}, not ready")
        return run

    def list_runs(self, org_id: str, limit: int = 20) -> list[ReportRun]:
        """List READY runs, most recent first."""
        return self.state_store.list_report_runs(org_id, status=ReportRunStatus.READY, limit=limit)

    def get_latest_sprint_run(self, org_id: str, sprint_id: str) -> ReportRun | None:
        """Return the most recent READY run of a sprint."""
        self.state_store.get_sprint(org_id, sprint_id)
        return self.state_store.get_latest_sprint_run(org_id, sprint_id)

    # --- Delivery ---

    def deliver_run_email(
        self,
        org_id: str,
        run_id: str,
        recipients: Sequence[str],
        subject: str = "Sprint report",
    ) -> DeliveryResult:
        """Email a READY run to each recipient.

        Every recipient is attempted; failures are recorded as ERROR deliveries
        and never change the run status.

        Raises:
            ReportRunNotFoundError: If the run doesn't exist in the org.
            RunNotReadyError: If the run is not READY.
        """
        run = self.get_ready_run(org_id, run_id)
        result = DeliveryResult(run_id=run.id)

        for recipient in recipients:
            try:
                self.email_sender.send(to=recipient, subject=subject, html=run.html or "")
            except MailerError as e:
                logger.warning("Delivery of run %s to %s failed: %s", run.id, recipient, e)
                delivery = self.state_store.record_delivery(
                    org_id,
                    run.id,
                    target=recipient,
                    status=DeliveryStatus.ERROR,
                    error=truncate_output(str(e), MAX_ERROR_LENGTH),
                )
            else:
                delivery = self.state_store.record_delivery(
                    org_id, run.id, target=recipient, status=DeliveryStatus.SENT
                )
            result.deliveries.append(delivery)

        logger.info(
            "Run %s delivered: %d sent, %d failed", run.id, result.sent, result.failed
        )
        return result
