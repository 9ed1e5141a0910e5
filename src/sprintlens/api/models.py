"""Pydantic models for REST API."""

from datetime import datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from sprintlens.orchestrator import DeliveryResult
from sprintlens.state_store import ReportFormat, ReportKind

T = TypeVar("T")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
EmailAddress = Annotated[str, Field(pattern=EMAIL_PATTERN, max_length=320)]


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Template models


class ReportSectionsConfig(BaseModel):
    """Section toggles of a sprint summary template."""

    model_config = ConfigDict(extra="ignore")

    overview: bool = True
    velocity: bool = True
    burndown: bool = True
    completed: bool = True
    in_progress: bool = True
    blockers: bool = True
    assignees: bool = True


class SprintSummaryConfigBody(BaseModel):
    """Config of a sprint summary template. Only keys sent by the client are stored."""

    model_config = ConfigDict(extra="ignore")

    sections: ReportSectionsConfig | None = None
    risk_threshold_pct: int | None = Field(default=None, ge=0, le=100)

    def to_config(self) -> dict[str, Any]:
        """Config dict as stored on the template."""
        return self.model_dump(exclude_unset=True)


class TemplateUpsert(BaseModel):
    """Request model for creating or updating a report template."""

    org_id: str = Field(..., min_length=1, max_length=64)
    id: str | None = None
    name: str = Field(..., min_length=1, max_length=255)
    kind: ReportKind = ReportKind.SPRINT_SUMMARY
    description: str | None = None
    format: ReportFormat = ReportFormat.HTML
    config: SprintSummaryConfigBody = Field(default_factory=SprintSummaryConfigBody)
    active: bool = True


class TemplateResponse(BaseModel):
    """Response model for a report template."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    org_id: str
    name: str
    kind: str
    description: str | None
    format: str
    config: dict[str, Any]
    active: bool
    created_at: datetime


def template_to_response(template: Any) -> TemplateResponse:
    """Convert a ReportTemplate model to TemplateResponse."""
    return TemplateResponse.model_validate(template)


# Report run models


class RunSummaryResponse(BaseModel):
    """Response model for a report run in listings (no payload or HTML)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    org_id: str
    template_id: str
    sprint_id: str
    status: str
    format: str
    pdf_url: str | None
    error: str | None
    started_at: datetime
    finished_at: datetime | None
    created_at: datetime


class RunResponse(RunSummaryResponse):
    """Response model for a full report run."""

    data: dict[str, Any] | None
    html: str | None


def run_to_summary(run: Any) -> RunSummaryResponse:
    """Convert a ReportRun model to RunSummaryResponse."""
    return RunSummaryResponse.model_validate(run)


def run_to_response(run: Any) -> RunResponse:
    """Convert a ReportRun model to RunResponse."""
    return RunResponse.model_validate(run)


class GenerateReportRequest(BaseModel):
    """Request model for generating a sprint report."""

    org_id: str = Field(..., min_length=1, max_length=64)
    template_id: str | None = None


# Delivery models


class DeliveryRequest(BaseModel):
    """Request model for emailing a report run."""

    org_id: str = Field(..., min_length=1, max_length=64)
    to: list[EmailAddress] = Field(..., min_length=1, max_length=50)
    subject: str = Field(default="Sprint report", min_length=1, max_length=255)

    def recipients(self) -> list[str]:
        """Recipients with duplicates removed, in request order."""
        return list(dict.fromkeys(self.to))


class DeliveryRecordResponse(BaseModel):
    """Response model for a single delivery attempt."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    channel: str
    target: str
    status: str
    error: str | None
    sent_at: datetime | None


class DeliveryResponse(BaseModel):
    """Response model for an email delivery request."""

    ok: bool
    deliveries: list[DeliveryRecordResponse]
    sent: int
    failed: int


def delivery_to_response(result: DeliveryResult) -> DeliveryResponse:
    """Convert a DeliveryResult to DeliveryResponse."""
    return DeliveryResponse(
        ok=result.failed == 0,
        deliveries=[DeliveryRecordResponse.model_validate(d) for d in result.deliveries],
        sent=result.sent,
        failed=result.failed,
    )
