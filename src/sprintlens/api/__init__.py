"""REST API for SprintLens."""

from sprintlens.api.app import create_app
from sprintlens.api.models import (
    APIResponse,
    DeliveryRequest,
    DeliveryResponse,
    GenerateReportRequest,
    RunResponse,
    RunSummaryResponse,
    SprintSummaryConfigBody,
    TemplateResponse,
    TemplateUpsert,
)

__all__ = [
    "APIResponse",
    "DeliveryRequest",
    "DeliveryResponse",
    "GenerateReportRequest",
    "RunResponse",
    "RunSummaryResponse",
    "SprintSummaryConfigBody",
    "TemplateResponse",
    "TemplateUpsert",
    "create_app",
]
