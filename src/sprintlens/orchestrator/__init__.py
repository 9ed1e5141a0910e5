"""Orchestrator - report run lifecycle and delivery."""

from sprintlens.orchestrator.exceptions import (
    InvalidTemplateConfigError,
    OrchestratorError,
    ReportGenerationError,
    RunNotReadyError,
)
from sprintlens.orchestrator.models import DeliveryResult
from sprintlens.orchestrator.orchestrator import (
    DEFAULT_SPRINT_CONFIG,
    DEFAULT_TEMPLATE_NAME,
    ReportOrchestrator,
)

__all__ = [
    "DEFAULT_SPRINT_CONFIG",
    "DEFAULT_TEMPLATE_NAME",
    "DeliveryResult",
    "InvalidTemplateConfigError",
    "OrchestratorError",
    "ReportGenerationError",
    "ReportOrchestrator",
    "RunNotReadyError",
]
