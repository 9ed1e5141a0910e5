"""Exceptions for the Orchestrator module."""


class OrchestratorError(Exception):
    """Base exception for orchestrator errors."""


class ReportGenerationError(OrchestratorError):
    """Report generation failed; the run has been marked FAILED."""

    def __init__(self, run_id: str, message: str) -> None:
        super().__init__(message)
        self.run_id = run_id


class RunNotReadyError(OrchestratorError):
    """Operation requires a READY report run."""


class InvalidTemplateConfigError(OrchestratorError):
    """A template config was rejected before being saved."""
