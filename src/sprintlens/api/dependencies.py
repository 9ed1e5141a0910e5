"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from sprintlens.orchestrator import ReportOrchestrator
from sprintlens.state_store import StateStore

# Global StateStore instance (initialized on app startup)
_state_store: StateStore | None = None


def init_state_store(db_path: str = "sprintlens.db") -> StateStore:
    """Initialize the global StateStore instance."""
    global _state_store  # noqa: PLW0603
    _state_store = StateStore(db_path)
    return _state_store


def close_state_store() -> None:
    """Close the global StateStore instance."""
    global _state_store  # noqa: PLW0603
    if _state_store is not None:
        _state_store.close()
        _state_store = None


def get_state_store() -> Generator[StateStore, None, None]:
    """Dependency that provides the StateStore instance."""
    if _state_store is None:
        raise RuntimeError("StateStore not initialized. Call init_state_store() first.")
    yield _state_store


StateStoreDep = Annotated[StateStore, Depends(get_state_store)]

# Global ReportOrchestrator instance (initialized on app startup)
_orchestrator: ReportOrchestrator | None = None


def init_orchestrator(orchestrator: ReportOrchestrator) -> None:
    """Initialize the global ReportOrchestrator instance."""
    global _orchestrator  # noqa: PLW0603
    _orchestrator = orchestrator


def close_orchestrator() -> None:
    """Release the global ReportOrchestrator and its email client."""
    global _orchestrator  # noqa: PLW0603
    if _orchestrator is not None:
        _orchestrator.email_sender.close()
        _orchestrator = None


def get_orchestrator() -> Generator[ReportOrchestrator, None, None]:
    """Dependency that provides the ReportOrchestrator instance."""
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized. Call init_orchestrator() first.")
    yield _orchestrator


OrchestratorDep = Annotated[ReportOrchestrator, Depends(get_orchestrator)]
