"""Custom exceptions for State Store."""


class StateStoreError(Exception):
    """Base exception for State Store errors."""


class SprintNotFoundError(StateStoreError):
    """Sprint with given ID does not exist in the organization."""


class TaskNotFoundError(StateStoreError):
    """Task with given ID does not exist."""


class TemplateNotFoundError(StateStoreError):
    """Report template does not exist in the organization."""


class ReportRunNotFoundError(StateStoreError):
    """Report run with given ID does not exist in the organization."""
