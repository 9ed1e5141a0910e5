"""Exceptions for the report engine."""


class ReportConfigError(ValueError):
    """A report template config has the wrong shape or out-of-range values."""
