"""SprintLens - Sprint report aggregation and delivery."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the installed SprintLens version."""
    return __version__
