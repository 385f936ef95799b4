"""Cornebuild - ZMK firmware build orchestrator for the Corne keyboard."""

from importlib.metadata import distribution

from .models.build import BuildOutcome, BuildTarget, ResolvedConfig, RunResult


__version__ = distribution(__package__ or "cornebuild").version

__all__ = [
    "BuildOutcome",
    "BuildTarget",
    "ResolvedConfig",
    "RunResult",
    "__version__",
]

# Import CLI after setting __version__ to avoid circular imports
from .cli import app, main


__all__ += ["app", "main"]
