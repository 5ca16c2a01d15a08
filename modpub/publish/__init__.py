"""Publishing tasks for mod releases and the plan that wires them together."""

from .context import Bump, ModPaths, ReleaseContext, ReleaseOptions, ReleaseState
from .plan import build_pipeline

__all__ = [
    "Bump",
    "ModPaths",
    "ReleaseContext",
    "ReleaseOptions",
    "ReleaseState",
    "build_pipeline",
]
