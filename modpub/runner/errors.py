"""Errors raised for misuse of the pipeline API.

Task failures never surface as exceptions; they are recorded in the run
state and narrated on the console. A ``ProgrammingError`` means the caller
itself is broken, so the runner lets it propagate.
"""

from __future__ import annotations

__all__ = ["ProgrammingError"]


class ProgrammingError(RuntimeError):
    """The pipeline API was used incorrectly."""
