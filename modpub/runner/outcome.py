"""Tagged task outcomes.

A task body may return a plain ``str`` (status message), ``None`` (nothing to
report), or one of the types below. An awaitable returned by a task is awaited
and its value interpreted the same way.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Failure", "Outcome", "Status"]


@dataclass(frozen=True, slots=True)
class Status:
    """Task finished; ``message`` is printed after it."""

    message: str


@dataclass(frozen=True, slots=True)
class Failure:
    """Task failed with ``reason``.

    ``message`` is printed as the task status before the reason, the same as
    a task that calls ``Pipeline.fail`` and then returns a string.
    """

    reason: object = None
    message: str | None = None


type Outcome = Status | Failure | None
