"""Task pipeline: ordered setup, main and teardown phases."""

from .errors import ProgrammingError
from .outcome import Failure, Outcome, Status
from .pipeline import Phase, Pipeline, RunReport, Task, TaskRecord, task_name

__all__ = [
    "Failure",
    "Outcome",
    "Phase",
    "Pipeline",
    "ProgrammingError",
    "RunReport",
    "Status",
    "Task",
    "TaskRecord",
    "task_name",
]
