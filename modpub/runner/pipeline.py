"""Sequential task pipeline with setup, main and teardown phases.

Tasks are zero-argument callables. They run one at a time, in order:

    pipeline = Pipeline(console=RichConsole())
    pipeline.add_task(create_package, teardown=[delete_package])
    pipeline.add_task(upload_package)
    report = pipeline.run_sync()

Setup and main tasks stop at the first failure (the rest of the phase is
skipped without output). Teardown tasks always run.

A task reports failure by calling ``pipeline.fail(reason)`` and returning
normally, by returning ``Failure(reason)``, or by raising. A task returning an
awaitable suspends the pipeline until it settles.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import traceback
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import StrEnum

from modpub.output.console import ConsoleProtocol, RichConsole, Style
from modpub.runner.errors import ProgrammingError
from modpub.runner.outcome import Failure, Status

__all__ = ["Phase", "Pipeline", "RunReport", "Task", "TaskRecord", "task_name"]

type Task = Callable[[], object]


class Phase(StrEnum):
    SETUP = "setup"
    MAIN = "main"
    TEARDOWN = "teardown"

    @property
    def label(self) -> str:
        """Name printed when the phase starts."""
        return {Phase.SETUP: "setup", Phase.MAIN: "tasks", Phase.TEARDOWN: "cleanup"}[self]

    @property
    def fail_fast(self) -> bool:
        return self is not Phase.TEARDOWN


@dataclass(frozen=True, slots=True)
class TaskRecord:
    """A task that actually ran."""

    phase: Phase
    name: str
    failed: bool


@dataclass(frozen=True, slots=True)
class RunReport:
    failed: bool
    executed: tuple[TaskRecord, ...]

    def names(self, phase: Phase | None = None) -> list[str]:
        return [r.name for r in self.executed if phase is None or r.phase is phase]


def task_name(task: Task) -> str:
    """Display name of a task: its ``__name__``, unwrapping ``functools.partial``."""
    if isinstance(task, functools.partial):
        return task_name(task.func)
    name = getattr(task, "__name__", None)
    if isinstance(name, str) and name:
        return name
    return type(task).__name__


def format_reason(reason: object) -> str:
    if reason is None:
        return ""
    if isinstance(reason, BaseException):
        return "".join(traceback.format_exception(reason)).rstrip()
    return str(reason)


def _require_callable(task: object) -> None:
    if not callable(task):
        raise ProgrammingError(f"expected a callable task, got {type(task).__name__}")


def _merge(steps: list[Task], new: list[Task]) -> None:
    """Append each step of ``new`` not already in ``steps`` (compared with ==)."""
    for step in new:
        if step not in steps:
            steps.append(step)


class Pipeline:
    """Ordered setup/main/teardown task runner.

    A pipeline is single-use: tasks are registered, ``run()`` is awaited once,
    and the run state stays readable afterwards.
    """

    def __init__(self, console: ConsoleProtocol | None = None) -> None:
        self._console: ConsoleProtocol = console if console is not None else RichConsole()
        # ordered sets by equality; callables need not be hashable
        self._setup: list[Task] = []
        self._tasks: list[Task] = []
        self._teardown: list[Task] = []

        self._started = False
        self._running = False
        self._task_failed = False
        self._run_failed = False
        self._fail_reason: object = None
        self._executed: list[TaskRecord] = []

    # -- registration --------------------------------------------------------

    def add_task(
        self,
        task: Task,
        setup: Iterable[Task] | None = None,
        teardown: Iterable[Task] | None = None,
    ) -> Pipeline:
        """Append ``task`` to the main phase and merge its setup/teardown steps.

        Steps already registered by an earlier task keep their first position.

        Raises:
            ProgrammingError: If a task or step is not callable, or the
                pipeline has already been started.
        """
        _require_callable(task)
        setup_steps = list(setup or ())
        teardown_steps = list(teardown or ())
        for step in (*setup_steps, *teardown_steps):
            _require_callable(step)
        if self._started:
            raise ProgrammingError(f"cannot add {task_name(task)}: pipeline already started")

        self._tasks.append(task)
        _merge(self._setup, setup_steps)
        _merge(self._teardown, teardown_steps)
        return self

    @property
    def setup_steps(self) -> tuple[Task, ...]:
        return tuple(self._setup)

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def teardown_steps(self) -> tuple[Task, ...]:
        return tuple(self._teardown)

    # -- run state -----------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def failed(self) -> bool:
        """True once any task has failed in this run."""
        return self._run_failed

    def fail(self, reason: object = None) -> None:
        """Mark the current task and the run as failed.

        Args:
            reason: Printed after the task status. A string, an exception
                (printed with its traceback) or any object with a useful str.

        Raises:
            ProgrammingError: If no run is in progress.
        """
        if not self._running:
            raise ProgrammingError("cannot fail task: pipeline is not running")
        self._task_failed = True
        self._run_failed = True
        self._fail_reason = reason

    # -- execution -----------------------------------------------------------

    async def run(self) -> RunReport:
        """Run setup, main and teardown phases to completion.

        Task failures do not raise; check ``RunReport.failed``.

        Teardown runs even when a setup or main task misuses the pipeline API.

        Raises:
            ProgrammingError: If the pipeline was already started, or a task
                misused the pipeline API.
        """
        if self._started:
            raise ProgrammingError("pipeline can only be run once")
        self._started = True
        self._running = True
        self._run_failed = False
        self._fail_reason = None
        try:
            try:
                await self._run_task_list(Phase.SETUP, tuple(self._setup))
                await self._run_task_list(Phase.MAIN, tuple(self._tasks))
            finally:
                await self._run_task_list(Phase.TEARDOWN, tuple(self._teardown))
        finally:
            self._running = False
        return RunReport(failed=self._run_failed, executed=tuple(self._executed))

    def run_sync(self) -> RunReport:
        """Run the pipeline on a fresh event loop."""
        return asyncio.run(self.run())

    async def _run_task_list(self, phase: Phase, tasks: tuple[Task, ...]) -> None:
        if not tasks:
            return
        self._console.print(f"Running {phase.label}", Style.DIM)
        for task in tasks:
            if phase.fail_fast and self._run_failed:
                continue
            await self._run_task(phase, task)

    async def _run_task(self, phase: Phase, task: Task) -> None:
        self._task_failed = False
        name = task_name(task)
        self._console.rule(f"Running {name}")

        result: object = None
        try:
            result = task()
            if inspect.isawaitable(result):
                result = await result
        except ProgrammingError:
            raise
        except Exception as exc:
            self.fail(exc)
            result = None

        self._finish_task(phase, name, self._status_of(result))

    def _status_of(self, result: object) -> str | None:
        match result:
            case str():
                return result
            case Status(message=message):
                return message
            case Failure(reason=reason, message=message):
                self.fail(reason)
                return message
            case _:
                return None

    def _finish_task(self, phase: Phase, name: str, status: str | None) -> None:
        if status is not None:
            self._console.print(status)
        if self._task_failed:
            reason = format_reason(self._fail_reason)
            if reason:
                self._console.error(f"Task failed: {reason}")
            self._fail_reason = None
            self._console.error(f">>> {name} Failure")
        else:
            self._console.success(f">>> {name} Success")
        self._executed.append(TaskRecord(phase=phase, name=name, failed=self._task_failed))
