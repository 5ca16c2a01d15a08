"""Thin git wrapper used by the pre-check and rollback tasks."""

from __future__ import annotations

from pathlib import Path

from modpub.core.result import Result
from modpub.platform.process import ProcessError
from modpub.platform.process import run as run_process
from modpub.publish.timeouts import GIT_TIMEOUT_SECONDS

__all__ = ["git"]


def git(
    root: Path,
    *args: str,
    exe: str = "git",
    timeout: float = GIT_TIMEOUT_SECONDS,
) -> Result[str, ProcessError]:
    """Run ``git <args>`` in ``root`` and return stdout."""
    return run_process([exe, *args], cwd=root, timeout=timeout)
