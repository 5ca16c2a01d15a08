"""Subprocess execution with Result-based error handling.

Every external tool (git, gh, MSBuild, steamcmd, nuget) is started through
this module so tasks can match on ``Ok``/``Err`` instead of catching
``CalledProcessError``:

    match run(["git", "rev-parse", "HEAD"], cwd=root):
        case Ok(stdout):
            head = stdout.strip()
        case Err(error):
            pipeline.fail(str(error))
"""

from __future__ import annotations

import asyncio
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from modpub.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_silent", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process, -1 if it never ran.
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command attached to the terminal.

    Use this for interactive tools (steamcmd asks for a Steam Guard code) and
    for commands whose output should stream straight to the user.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)


async def run_streaming(
    cmd: list[str],
    cwd: Path,
    *,
    on_stdout: Callable[[str], None],
    on_stderr: Callable[[str], None],
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command, handing each output line to a callback as it arrives.

    Lines are passed without their trailing newline. stdin is inherited.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd),
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    async def pump(stream: asyncio.StreamReader | None, sink: Callable[[str], None]) -> str:
        seen: list[str] = []
        if stream is None:
            return ""
        while line := await stream.readline():
            text = line.decode(errors="replace").rstrip("\r\n")
            seen.append(text)
            sink(text)
        return "\n".join(seen)

    stdout, stderr = await asyncio.gather(
        pump(proc.stdout, on_stdout),
        pump(proc.stderr, on_stderr),
    )
    returncode = await proc.wait()
    if returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=returncode, stdout=stdout, stderr=stderr)
        )
    return Ok(None)
