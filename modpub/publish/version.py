"""Version discovery, bumping and rewriting across the mod's metadata files.

The current version comes from the first of:

1. ``<overrideVersion>`` in About/Version.xml
2. ``AssemblyFileVersion`` in Properties/AssemblyInfo.cs
3. ``AssemblyVersion`` in Properties/AssemblyInfo.cs

and is truncated to ``major.minor.patch``.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path

from modpub.core.result import Err, Ok, Result
from modpub.platform.process import run as run_process
from modpub.publish.context import Bump, ModPaths, ReleaseContext
from modpub.publish.timeouts import BUILD_TIMEOUT_SECONDS

ASSEMBLY_VERSION_RE = re.compile(r'\[assembly: AssemblyVersion\("((?:\d|\.)+?)"\)\]')
ASSEMBLY_FILE_VERSION_RE = re.compile(r'\[assembly: AssemblyFileVersion\("((?:\d|\.)+?)"\)\]')
OVERRIDE_VERSION_RE = re.compile(r"overrideVersion>([\d.]+)")
ABOUT_VERSION_RE = re.compile(r"Version: ([\d.]+)")
MOD_SYNC_VERSION_RE = re.compile(r"Version>([\d.]+)")


@dataclass(frozen=True, slots=True)
class VersionError:
    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class VersionInfo:
    version: str
    using_override: bool


def match_file_contents(path: Path, pattern: re.Pattern[str]) -> str | None:
    """Return the first capture group of ``pattern`` in ``path``, or None.

    A missing or unreadable file counts as no match.
    """
    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    m = pattern.search(contents)
    if m is None:
        return None
    return m.group(1)


def replace_matched_capture(path: Path, pattern: re.Pattern[str], replacement: str) -> bool:
    """Replace the first capture of the first match of ``pattern`` in ``path``.

    Returns:
        True if the file existed and its contents changed.
    """
    if not path.exists():
        return False
    contents = path.read_text(encoding="utf-8")

    def swap(m: re.Match[str]) -> str:
        start = m.start(1) - m.start(0)
        end = m.end(1) - m.start(0)
        whole = m.group(0)
        return whole[:start] + replacement + whole[end:]

    updated = pattern.sub(swap, contents, count=1)
    if updated == contents:
        return False
    path.write_text(updated, encoding="utf-8")
    return True


def read_assembly_version(paths: ModPaths) -> Result[VersionInfo, VersionError]:
    override = match_file_contents(paths.version_file, OVERRIDE_VERSION_RE)
    if override is not None:
        return Ok(VersionInfo(_truncate(override), using_override=True))

    file_version = match_file_contents(paths.assembly_info, ASSEMBLY_FILE_VERSION_RE)
    if file_version is not None:
        return Ok(VersionInfo(_truncate(file_version), using_override=False))

    version = match_file_contents(paths.assembly_info, ASSEMBLY_VERSION_RE)
    if version is None:
        return Err(
            VersionError(
                f"No version found in {paths.version_file.name} or {paths.assembly_info.name}",
                path=paths.assembly_info,
            )
        )
    return Ok(VersionInfo(_truncate(version), using_override=False))


def _truncate(version: str) -> str:
    return ".".join(version.split(".")[:3])


def bump_version(version: str, kind: Bump) -> str:
    """Increment one component of ``major.minor.patch``; missing parts count as 0.

    Raises:
        ValueError: If a component is not an integer.
    """
    parts = [int(p) for p in version.split(".")[:3]]
    parts += [0] * (3 - len(parts))
    major, minor, patch = parts
    match kind:
        case Bump.MAJOR:
            return f"{major + 1}.0.0"
        case Bump.MINOR:
            return f"{major}.{minor + 1}.0"
        case Bump.PATCH:
            return f"{major}.{minor}.{patch + 1}"
        case _:
            raise AssertionError(f"unexpected bump kind: {kind}")


class VersionTasks:
    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx

    def increment_version(self) -> str:
        kind = self.ctx.options.increment or Bump.PATCH
        state = self.ctx.state
        state.version = bump_version(state.version, kind)
        return f"New version is {state.version}"

    def update_override_version(self) -> str | None:
        if not self.ctx.state.using_override_version:
            return "Override version inactive, skipping."
        replace_matched_capture(
            self.ctx.paths.version_file, OVERRIDE_VERSION_RE, self.ctx.state.version
        )
        return None

    def update_about_xml_version(self) -> str | None:
        if not replace_matched_capture(
            self.ctx.paths.about_file, ABOUT_VERSION_RE, self.ctx.state.version
        ):
            self.ctx.console.warning("About.xml version information not found, skipping.")
        return None

    def update_mod_sync_version(self) -> str | None:
        if not replace_matched_capture(
            self.ctx.paths.mod_sync_file, MOD_SYNC_VERSION_RE, self.ctx.state.version
        ):
            self.ctx.console.warning("ModSync.xml version information not found, skipping.")
        return None

    def _override_only(self) -> bool:
        return self.ctx.state.using_override_version and self.ctx.options.override_version_only

    def update_assembly_version(self) -> str | None:
        if self._override_only():
            return "Override version active, skipping."
        if not self.ctx.options.assembly_version:
            return "-a flag not used, skipping."
        replace_matched_capture(
            self.ctx.paths.assembly_info, ASSEMBLY_VERSION_RE, self.ctx.state.version
        )
        self.ctx.state.assembly_version_updated = True
        return None

    def update_assembly_file_version(self) -> str | None:
        if self._override_only():
            return "Override version active, skipping."
        replace_matched_capture(
            self.ctx.paths.assembly_info, ASSEMBLY_FILE_VERSION_RE, self.ctx.state.version
        )
        self.ctx.state.assembly_file_version_updated = True
        return None

    async def build_assembly(self) -> str | None:
        state = self.ctx.state
        if not state.assembly_version_updated and not state.assembly_file_version_updated:
            return "Assembly info was not updated, skipping."
        cmd = [self.ctx.config.tools.msbuild, *self.ctx.config.msbuild_options]
        result = await asyncio.to_thread(
            run_process, cmd, self.ctx.paths.root, timeout=BUILD_TIMEOUT_SECONDS
        )
        if isinstance(result, Err):
            error = result.error
            self.ctx.fail(error.stdout.strip() or error.stderr.strip() or str(error))
        return None
