"""Shared state handed to every publishing task.

Tasks are zero-argument bound methods; everything they need (paths, flags,
config, the pipeline to report failures to) hangs off ``ReleaseContext``.
Values produced by one task and consumed by a later one (new version, package
path, commit message) live in the mutable ``ReleaseState``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from modpub.core.config import Config
from modpub.core.result import Err, Ok, Result
from modpub.output.console import ConsoleProtocol
from modpub.runner.pipeline import Pipeline

__all__ = [
    "Bump",
    "ModPaths",
    "ReleaseContext",
    "ReleaseOptions",
    "ReleaseState",
    "WorkshopItem",
]


class Bump(StrEnum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


@dataclass(frozen=True, slots=True)
class ModPaths:
    """File locations of a mod project rooted at the working directory."""

    root: Path

    @property
    def mod_name(self) -> str:
        return self.root.name

    @property
    def mod_dir(self) -> Path:
        return self.root / "Mods" / self.mod_name

    @property
    def about_dir(self) -> Path:
        return self.mod_dir / "About"

    @property
    def version_file(self) -> Path:
        return self.about_dir / "Version.xml"

    @property
    def about_file(self) -> Path:
        return self.about_dir / "About.xml"

    @property
    def mod_sync_file(self) -> Path:
        return self.about_dir / "ModSync.xml"

    @property
    def steam_file_id_file(self) -> Path:
        return self.about_dir / "PublishedFileId.txt"

    @property
    def steam_preview(self) -> Path:
        return self.about_dir / "preview.png"

    @property
    def steam_vdf_file(self) -> Path:
        return self.root / "SteamConfig.vdf"

    @property
    def steam_config_base(self) -> Path:
        """SteamConfig without extension; ``.yaml`` and ``.json`` are tried."""
        return self.root / "SteamConfig"

    @property
    def nuspec_file(self) -> Path:
        return self.root / f"{self.mod_name}.nuspec"

    @property
    def assembly_info(self) -> Path:
        return self.root / "Properties" / "AssemblyInfo.cs"


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Command line flags that decide which tasks are planned."""

    increment: Bump | None = None
    assembly_version: bool = False
    override_version_only: bool = False
    github: bool = False
    steam: bool = False
    nuget: bool = False
    skip_pre_checks: bool = False
    message_commit: str | None = None
    pre_release: bool = False

    @property
    def publishes(self) -> bool:
        return self.github or self.steam or self.nuget

    @property
    def has_action(self) -> bool:
        """True when a version bump or a channel was selected."""
        return self.increment is not None or self.publishes

    @property
    def any_flag(self) -> bool:
        return self != ReleaseOptions()


@dataclass(frozen=True, slots=True)
class WorkshopItem:
    title: str
    description: str
    visibility: int


@dataclass
class ReleaseState:
    """Values passed from one task to the next during a run."""

    version: str
    using_override_version: bool = False
    assembly_version_updated: bool = False
    assembly_file_version_updated: bool = False
    commit_message: str | None = None
    package_path: Path | None = None
    github_repo: str | None = None
    release_tag: str | None = None
    workshop_item: WorkshopItem | None = None
    steam_file_id: str | None = None
    nupkg_path: Path | None = None


def _now() -> datetime:
    return datetime.now()


@dataclass
class ReleaseContext:
    paths: ModPaths
    options: ReleaseOptions
    config: Config
    state: ReleaseState
    console: ConsoleProtocol
    pipeline: Pipeline
    confirm: Callable[[str], bool]
    prompt: Callable[[str, bool], str]
    clock: Callable[[], datetime] = field(default=_now)

    def fail(self, reason: object = None) -> None:
        self.pipeline.fail(reason)

    def confirm_or_fail(self, query: str) -> bool:
        """Ask the user; a refusal fails the current task."""
        if not self.confirm(query):
            self.fail("User aborted release")
            return False
        return True

    def resolve(self, relative: str) -> Path:
        """Resolve a config path against the project root."""
        p = Path(relative).expanduser()
        return p if p.is_absolute() else self.paths.root / p


def read_token_file(path: Path) -> Result[str, str]:
    try:
        return Ok(path.read_text(encoding="utf-8").strip())
    except OSError as e:
        return Err(f"Failed to read token file at {path}: {e}")
