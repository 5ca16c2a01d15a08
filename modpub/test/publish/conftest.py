from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

import pytest

from modpub.core.config import Config
from modpub.output.console import MockConsole
from modpub.publish.context import ModPaths, ReleaseContext, ReleaseOptions, ReleaseState
from modpub.runner.pipeline import Pipeline, RunReport, Task

MOD_NAME = "MyMod"
FIXED_NOW = datetime(2024, 3, 5, 9, 7)

VERSION_XML = """<?xml version="1.0" encoding="utf-8"?>
<Manifest>
  <identifier>MyMod</identifier>
  <gitHubRepository>someone/MyMod</gitHubRepository>
</Manifest>
"""

ABOUT_XML = """<?xml version="1.0" encoding="utf-8"?>
<ModMetaData>
  <name>My Mod</name>
  <description>Adds things.

Version: 1.2.3</description>
</ModMetaData>
"""

MOD_SYNC_XML = """<?xml version="1.0" encoding="utf-8"?>
<ModSyncNinjaData>
  <ID>5f7c1f2e</ID>
  <ModName>My Mod</ModName>
  <Version>1.2.3</Version>
</ModSyncNinjaData>
"""

ASSEMBLY_INFO = """using System.Reflection;

[assembly: AssemblyTitle("MyMod")]
[assembly: AssemblyVersion("1.0.0.0")]
[assembly: AssemblyFileVersion("1.2.3.0")]
"""


@dataclass
class FakeUser:
    """Scripted answers for confirm/prompt."""

    accept: bool = True
    answers: dict[str, str] = field(default_factory=dict)
    asked: list[str] = field(default_factory=list)

    def confirm(self, query: str) -> bool:
        self.asked.append(query)
        return self.accept

    def prompt(self, message: str, hide_input: bool) -> str:
        del hide_input
        self.asked.append(message)
        return self.answers.get(message, "")


@pytest.fixture
def mod_root(tmp_path: Path) -> Path:
    root = tmp_path / MOD_NAME
    about = root / "Mods" / MOD_NAME / "About"
    about.mkdir(parents=True)
    (about / "Version.xml").write_text(VERSION_XML, encoding="utf-8")
    (about / "About.xml").write_text(ABOUT_XML, encoding="utf-8")
    (about / "ModSync.xml").write_text(MOD_SYNC_XML, encoding="utf-8")
    (root / "Mods" / MOD_NAME / "Assemblies").mkdir()
    (root / "Mods" / MOD_NAME / "Assemblies" / "MyMod.dll").write_bytes(b"MZ\x90\x00")
    (root / "Properties").mkdir()
    (root / "Properties" / "AssemblyInfo.cs").write_text(ASSEMBLY_INFO, encoding="utf-8")
    return root


@pytest.fixture
def user() -> FakeUser:
    return FakeUser()


@pytest.fixture
def make_ctx(mod_root: Path, user: FakeUser) -> Callable[..., ReleaseContext]:
    def factory(
        options: ReleaseOptions | None = None,
        *,
        config: Config | None = None,
        version: str = "1.2.3",
        using_override: bool = False,
    ) -> ReleaseContext:
        console = MockConsole()
        return ReleaseContext(
            paths=ModPaths(root=mod_root),
            options=options if options is not None else ReleaseOptions(),
            config=config if config is not None else Config(),
            state=ReleaseState(version=version, using_override_version=using_override),
            console=console,
            pipeline=Pipeline(console=console),
            confirm=user.confirm,
            prompt=user.prompt,
            clock=lambda: FIXED_NOW,
        )

    return factory


@pytest.fixture
def ctx(make_ctx: Callable[..., ReleaseContext]) -> ReleaseContext:
    return make_ctx()


@pytest.fixture
def run_tasks() -> Callable[..., RunReport]:
    """Run tasks on the context's pipeline; failures only work inside a run."""

    def runner(ctx: ReleaseContext, *tasks: Task) -> RunReport:
        for task in tasks:
            ctx.pipeline.add_task(task)
        return ctx.pipeline.run_sync()

    return runner
