from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import vdf

from modpub.core.result import Err, Ok
from modpub.platform.process import ProcessError
from modpub.publish import steam as steam_mod
from modpub.publish.context import ReleaseContext, WorkshopItem
from modpub.publish.steam import SteamTasks, load_workshop_item
from modpub.runner.pipeline import RunReport
from modpub.test.publish.conftest import FakeUser

RunTasks = Callable[..., RunReport]

STEAM_YAML = """title: My Mod
description: |
  Adds things.
  Compatible with 1.5.
visibility: 0
"""


def _workshop_ready(ctx: ReleaseContext) -> ReleaseContext:
    ctx.paths.steam_file_id_file.write_text("1234567890\n", encoding="ascii")
    ctx.paths.steam_preview.write_bytes(b"\x89PNG")
    (ctx.paths.root / "SteamConfig.yaml").write_text(STEAM_YAML, encoding="utf-8")
    return ctx


class TestLoadWorkshopItem:
    def test_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "SteamConfig.yaml").write_text(STEAM_YAML, encoding="utf-8")
        result = load_workshop_item(tmp_path / "SteamConfig")
        assert isinstance(result, Ok)
        assert result.value.title == "My Mod"
        assert result.value.visibility == 0
        assert "Compatible with 1.5." in result.value.description

    def test_json(self, tmp_path: Path) -> None:
        (tmp_path / "SteamConfig.json").write_text(
            '{"title": "T", "description": "D", "visibility": 2}', encoding="utf-8"
        )
        assert load_workshop_item(tmp_path / "SteamConfig") == Ok(WorkshopItem("T", "D", 2))

    def test_yaml_preferred_over_json(self, tmp_path: Path) -> None:
        (tmp_path / "SteamConfig.yaml").write_text(STEAM_YAML, encoding="utf-8")
        (tmp_path / "SteamConfig.json").write_text("{", encoding="utf-8")
        assert isinstance(load_workshop_item(tmp_path / "SteamConfig"), Ok)

    def test_missing_field(self, tmp_path: Path) -> None:
        (tmp_path / "SteamConfig.yaml").write_text("title: T\nvisibility: 0\n", encoding="utf-8")
        result = load_workshop_item(tmp_path / "SteamConfig")
        assert result == Err("yaml format: Required fields: title, description, visibility")

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "SteamConfig.json").write_text("{", encoding="utf-8")
        result = load_workshop_item(tmp_path / "SteamConfig")
        assert isinstance(result, Err)
        assert result.error.startswith("json format:")

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "SteamConfig.yaml").write_text("- a\n- b\n", encoding="utf-8")
        assert load_workshop_item(tmp_path / "SteamConfig") == Err("yaml format: expected a mapping")

    def test_no_file(self, tmp_path: Path) -> None:
        assert load_workshop_item(tmp_path / "SteamConfig") == Err("file not found")


class TestSetupSteps:
    def test_all_present(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        tasks = SteamTasks(_workshop_ready(ctx))
        report = run_tasks(
            ctx, tasks.read_steam_file_id, tasks.read_steam_config_file, tasks.check_steam_preview_exists
        )
        assert not report.failed
        assert ctx.state.steam_file_id == "1234567890"
        assert ctx.state.workshop_item is not None

    @pytest.mark.parametrize("content", ["", "abc", "0123", "-5"])
    def test_invalid_file_id(self, ctx: ReleaseContext, run_tasks: RunTasks, content: str) -> None:
        ctx.paths.steam_file_id_file.write_text(content, encoding="ascii")
        report = run_tasks(ctx, SteamTasks(ctx).read_steam_file_id)
        assert report.failed
        assert ctx.console.find("Could not read steam app id at")

    def test_missing_file_id(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        report = run_tasks(ctx, SteamTasks(ctx).read_steam_file_id)
        assert report.failed

    def test_missing_config(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        report = run_tasks(ctx, SteamTasks(ctx).read_steam_config_file)
        assert report.failed
        assert ctx.console.find("Failed to read steam config file at")

    def test_missing_preview(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        report = run_tasks(ctx, SteamTasks(ctx).check_steam_preview_exists)
        assert report.failed
        assert ctx.console.find("Steam preview not found at")


class TestCreateVdfFile:
    def test_writes_workshop_item(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        tasks = SteamTasks(_workshop_ready(ctx))
        ctx.state.commit_message = 'Fix "wool" stacking'

        report = run_tasks(
            ctx, tasks.read_steam_file_id, tasks.read_steam_config_file, tasks.create_vdf_file
        )

        assert not report.failed
        item = vdf.loads(ctx.paths.steam_vdf_file.read_text(encoding="utf-8"), escaped=False)[
            "workshopitem"
        ]
        assert item["appid"] == "294100"
        assert item["publishedfileid"] == "1234567890"
        assert item["contentfolder"] == str(ctx.paths.mod_dir)
        assert item["previewfile"] == str(ctx.paths.steam_preview)
        assert item["visibility"] == "0"
        assert item["title"] == "My Mod"
        assert item["changenote"] == "Update on Tue Mar 05 2024, 9:07\n\nFix 'wool' stacking"

    def test_requires_setup(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        report = run_tasks(ctx, SteamTasks(ctx).create_vdf_file)
        assert report.failed
        assert not ctx.paths.steam_vdf_file.exists()

    def test_cleanup(self, ctx: ReleaseContext, run_tasks: RunTasks) -> None:
        ctx.paths.steam_vdf_file.write_text('"workshopitem" {}', encoding="utf-8")
        run_tasks(ctx, SteamTasks(ctx).cleanup_vdf_file)
        assert not ctx.paths.steam_vdf_file.exists()


class TestPublishSteamUpdate:
    def test_runs_steamcmd(
        self,
        monkeypatch: pytest.MonkeyPatch,
        ctx: ReleaseContext,
        run_tasks: RunTasks,
        user: FakeUser,
    ) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], cwd: Path, env: dict[str, str] | None = None):
            del cwd, env
            calls.append(cmd)
            return Ok(None)

        monkeypatch.setattr(steam_mod, "run_silent", fake_run)
        user.answers = {"Enter Steam username": "gabe", "Enter Steam password": "hunter2"}

        report = run_tasks(ctx, SteamTasks(ctx).publish_steam_update)

        assert not report.failed
        assert calls == [
            [
                "steamcmd.exe",
                "+login",
                "gabe",
                "hunter2",
                "+workshop_build_item",
                str(ctx.paths.steam_vdf_file),
                "+quit",
            ]
        ]
        assert not any("hunter2" in m for m in ctx.console.messages)

    def test_nonzero_exit_only_warns(
        self, monkeypatch: pytest.MonkeyPatch, ctx: ReleaseContext, run_tasks: RunTasks
    ) -> None:
        def fake_run(cmd: list[str], cwd: Path, env: dict[str, str] | None = None):
            del cwd, env
            return Err(ProcessError(command=tuple(cmd), returncode=6, stdout="", stderr=""))

        monkeypatch.setattr(steam_mod, "run_silent", fake_run)

        report = run_tasks(ctx, SteamTasks(ctx).publish_steam_update)

        assert not report.failed
        assert ctx.console.find("steamcmd exited with code 6")
