from __future__ import annotations

from collections.abc import Callable

from modpub.publish.context import Bump, ReleaseContext, ReleaseOptions
from modpub.publish.plan import build_pipeline
from modpub.runner.pipeline import Phase, Task, task_name

MakeCtx = Callable[..., ReleaseContext]

VERSION_TASKS = [
    "increment_version",
    "update_override_version",
    "update_about_xml_version",
    "update_mod_sync_version",
    "update_assembly_version",
    "update_assembly_file_version",
    "build_assembly",
]


def _names(tasks: tuple[Task, ...]) -> list[str]:
    return [task_name(t) for t in tasks]


def test_no_flags_plans_nothing(make_ctx: MakeCtx) -> None:
    pipeline = build_pipeline(make_ctx())
    assert pipeline.tasks == ()
    assert pipeline.setup_steps == ()
    assert pipeline.teardown_steps == ()


def test_github_release(make_ctx: MakeCtx) -> None:
    pipeline = build_pipeline(make_ctx(ReleaseOptions(github=True)))

    assert _names(pipeline.tasks) == [
        "ensure_is_mod_directory",
        "ensure_everything_committed",
        "ensure_git_remote_is_up_to_date",
        "fetch_commit_message",
        "get_github_repo_path",
        "create_release_package",
        "make_github_release",
        "upload_release_package",
    ]
    assert _names(pipeline.teardown_steps) == ["cleanup_packaged_release"]


def test_bump_only_skips_clean_tree_checks(make_ctx: MakeCtx) -> None:
    pipeline = build_pipeline(make_ctx(ReleaseOptions(increment=Bump.PATCH)))
    assert _names(pipeline.tasks) == ["ensure_is_mod_directory", *VERSION_TASKS]


def test_skip_pre_checks(make_ctx: MakeCtx) -> None:
    pipeline = build_pipeline(make_ctx(ReleaseOptions(increment=Bump.MINOR, skip_pre_checks=True)))
    assert _names(pipeline.tasks) == VERSION_TASKS


def test_steam_setup_and_teardown(make_ctx: MakeCtx) -> None:
    pipeline = build_pipeline(make_ctx(ReleaseOptions(steam=True, skip_pre_checks=True)))

    assert _names(pipeline.setup_steps) == [
        "read_steam_file_id",
        "read_steam_config_file",
        "check_steam_preview_exists",
    ]
    assert _names(pipeline.tasks) == [
        "fetch_commit_message",
        "create_vdf_file",
        "publish_steam_update",
    ]
    assert _names(pipeline.teardown_steps) == ["cleanup_vdf_file"]


def test_every_channel(make_ctx: MakeCtx) -> None:
    options = ReleaseOptions(
        increment=Bump.PATCH, github=True, steam=True, nuget=True, skip_pre_checks=True
    )
    pipeline = build_pipeline(make_ctx(options))

    names = _names(pipeline.tasks)
    assert names[: len(VERSION_TASKS)] == VERSION_TASKS
    assert names[len(VERSION_TASKS)] == "fetch_commit_message"
    assert names[-3:] == ["update_nuspec_file", "build_nupkg_file", "push_nuget_package"]
    assert _names(pipeline.teardown_steps) == [
        "cleanup_packaged_release",
        "cleanup_vdf_file",
        "rollback_nuspec_file",
        "cleanup_nupkg_file",
    ]


def test_failed_setup_skips_publishing_but_cleans_up(make_ctx: MakeCtx) -> None:
    ctx = make_ctx(ReleaseOptions(steam=True, skip_pre_checks=True))
    ctx.paths.steam_vdf_file.write_text("stale", encoding="utf-8")

    report = build_pipeline(ctx).run_sync()

    assert report.failed
    assert report.names(Phase.SETUP) == ["read_steam_file_id"]
    assert report.names(Phase.MAIN) == []
    assert report.names(Phase.TEARDOWN) == ["cleanup_vdf_file"]
    assert not ctx.paths.steam_vdf_file.exists()


def test_has_action() -> None:
    assert not ReleaseOptions().has_action
    assert not ReleaseOptions(assembly_version=True, skip_pre_checks=True).has_action
    assert ReleaseOptions(increment=Bump.PATCH).has_action
    assert ReleaseOptions(nuget=True).has_action
