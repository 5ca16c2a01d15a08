"""Turn command line flags into a pipeline of publishing tasks."""

from __future__ import annotations

from modpub.publish.checks import CheckTasks
from modpub.publish.context import ReleaseContext
from modpub.publish.github import GitHubTasks
from modpub.publish.nuget import NugetTasks
from modpub.publish.package import PackageTasks
from modpub.publish.steam import SteamTasks
from modpub.publish.version import VersionTasks
from modpub.runner.pipeline import Pipeline


def build_pipeline(ctx: ReleaseContext) -> Pipeline:
    """Register the tasks selected by ``ctx.options`` on ``ctx.pipeline``.

    Order of groups: pre-checks, version bump and rebuild, commit message,
    then GitHub, Steam and NuGet. Each channel brings its own setup and
    teardown steps.
    """
    pipeline = ctx.pipeline
    opts = ctx.options

    checks = CheckTasks(ctx)
    version = VersionTasks(ctx)
    package = PackageTasks(ctx)
    github = GitHubTasks(ctx)
    steam = SteamTasks(ctx)
    nuget = NugetTasks(ctx)

    if opts.any_flag and not opts.skip_pre_checks:
        pipeline.add_task(checks.ensure_is_mod_directory)
        # Bumping edits tracked files; clean-tree checks apply to plain publishing only.
        if opts.increment is None:
            pipeline.add_task(checks.ensure_everything_committed)
            pipeline.add_task(checks.ensure_git_remote_is_up_to_date)

    if opts.increment is not None:
        pipeline.add_task(version.increment_version)
        pipeline.add_task(version.update_override_version)
        pipeline.add_task(version.update_about_xml_version)
        pipeline.add_task(version.update_mod_sync_version)
        pipeline.add_task(version.update_assembly_version)
        pipeline.add_task(version.update_assembly_file_version)
        pipeline.add_task(version.build_assembly)

    if opts.publishes:
        pipeline.add_task(checks.fetch_commit_message)

    if opts.github:
        pipeline.add_task(github.get_github_repo_path)
        pipeline.add_task(package.create_release_package, teardown=[package.cleanup_packaged_release])
        pipeline.add_task(github.make_github_release)
        pipeline.add_task(github.upload_release_package)

    if opts.steam:
        pipeline.add_task(
            steam.create_vdf_file,
            setup=[
                steam.read_steam_file_id,
                steam.read_steam_config_file,
                steam.check_steam_preview_exists,
            ],
            teardown=[steam.cleanup_vdf_file],
        )
        pipeline.add_task(steam.publish_steam_update)

    if opts.nuget:
        pipeline.add_task(nuget.update_nuspec_file, teardown=[nuget.rollback_nuspec_file])
        pipeline.add_task(nuget.build_nupkg_file, teardown=[nuget.cleanup_nupkg_file])
        pipeline.add_task(nuget.push_nuget_package)

    return pipeline
