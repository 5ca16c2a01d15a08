from __future__ import annotations

from pathlib import Path

import typer

from modpub import __version__
from modpub.cli.context import build_context
from modpub.core.errors import ErrorCode
from modpub.publish.context import Bump, ReleaseOptions
from modpub.publish.plan import build_pipeline

app = typer.Typer(
    add_completion=False,
    rich_markup_mode="rich",
    help="Bump, rebuild, package and publish the mod in the current directory.",
)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command(no_args_is_help=True)
def publish(
    ctx: typer.Context,
    increment_version: Bump | None = typer.Option(
        None,
        "--increment-version",
        "-v",
        help="Increment the version number of the mod and rebuild the project.",
    ),
    assembly_version: bool = typer.Option(
        False,
        "--assembly-version",
        "-a",
        help="With -v, update AssemblyVersion as well as AssemblyFileVersion.",
    ),
    override_version_only: bool = typer.Option(
        False,
        "--override-version-only",
        "-o",
        help="With -v, leave AssemblyInfo.cs alone when Version.xml has an overrideVersion.",
    ),
    github: bool = typer.Option(
        False, "--github", "-g", help="Publish a release of the mod on GitHub."
    ),
    steam: bool = typer.Option(
        False,
        "--steam",
        "-s",
        help="Publish an update of the mod on the Steam workshop. The item must already exist.",
    ),
    nuget: bool = typer.Option(False, "--nuget", "-n", help="Push an updated nupkg to nuget.org."),
    skip_pre_checks: bool = typer.Option(
        False,
        "--skip-pre-checks",
        "-x",
        help="Skip the checks that the git repo is committed and up to date with its remote.",
    ),
    message_commit: str | None = typer.Option(
        None,
        "--message-commit",
        "-m",
        help="Use the message of this commit instead of the latest, e.g. HEAD~1.",
    ),
    pre_release: bool = typer.Option(
        False, "--pre-release", help="Mark the GitHub release as pre-release."
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: ./modpub.toml if present)."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Version, build and publish a mod."""
    del version
    options = ReleaseOptions(
        increment=increment_version,
        assembly_version=assembly_version,
        override_version_only=override_version_only,
        github=github,
        steam=steam,
        nuget=nuget,
        skip_pre_checks=skip_pre_checks,
        message_commit=message_commit,
        pre_release=pre_release,
    )
    if not options.has_action:
        typer.echo(ctx.get_help(), err=True)
        typer.echo("error: nothing to do; pass -v, -g, -s or -n", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    release = build_context(root=Path.cwd(), options=options, config_path=config)
    report = build_pipeline(release).run_sync()
    if report.failed:
        raise typer.Exit(code=int(ErrorCode.PUBLISH_FAILED))


def main() -> None:
    app()
