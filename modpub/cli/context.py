from __future__ import annotations

from pathlib import Path

import typer

from modpub.core.config import CONFIG_FILENAME, Config, load_config, load_config_or_default
from modpub.core.errors import ErrorCode
from modpub.core.result import Err
from modpub.output.console import ConsoleProtocol, RichConsole
from modpub.publish.context import ModPaths, ReleaseContext, ReleaseOptions, ReleaseState
from modpub.publish.version import read_assembly_version
from modpub.runner.pipeline import Pipeline


def _confirm(message: str) -> bool:
    return typer.confirm(message, default=False)


def _prompt(message: str, hide_input: bool) -> str:
    return typer.prompt(message, hide_input=hide_input)


def load_project_config(root: Path, config_path: Path | None) -> Config:
    result = (
        load_config(config_path)
        if config_path is not None
        else load_config_or_default(root / CONFIG_FILENAME)
    )
    if isinstance(result, Err):
        typer.echo(f"error: {result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    return result.value


def build_context(
    *,
    root: Path,
    options: ReleaseOptions,
    config_path: Path | None = None,
    console: ConsoleProtocol | None = None,
) -> ReleaseContext:
    config = load_project_config(root, config_path)
    paths = ModPaths(root=root)

    version_result = read_assembly_version(paths)
    if isinstance(version_result, Err):
        typer.echo(f"error: {version_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    info = version_result.value

    console = console if console is not None else RichConsole()
    return ReleaseContext(
        paths=paths,
        options=options,
        config=config,
        state=ReleaseState(version=info.version, using_override_version=info.using_override),
        console=console,
        pipeline=Pipeline(console=console),
        confirm=_confirm,
        prompt=_prompt,
    )
