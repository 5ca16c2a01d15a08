"""NuGet package update, build and push."""

from __future__ import annotations

import re
from pathlib import Path
from xml.sax.saxutils import escape

from modpub.core.result import Err
from modpub.platform.process import run_silent, run_streaming
from modpub.publish.context import ReleaseContext, read_token_file
from modpub.publish.git import git
from modpub.publish.version import replace_matched_capture

NUSPEC_VERSION_RE = re.compile(r"version>([\d.]+)")
NUSPEC_CHANGELOG_RE = re.compile(r"releaseNotes>([^<]+)")

_XML_QUOTES = {'"': "&quot;", "'": "&apos;"}


def xml_escape(text: str) -> str:
    return escape(text, _XML_QUOTES)


def find_nupkg(directory: Path) -> Path | None:
    for p in sorted(directory.iterdir()):
        if p.is_file() and p.name.endswith(".nupkg"):
            return p
    return None


class NugetTasks:
    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx

    def update_nuspec_file(self) -> None:
        nuspec = self.ctx.paths.nuspec_file
        if not nuspec.exists():
            self.ctx.fail(f"nuspec file not found at {nuspec}")
            return
        replace_matched_capture(nuspec, NUSPEC_VERSION_RE, self.ctx.state.version)
        replace_matched_capture(
            nuspec, NUSPEC_CHANGELOG_RE, xml_escape(self.ctx.state.commit_message or "")
        )

    def rollback_nuspec_file(self) -> None:
        """The updated nuspec is not worth committing."""
        nuspec = self.ctx.paths.nuspec_file
        result = git(
            self.ctx.paths.root, "checkout", "--", str(nuspec), exe=self.ctx.config.tools.git
        )
        if isinstance(result, Err):
            self.ctx.fail(result.error.stderr.strip() or str(result.error))

    async def build_nupkg_file(self) -> None:
        console = self.ctx.console
        warnings: list[str] = []

        def on_stdout(line: str) -> None:
            if "WARNING" in line:
                warnings.append(line)
                console.warning(line)
            else:
                console.print(line)

        result = await run_streaming(
            [self.ctx.config.tools.nuget, "pack"],
            self.ctx.paths.root,
            on_stdout=on_stdout,
            on_stderr=console.error,
        )
        if isinstance(result, Err):
            self.ctx.fail(str(result.error))
            return

        if warnings and not self.ctx.confirm_or_fail(
            "Warnings detected in output. Continue publishing?"
        ):
            return

        nupkg = find_nupkg(self.ctx.paths.root)
        if nupkg is None:
            self.ctx.fail(".nupkg file not found after build")
            return
        self.ctx.state.nupkg_path = nupkg

    def cleanup_nupkg_file(self) -> None:
        if self.ctx.state.nupkg_path is not None:
            self.ctx.state.nupkg_path.unlink(missing_ok=True)

    def push_nuget_package(self) -> None:
        nupkg = self.ctx.state.nupkg_path
        if nupkg is None:
            self.ctx.fail("No .nupkg to push")
            return
        token = read_token_file(self.ctx.resolve(self.ctx.config.tokens.nuget))
        if isinstance(token, Err):
            self.ctx.fail(token.error)
            return
        cmd = [
            self.ctx.config.tools.nuget,
            "push",
            "-Source",
            "nuget.org",
            "-ApiKey",
            token.value,
            str(nupkg),
        ]
        result = run_silent(cmd, cwd=self.ctx.paths.root)
        if isinstance(result, Err):
            self.ctx.fail(str(result.error))
