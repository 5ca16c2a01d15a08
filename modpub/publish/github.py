"""GitHub release publishing through the ``gh`` CLI."""

from __future__ import annotations

import asyncio
import os
import re

from modpub.core.result import Err, Ok
from modpub.output.console import Style
from modpub.platform.process import run as run_process
from modpub.publish.context import ReleaseContext, read_token_file
from modpub.publish.timeouts import GH_TIMEOUT_SECONDS, GH_UPLOAD_TIMEOUT_SECONDS
from modpub.publish.version import match_file_contents

GITHUB_REPO_RE = re.compile(r"gitHubRepository>([\w./-]+)")


def split_commit_message(message: str) -> tuple[str, str]:
    """Headline and body of a commit message; blank body lines are dropped."""
    lines = message.split("\n")
    body = "\n".join(line for line in lines[1:] if line)
    return lines[0], body


class GitHubTasks:
    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx

    def _env(self) -> dict[str, str] | None:
        """Environment for gh: the token file wins over ``gh auth`` when present."""
        token_path = self.ctx.resolve(self.ctx.config.tokens.github)
        if not token_path.exists():
            return None
        match read_token_file(token_path):
            case Ok(token):
                return {**os.environ, "GH_TOKEN": token}
            case Err(message):
                self.ctx.console.warning(message)
                return None

    async def _gh(self, args: list[str], timeout: float) -> str | None:
        cmd = [self.ctx.config.tools.gh, *args]
        result = await asyncio.to_thread(
            run_process, cmd, self.ctx.paths.root, self._env(), timeout=timeout
        )
        if isinstance(result, Err):
            self.ctx.fail(result.error.stderr.strip() or str(result.error))
            return None
        return result.value

    def get_github_repo_path(self) -> None:
        version_file = self.ctx.paths.version_file
        repo_path = match_file_contents(version_file, GITHUB_REPO_RE)
        if repo_path is None:
            self.ctx.fail(f"Could not parse repository path from version file: {version_file}")
            return
        owner, _, repo = repo_path.partition("/")
        if not owner or not repo or "/" in repo:
            self.ctx.fail(f"Improperly formatted repository path {repo_path} in file {version_file}")
            return
        self.ctx.state.github_repo = f"{owner}/{repo}"

    async def make_github_release(self) -> None:
        state = self.ctx.state
        headline, body = split_commit_message(state.commit_message or "")
        tag = f"v{state.version}"
        settings = {
            "repo": state.github_repo,
            "tag_name": tag,
            "target_commitish": self.ctx.config.github.target_commitish,
            "name": headline,
            "body": body,
            "prerelease": self.ctx.options.pre_release,
        }
        for key, value in settings.items():
            self.ctx.console.print(f"{key}: {value}")
        if not self.ctx.confirm_or_fail("Create a release with these settings?"):
            return

        args = [
            "release",
            "create",
            tag,
            "--repo",
            str(state.github_repo),
            "--target",
            self.ctx.config.github.target_commitish,
            "--title",
            headline,
            "--notes",
            body,
        ]
        if self.ctx.options.pre_release:
            args.append("--prerelease")
        out = await self._gh(args, GH_TIMEOUT_SECONDS)
        if out is None:
            return
        state.release_tag = tag
        self.ctx.console.print("Created release:")
        self.ctx.console.print(out.strip(), Style.INFO)

    async def upload_release_package(self) -> None:
        state = self.ctx.state
        if state.release_tag is None or state.package_path is None:
            self.ctx.fail("No release or package to upload")
            return
        filename = state.package_path.name
        asset = f"{state.package_path}#Download: {filename}"
        args = ["release", "upload", state.release_tag, asset, "--repo", str(state.github_repo)]
        if await self._gh(args, GH_UPLOAD_TIMEOUT_SECONDS) is None:
            return
        self.ctx.console.print(
            f"Uploaded package: https://github.com/{state.github_repo}"
            f"/releases/download/{state.release_tag}/{filename}"
        )
