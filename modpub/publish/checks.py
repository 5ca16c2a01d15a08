"""Pre-flight checks and commit message lookup."""

from __future__ import annotations

from modpub.core.result import Err
from modpub.publish.context import ReleaseContext
from modpub.publish.git import git
from modpub.publish.timeouts import GIT_NETWORK_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS


class CheckTasks:
    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx

    def _git(self, *args: str, timeout: float = GIT_TIMEOUT_SECONDS) -> str | None:
        """Run git, failing the current task on error. Returns stdout or None."""
        result = git(self.ctx.paths.root, *args, exe=self.ctx.config.tools.git, timeout=timeout)
        if isinstance(result, Err):
            self.ctx.fail(result.error.stderr.strip() or str(result.error))
            return None
        return result.value

    def ensure_is_mod_directory(self) -> None:
        version_file = self.ctx.paths.version_file
        if not version_file.exists():
            self.ctx.fail(f"Version file not found: {version_file}")

    def ensure_everything_committed(self) -> str | None:
        unstaged = self._git("diff")
        if unstaged is None:
            return None
        staged = self._git("diff", "--cached")
        if staged is None:
            return None
        diff = (unstaged + staged).strip()
        if diff:
            self.ctx.fail()
            return f"There are uncommitted changes:\n{diff}"
        return None

    def ensure_git_remote_is_up_to_date(self) -> str | None:
        if self._git("fetch", timeout=GIT_NETWORK_TIMEOUT_SECONDS) is None:
            return None
        local = self._git("rev-parse", "HEAD")
        remote = self._git("rev-parse", "@{u}")
        if local is None or remote is None:
            return None
        local, remote = local.strip(), remote.strip()
        if local != remote:
            self.ctx.fail()
            return (
                f"Git remote does not seem to be up to date: "
                f"{local} (local) vs {remote} (remote)"
            )
        return None

    def fetch_commit_message(self) -> None:
        revision = self.ctx.options.message_commit
        args = ["log", *([revision] if revision else []), "-1", "--pretty=%B"]
        out = self._git(*args)
        if out is not None:
            self.ctx.state.commit_message = out.strip()
