"""Release zip creation and cleanup."""

from __future__ import annotations

import asyncio
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from modpub.publish.context import ReleaseContext


def package_filename(mod_name: str, version: str) -> str:
    return f"{mod_name}_{version}.zip"


def zip_directory(src_dir: Path, zip_path: Path, *, arc_prefix: str) -> int:
    """Zip every file under ``src_dir`` into ``zip_path`` below ``arc_prefix/``.

    Returns:
        Number of files written.
    """
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    # Mod assets checked out from some tools carry mtime=0, which ZIP cannot
    # represent.
    with ZipFile(
        zip_path, "w", compression=ZIP_DEFLATED, compresslevel=9, strict_timestamps=False
    ) as zf:
        for p in sorted(src_dir.rglob("*")):
            if p.is_dir():
                continue
            zf.write(p, arcname=f"{arc_prefix}/{p.relative_to(src_dir).as_posix()}")
            count += 1
    return count


class PackageTasks:
    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx

    async def create_release_package(self) -> str | None:
        paths = self.ctx.paths
        if not paths.mod_dir.is_dir():
            self.ctx.fail(f"Mod directory not found: {paths.mod_dir}")
            return None
        path = paths.root / package_filename(paths.mod_name, self.ctx.state.version)
        self.ctx.state.package_path = path

        if path.exists():
            path.unlink()
            self.ctx.console.print("Deleted existing package")

        count = await asyncio.to_thread(
            zip_directory, paths.mod_dir, path, arc_prefix=paths.mod_name
        )
        return f"Created {path} ({count} files)"

    def cleanup_packaged_release(self) -> None:
        path = self.ctx.state.package_path
        if path is not None:
            path.unlink(missing_ok=True)
