"""Steam workshop publishing through steamcmd.

The workshop item must already exist; its id is read from
About/PublishedFileId.txt. Title, description and visibility come from
SteamConfig.yaml (or SteamConfig.json) next to the project.
"""

from __future__ import annotations

import json
from pathlib import Path

import vdf
import yaml

from modpub.core.result import Err, Ok, Result
from modpub.core.structured import as_str_dict, get_int, get_str
from modpub.platform.process import run_silent
from modpub.publish.context import ReleaseContext, WorkshopItem


def _parse_yaml(text: str) -> object:
    return yaml.safe_load(text)


def _parse_json(text: str) -> object:
    return json.loads(text)


_CONFIG_FORMATS = (("yaml", _parse_yaml), ("json", _parse_json))


def load_workshop_item(base: Path) -> Result[WorkshopItem, str]:
    """Read the first existing ``base.yaml`` / ``base.json``."""
    for extension, parse in _CONFIG_FORMATS:
        path = base.with_name(f"{base.name}.{extension}")
        if not path.exists():
            continue
        try:
            data = as_str_dict(parse(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, yaml.YAMLError) as e:
            return Err(f"{extension} format: {e}")
        if data is None:
            return Err(f"{extension} format: expected a mapping")
        title = get_str(data, "title")
        description = get_str(data, "description")
        visibility = get_int(data, "visibility")
        if title is None or description is None or visibility is None:
            return Err(f"{extension} format: Required fields: title, description, visibility")
        return Ok(WorkshopItem(title=title, description=description, visibility=visibility))
    return Err("file not found")


def workshop_vdf(
    *,
    app_id: int,
    content_folder: Path,
    preview_file: Path,
    item: WorkshopItem,
    change_note: str,
    published_file_id: str,
) -> str:
    return vdf.dumps(
        {
            "workshopitem": {
                "appid": str(app_id),
                "contentfolder": str(content_folder),
                "previewfile": str(preview_file),
                "visibility": str(item.visibility),
                "title": item.title,
                "description": item.description,
                "changenote": change_note,
                "publishedfileid": published_file_id,
            }
        },
        pretty=True,
        escaped=False,
    )


class SteamTasks:
    def __init__(self, ctx: ReleaseContext) -> None:
        self.ctx = ctx

    def read_steam_file_id(self) -> None:
        path = self.ctx.paths.steam_file_id_file
        try:
            file_id = path.read_text(encoding="ascii").strip()
        except (OSError, UnicodeDecodeError) as e:
            self.ctx.fail(f"Could not read steam app id at {path}: {e}")
            return
        if not file_id.isdigit() or str(int(file_id)) != file_id:
            self.ctx.fail(f"Could not read steam app id at {path}: Invalid id: {file_id}")
            return
        self.ctx.state.steam_file_id = file_id

    def read_steam_config_file(self) -> None:
        base = self.ctx.paths.steam_config_base
        match load_workshop_item(base):
            case Ok(item):
                self.ctx.state.workshop_item = item
            case Err(message):
                self.ctx.fail(f"Failed to read steam config file at {base}: {message}")

    def check_steam_preview_exists(self) -> None:
        preview = self.ctx.paths.steam_preview
        if not preview.exists():
            self.ctx.fail(f"Steam preview not found at {preview}")

    def create_vdf_file(self) -> None:
        state = self.ctx.state
        if state.workshop_item is None or state.steam_file_id is None:
            self.ctx.fail("Steam workshop item was not loaded")
            return
        now = self.ctx.clock()
        message = (state.commit_message or "").replace('"', "'")
        change_note = (
            f"Update on {now.strftime('%a %b %d %Y')}, {now.hour}:{now.minute:02d}\n\n{message}"
        )
        text = workshop_vdf(
            app_id=self.ctx.config.steam.app_id,
            content_folder=self.ctx.paths.mod_dir,
            preview_file=self.ctx.paths.steam_preview,
            item=state.workshop_item,
            change_note=change_note,
            published_file_id=state.steam_file_id,
        )
        self.ctx.paths.steam_vdf_file.write_text(text, encoding="utf-8")

    def publish_steam_update(self) -> None:
        username = self.ctx.prompt("Enter Steam username", False)
        password = self.ctx.prompt("Enter Steam password", True)
        cmd = [
            self.ctx.config.tools.steamcmd,
            "+login",
            username,
            password,
            "+workshop_build_item",
            str(self.ctx.paths.steam_vdf_file),
            "+quit",
        ]
        result = run_silent(cmd, cwd=self.ctx.paths.root)
        # steamcmd exits non-zero on some successful uploads
        if isinstance(result, Err):
            self.ctx.console.warning(f"steamcmd exited with code {result.error.returncode}")
        self.ctx.console.newline()

    def cleanup_vdf_file(self) -> None:
        self.ctx.paths.steam_vdf_file.unlink(missing_ok=True)
