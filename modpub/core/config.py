"""Typed loading of the optional ``modpub.toml`` file.

The file lives next to the mod project and overrides tool locations, token
file paths and a few publishing defaults:

    [tools]
    msbuild = "C:/Program Files/MSBuild/MSBuild.exe"
    steamcmd = "steamcmd.exe"

    [build]
    msbuild_options = ["/p:Configuration=Release"]

    [tokens]
    nuget = "../nugetToken.txt"

    [steam]
    app_id = 294100
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "CONFIG_FILENAME",
    "Config",
    "ConfigError",
    "GitHubConfig",
    "SteamConfig",
    "TokensConfig",
    "ToolsConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILENAME = "modpub.toml"

# RimWorld
DEFAULT_STEAM_APP_ID = 294100

DEFAULT_MSBUILD_OPTIONS: tuple[str, ...] = (
    "/p:Configuration=Release",
    "/p:BuildProjectReferences=false",
    "/p:PreBuildEvent=",
    "/p:PostBuildEvent=",
)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ToolsConfig:
    """Executables invoked by the publishing tasks."""

    msbuild: str = "MSBuild.exe"
    steamcmd: str = "steamcmd.exe"
    nuget: str = "nuget"
    gh: str = "gh"
    git: str = "git"


@dataclass(frozen=True, slots=True)
class TokensConfig:
    """Token file locations, relative to the mod project directory."""

    github: str = "../githubToken.txt"
    nuget: str = "../nugetToken.txt"


@dataclass(frozen=True, slots=True)
class SteamConfig:
    app_id: int = DEFAULT_STEAM_APP_ID


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    target_commitish: str = "master"


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    tools: ToolsConfig = field(default_factory=ToolsConfig)
    msbuild_options: tuple[str, ...] = DEFAULT_MSBUILD_OPTIONS
    tokens: TokensConfig = field(default_factory=TokensConfig)
    steam: SteamConfig = field(default_factory=SteamConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: If a present key has the wrong shape.
        """
        tools: StrDict = get_table(data, "tools") or {}
        build: StrDict = get_table(data, "build") or {}
        tokens: StrDict = get_table(data, "tokens") or {}
        steam: StrDict = get_table(data, "steam") or {}
        github: StrDict = get_table(data, "github") or {}

        defaults = ToolsConfig()
        default_tokens = TokensConfig()
        return cls(
            tools=ToolsConfig(
                msbuild=get_str(tools, "msbuild") or defaults.msbuild,
                steamcmd=get_str(tools, "steamcmd") or defaults.steamcmd,
                nuget=get_str(tools, "nuget") or defaults.nuget,
                gh=get_str(tools, "gh") or defaults.gh,
                git=get_str(tools, "git") or defaults.git,
            ),
            msbuild_options=_str_tuple(build, "msbuild_options") or DEFAULT_MSBUILD_OPTIONS,
            tokens=TokensConfig(
                github=get_str(tokens, "github") or default_tokens.github,
                nuget=get_str(tokens, "nuget") or default_tokens.nuget,
            ),
            steam=SteamConfig(app_id=get_int(steam, "app_id") or DEFAULT_STEAM_APP_ID),
            github=GitHubConfig(
                target_commitish=get_str(github, "target_commitish") or "master",
            ),
        )


def _str_tuple(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return tuple(value)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to modpub.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Like load_config, but a missing file yields the default config."""
    if not path.exists():
        return Ok(Config())
    return load_config(path)
