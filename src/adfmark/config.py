"""Configuration: XDG-compliant config discovery and settings."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

from adfmark.errors import ConfigError

logger = logging.getLogger(__name__)

_PROJECT_CONFIG = "adfmark.toml"
_APP_DIR = "adfmark"
_XDG_CONFIG = "config.toml"


def find_config() -> Path | None:
    """Discover config file.

    Search order (first existing file wins):
    1. $ADFMARK_CONFIG env var (explicit override)
    2. adfmark.toml, walking up from CWD (project-local config)
    3. $XDG_CONFIG_HOME/adfmark/config.toml (default ~/.config/)
    """
    env_path = os.environ.get("ADFMARK_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.is_file():
            raise ConfigError(
                f"ADFMARK_CONFIG points to missing file: {env_path}",
                suggestions=["Check the path or unset ADFMARK_CONFIG to use auto-discovery"],
                path=p,
            )
        return p

    cwd = Path.cwd()
    for d in [cwd, *cwd.parents]:
        candidate = d / _PROJECT_CONFIG
        if candidate.is_file():
            return candidate

    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_home:
        xdg_path = Path(xdg_home) / _APP_DIR / _XDG_CONFIG
    else:
        xdg_path = Path.home() / ".config" / _APP_DIR / _XDG_CONFIG
    if xdg_path.is_file():
        return xdg_path

    return None


def load_config_toml(path: Path | None = None) -> dict[str, object]:
    """Load and return raw TOML config dict. Empty dict if no file."""
    if path is None:
        path = find_config()
    if path is None:
        return {}
    try:
        with open(path, "rb") as f:
            result: dict[str, object] = tomllib.load(f)
            return result
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}", path=path) from e


@dataclass
class Settings:
    """Conversion settings."""

    max_depth: int = 50
    json_indent: int = 2


# setting name -> (env override, minimum)
_SETTINGS: dict[str, tuple[str, int]] = {
    "max_depth": ("ADFMARK_MAX_DEPTH", 1),
    "json_indent": ("ADFMARK_JSON_INDENT", 0),
}


def _int_setting(name: str, raw: dict[str, object], default: int, path: Path | None) -> int:
    env_var, minimum = _SETTINGS[name]
    value = os.environ.get(env_var)
    if value is not None:
        source: object = value
        origin, where = f"${env_var}", None
    else:
        source = raw.get(name, default)
        origin, where = name, path
    if isinstance(source, (bool, float)):
        raise ConfigError(f"{origin} must be an integer, got {source!r}", path=where)
    try:
        result = int(source)  # type: ignore[call-overload]
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{origin} must be an integer, got {source!r}", path=where) from e
    if result < minimum:
        raise ConfigError(f"{origin} must be >= {minimum}, got {result}", path=where)
    return result


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from config TOML, then env var overrides.

    $ADFMARK_MAX_DEPTH > max_depth in TOML; $ADFMARK_JSON_INDENT > json_indent.
    Unknown keys in the file are logged and ignored.
    """
    if path is None:
        path = find_config()
    raw = load_config_toml(path)
    for key in sorted(raw.keys() - _SETTINGS.keys()):
        logger.warning("Ignoring unknown setting %r in %s", key, path)
    defaults = Settings()
    return Settings(
        max_depth=_int_setting("max_depth", raw, defaults.max_depth, path),
        json_indent=_int_setting("json_indent", raw, defaults.json_indent, path),
    )
