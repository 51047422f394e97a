"""Configuration file support for nanoscope_release."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from platformdirs import PlatformDirs

from .constants import (
    CACHE_ENV_VAR,
    CONFIG_ENV_VAR,
    DEFAULT_API_BASE_URL,
    DEFAULT_ASSET_NAME,
    DEFAULT_CACHE_SUBDIR,
    DEFAULT_CONFIG_DIR_NAME,
    DEFAULT_FORMULA_BRANCH,
    DEFAULT_FORMULA_NAME,
    DEFAULT_FORMULA_REMOTE,
    DEFAULT_OWNER,
    DEFAULT_RELEASE_BODY,
    DEFAULT_REPO,
    HTTP_TIMEOUT_SECONDS,
)
from .errors import CLIError

try:
    import tomllib  # py311+
except ModuleNotFoundError:  # pragma: no cover (py<311)
    import tomli as tomllib


@dataclass(frozen=True)
class ConfigFile:
    api_base_url: Optional[str] = None
    owner: Optional[str] = None
    repo: Optional[str] = None
    formula_remote: Optional[str] = None
    formula_branch: Optional[str] = None
    formula_name: Optional[str] = None
    cache_dir: Optional[str] = None
    asset_name: Optional[str] = None
    release_body: Optional[str] = None
    http_timeout: Optional[float] = None


@dataclass(frozen=True)
class ReleaseSettings:
    """Fully resolved settings for a release run."""

    api_base_url: str
    owner: str
    repo: str
    formula_remote: str
    formula_branch: str
    formula_name: str
    cache_dir: Path
    asset_name: str
    release_body: str
    http_timeout: float
    source_dir: Path


def default_config_path() -> Path:
    dirs = PlatformDirs(appname=DEFAULT_CONFIG_DIR_NAME, appauthor=False, roaming=True)
    return Path(dirs.user_config_path) / "config.toml"


def resolve_config_path() -> Path:
    env_value = (os.environ.get(CONFIG_ENV_VAR) or "").strip()
    if env_value:
        return Path(env_value).expanduser()
    return default_config_path()


def default_cache_dir() -> Path:
    return Path.home() / DEFAULT_CACHE_SUBDIR


def _safe_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        normalized = value.strip()
        return normalized or None
    return str(value).strip() or None


def _safe_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def load_config(path: Optional[Path] = None) -> ConfigFile:
    config_path = path or resolve_config_path()
    if not config_path.exists():
        return ConfigFile()
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CLIError(f"failed to read config file {config_path}: {exc}") from exc
    except Exception as exc:
        raise CLIError(f"failed to parse config file {config_path}: {exc}") from exc
    return ConfigFile(
        api_base_url=_safe_str(data.get("api_base_url")),
        owner=_safe_str(data.get("owner")),
        repo=_safe_str(data.get("repo")),
        formula_remote=_safe_str(data.get("formula_remote")),
        formula_branch=_safe_str(data.get("formula_branch")),
        formula_name=_safe_str(data.get("formula_name")),
        cache_dir=_safe_str(data.get("cache_dir")),
        asset_name=_safe_str(data.get("asset_name")),
        release_body=_safe_str(data.get("release_body")),
        http_timeout=_safe_float(data.get("http_timeout")),
    )


def resolve_settings(
    config: Optional[ConfigFile] = None,
    *,
    cache_dir: Optional[str] = None,
    source_dir: Optional[str] = None,
) -> ReleaseSettings:
    """Merge CLI overrides > environment > config file > built-in defaults."""
    cfg = config or ConfigFile()
    env_cache = _safe_str(os.environ.get(CACHE_ENV_VAR))
    cache_value = _safe_str(cache_dir) or env_cache or cfg.cache_dir
    resolved_cache = Path(cache_value).expanduser() if cache_value else default_cache_dir()
    return ReleaseSettings(
        api_base_url=cfg.api_base_url or DEFAULT_API_BASE_URL,
        owner=cfg.owner or DEFAULT_OWNER,
        repo=cfg.repo or DEFAULT_REPO,
        formula_remote=cfg.formula_remote or DEFAULT_FORMULA_REMOTE,
        formula_branch=cfg.formula_branch or DEFAULT_FORMULA_BRANCH,
        formula_name=cfg.formula_name or DEFAULT_FORMULA_NAME,
        cache_dir=resolved_cache,
        asset_name=cfg.asset_name or DEFAULT_ASSET_NAME,
        release_body=cfg.release_body or DEFAULT_RELEASE_BODY,
        http_timeout=cfg.http_timeout or HTTP_TIMEOUT_SECONDS,
        source_dir=Path(source_dir).expanduser() if source_dir else Path.cwd(),
    )


def config_template() -> str:
    return (
        "# nanoscope-release configuration (TOML)\n"
        "#\n"
        "# Precedence (highest -> lowest):\n"
        "#   CLI flags > environment variables > this file > built-in defaults\n"
        "\n"
        f"# api_base_url = \"{DEFAULT_API_BASE_URL}\"\n"
        f"# owner = \"{DEFAULT_OWNER}\"\n"
        f"# repo = \"{DEFAULT_REPO}\"\n"
        "\n"
        f"# formula_remote = \"{DEFAULT_FORMULA_REMOTE}\"\n"
        f"# formula_branch = \"{DEFAULT_FORMULA_BRANCH}\"\n"
        f"# formula_name = \"{DEFAULT_FORMULA_NAME}\"\n"
        f"# cache_dir = \"~/{DEFAULT_CACHE_SUBDIR}\"  # or set {CACHE_ENV_VAR}\n"
        "\n"
        f"# asset_name = \"{DEFAULT_ASSET_NAME}\"\n"
        f"# release_body = \"{DEFAULT_RELEASE_BODY}\"\n"
        f"# http_timeout = {HTTP_TIMEOUT_SECONDS}\n"
    )


def write_config_template(path: Path, *, force: bool = False) -> Path:
    if path.exists() and not force:
        raise CLIError(f"config file already exists at {path}; pass --force to overwrite")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config_template(), encoding="utf-8")
    except OSError as exc:
        raise CLIError(f"failed to write config file {path}: {exc}") from exc
    return path
