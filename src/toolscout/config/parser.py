"""Configuration file parser for toolscout."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python 3.10

from dotenv import dotenv_values

from ..discovery.specs import CLAUDE_TOOL, NODE_RUNTIME, RuntimeSpec, ToolSpec
from ..host import HostContext

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "toolscout.toml"
DOTENV_FILENAME = ".env"
HINT_DB_FILENAME = "agents.db"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ToolConfig:
    """Which CLI tool to look for."""

    name: str = CLAUDE_TOOL.name


@dataclass
class RuntimeConfig:
    """Runtime download settings."""

    release_version: str = NODE_RUNTIME.release_version
    download_base_url: str = NODE_RUNTIME.download_base_url
    download_timeout_s: Optional[float] = None  # transport default
    auto_download: bool = True


@dataclass
class PathsConfig:
    """Filesystem locations."""

    app_data_dir: Optional[Path] = None  # platform default
    hint_db: Optional[Path] = None  # <app_data_dir>/agents.db


@dataclass
class ToolscoutConfig:
    """Complete toolscout configuration."""

    tool: ToolConfig = field(default_factory=ToolConfig)
    runtime: RuntimeConfig = field(default_factory=RuntimeConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    # File the configuration was read from, if any
    config_file: Optional[Path] = None

    def tool_spec(self) -> ToolSpec:
        return replace(CLAUDE_TOOL, name=self.tool.name)

    def runtime_spec(self) -> RuntimeSpec:
        return replace(
            NODE_RUNTIME,
            release_version=self.runtime.release_version,
            download_base_url=self.runtime.download_base_url,
        )

    def hint_db_path(self, host: HostContext) -> Path:
        if self.paths.hint_db is not None:
            return self.paths.hint_db
        return Path(host.app_data_dir) / HINT_DB_FILENAME


def find_config_file(directory: Path) -> Optional[Path]:
    """Find toolscout.toml in ``directory``.

    Args:
        directory: Directory to look in

    Returns:
        Path to toolscout.toml if found, None otherwise
    """
    config_file = Path(directory) / CONFIG_FILENAME
    if config_file.exists():
        return config_file
    return None


def _expand(value: Any) -> Optional[Path]:
    if not value:
        return None
    return Path(str(value)).expanduser()


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _apply_file(config: ToolscoutConfig, data: Dict[str, Any]) -> None:
    if "tool" in data:
        tool_data = data["tool"]
        config.tool.name = tool_data.get("name", config.tool.name)

    if "runtime" in data:
        runtime_data = data["runtime"]
        config.runtime.release_version = runtime_data.get(
            "release_version", config.runtime.release_version
        )
        config.runtime.download_base_url = runtime_data.get(
            "download_base_url", config.runtime.download_base_url
        )
        timeout = runtime_data.get("download_timeout_s")
        if timeout is not None:
            try:
                config.runtime.download_timeout_s = float(timeout)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid download_timeout_s=%r in config file", timeout)
        config.runtime.auto_download = runtime_data.get("auto_download", True)

    if "paths" in data:
        paths_data = data["paths"]
        config.paths.app_data_dir = _expand(paths_data.get("app_data_dir"))
        config.paths.hint_db = _expand(paths_data.get("hint_db"))


def _apply_environment(config: ToolscoutConfig, env: Mapping[str, str]) -> None:
    """Apply TOOLSCOUT_* overrides."""
    if env.get("TOOLSCOUT_TOOL_NAME"):
        config.tool.name = env["TOOLSCOUT_TOOL_NAME"]
    if env.get("TOOLSCOUT_RUNTIME_VERSION"):
        config.runtime.release_version = env["TOOLSCOUT_RUNTIME_VERSION"]
    if env.get("TOOLSCOUT_DOWNLOAD_BASE_URL"):
        config.runtime.download_base_url = env["TOOLSCOUT_DOWNLOAD_BASE_URL"]
    if env.get("TOOLSCOUT_DOWNLOAD_TIMEOUT"):
        try:
            config.runtime.download_timeout_s = float(env["TOOLSCOUT_DOWNLOAD_TIMEOUT"])
        except ValueError:
            logger.warning(
                "Ignoring invalid TOOLSCOUT_DOWNLOAD_TIMEOUT=%r", env["TOOLSCOUT_DOWNLOAD_TIMEOUT"]
            )
    if env.get("TOOLSCOUT_AUTO_DOWNLOAD"):
        config.runtime.auto_download = _parse_bool(env["TOOLSCOUT_AUTO_DOWNLOAD"])
    if env.get("TOOLSCOUT_APP_DATA_DIR"):
        config.paths.app_data_dir = _expand(env["TOOLSCOUT_APP_DATA_DIR"])
    if env.get("TOOLSCOUT_HINT_DB"):
        config.paths.hint_db = _expand(env["TOOLSCOUT_HINT_DB"])


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    search_dir: Optional[Path] = None,
) -> ToolscoutConfig:
    """Load configuration from toolscout.toml and the environment, or use defaults.

    Precedence, lowest first: defaults, the TOML file, a ``.env`` file next
    to it, the process environment. ``os.environ`` is never modified.

    Args:
        config_path: Explicit config file; otherwise toolscout.toml in ``search_dir``
        environ: Environment to read overrides from (defaults to os.environ)
        search_dir: Where to look for toolscout.toml (defaults to the working directory)

    Returns:
        ToolscoutConfig with loaded or default configuration
    """
    config = ToolscoutConfig()
    base_dir = Path(search_dir) if search_dir else Path.cwd()

    config_file = Path(config_path) if config_path else find_config_file(base_dir)
    if config_file and config_file.exists():
        try:
            with open(config_file, "rb") as f:
                data = tomllib.load(f)
        except (tomllib.TOMLDecodeError, OSError) as e:
            # If TOML parsing fails, keep defaults
            logger.warning("Ignoring unreadable config file %s: %s", config_file, e)
        else:
            _apply_file(config, data)
            config.config_file = config_file
        base_dir = config_file.parent
    elif config_path:
        logger.warning("Config file not found: %s", config_path)

    env: Dict[str, str] = {}
    dotenv_file = base_dir / DOTENV_FILENAME
    if dotenv_file.is_file():
        env.update({k: v for k, v in dotenv_values(dotenv_file).items() if v is not None})
    env.update(os.environ if environ is None else environ)

    _apply_environment(config, env)
    return config
