"""Configuration loading.

Looks for ``versionize.toml`` at the working-copy root first, then for a
``[tool.versionize]`` table in ``pyproject.toml``. Neither being present is
not an error: the defaults apply.
"""

from __future__ import annotations

import tomllib
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from versionize.config.models import VersionizeConfig
from versionize.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from versionize.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

log = get_logger(__name__)

CONFIG_FILE_NAME = "versionize.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"
TOOL_KEY = "versionize"


def load_toml(path: Path) -> dict[str, Any]:
    """Load and parse a TOML file.

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigError: If the file is not valid TOML
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def extract_versionize_config(pyproject: dict[str, Any]) -> dict[str, Any]:
    """Return the ``[tool.versionize]`` table, or an empty dict."""
    return pyproject.get("tool", {}).get(TOOL_KEY, {})


def load_config(root: Path) -> VersionizeConfig:
    """Load configuration for the working copy at ``root``.

    Args:
        root: Working-copy root directory

    Returns:
        Validated configuration, defaults where nothing is configured

    Raises:
        ConfigError: If a configuration file is malformed
        ConfigValidationError: If configuration values are invalid
    """
    standalone = root / CONFIG_FILE_NAME
    pyproject = root / PYPROJECT_FILE_NAME

    if standalone.is_file():
        source = standalone
        data = load_toml(standalone)
    elif pyproject.is_file():
        source = pyproject
        data = extract_versionize_config(load_toml(pyproject))
    else:
        log.debug("no configuration file found, using defaults", root=str(root))
        return VersionizeConfig()

    try:
        config = VersionizeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid configuration in {source}:\n{e}") from e

    log.debug("loaded configuration", source=str(source))
    return config
