"""Runtime configuration for a deployment run.

Values are layered, highest priority first:

1. Command-line options
2. Project file   -- <root>/app/etc/static-deploy.yaml
3. User file      -- <user config dir>/magento-static-deploy/config.yaml
                     (or $MAGENTO_STATIC_DEPLOY_CONFIG)
4. Built-in defaults

Locales are user input and are validated strictly before any work starts;
unknown areas are dropped with a warning.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from magento_static_deploy.core.workers import default_worker_count
from magento_static_deploy.errors import ConfigError, RootNotFoundError
from magento_static_deploy.theme.models import Area, LocaleCode

logger = logging.getLogger(__name__)

APP_NAME = "magento-static-deploy"
CONFIG_ENV_VAR = "MAGENTO_STATIC_DEPLOY_CONFIG"
PROJECT_CONFIG = Path("app") / "etc" / "static-deploy.yaml"

DEFAULT_AREAS = ("frontend", "adminhtml")
DEFAULT_LOCALES = ("en_US",)


@dataclass
class DeployConfig:
    """Validated configuration for one run.

    Attributes:
        root: Absolute Magento root directory
        areas: Areas to deploy
        themes: ``Vendor/Name`` filter, None for every discovered theme
        locales: Validated locales
        jobs: Worker count (at least 1)
        verbose: Progress bar and debug logging
        include_dev: Copy development files (.ts, .less, node_modules, ...)
    """

    root: Path
    areas: list[Area] = field(default_factory=lambda: [Area.FRONTEND, Area.ADMINHTML])
    themes: list[str] | None = None
    locales: list[LocaleCode] = field(default_factory=lambda: [LocaleCode("en_US")])
    jobs: int = 1
    verbose: bool = False
    include_dev: bool = False


@dataclass
class ConfigLayer:
    """Partially specified settings from one source; None means unset."""

    areas: list[str] | None = None
    themes: list[str] | None = None
    locales: list[str] | None = None
    jobs: int | None = None
    include_dev: bool | None = None

    def over(self, lower: ConfigLayer) -> ConfigLayer:
        """Return a layer where this layer's set values win over ``lower``."""
        merged = {
            f.name: getattr(self, f.name) if getattr(self, f.name) is not None else getattr(lower, f.name)
            for f in fields(self)
        }
        return ConfigLayer(**merged)


def split_values(values: Iterable[str] | None) -> list[str] | None:
    """Flatten repeated and comma-separated option values (None when unset)."""
    if not values:
        return None
    result = [part.strip() for value in values for part in str(value).split(",")]
    return [part for part in result if part]


def get_user_config_path() -> Path:
    if env_path := os.environ.get(CONFIG_ENV_VAR):
        return Path(env_path)
    return Path(user_config_dir(APP_NAME)) / "config.yaml"


def _as_list(path: Path, key: str, value: Any) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return split_values([value])
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return split_values(value)
    raise ConfigError(path, f"'{key}' must be a string or a list of strings")


def load_config_file(path: Path) -> ConfigLayer:
    """Load one YAML config file; a missing file is an empty layer.

    Raises:
        ConfigError: If the file is not valid YAML or has wrongly typed values.
    """
    if not path.is_file():
        return ConfigLayer()

    yaml = YAML(typ="safe")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except (OSError, YAMLError) as e:
        logger.error(f"Failed to load config: {e}")
        raise ConfigError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ConfigError(path, "expected a mapping at the top level")

    jobs = data.get("jobs")
    if jobs is not None and (isinstance(jobs, bool) or not isinstance(jobs, int)):
        raise ConfigError(path, "'jobs' must be an integer")
    include_dev = data.get("include_dev")
    if include_dev is not None and not isinstance(include_dev, bool):
        raise ConfigError(path, "'include_dev' must be true or false")

    logger.debug("Loaded config from %s", path)
    return ConfigLayer(
        areas=_as_list(path, "areas", data.get("areas")),
        themes=_as_list(path, "themes", data.get("themes")),
        locales=_as_list(path, "locales", data.get("locales")),
        jobs=jobs,
        include_dev=include_dev,
    )


def ensure_magento_root(root: Path) -> Path:
    """Resolve ``root`` and check it is a Magento installation.

    Raises:
        RootNotFoundError: If the directory or app/etc/env.php is missing.
    """
    resolved = root.expanduser().resolve()
    if not resolved.is_dir():
        raise RootNotFoundError(resolved)
    if not (resolved / "app" / "etc" / "env.php").is_file():
        raise RootNotFoundError(
            resolved, "Not a Magento installation (app/etc/env.php not found)"
        )
    return resolved


def parse_areas(names: Iterable[str]) -> list[Area]:
    areas: list[Area] = []
    for name in names:
        area = Area.parse(name)
        if area is None:
            logger.warning("Ignoring unknown area '%s'", name)
        elif area not in areas:
            areas.append(area)
    return areas


def parse_locales(names: Iterable[str]) -> list[LocaleCode]:
    """Strictly validate user-supplied locales (raises InvalidLocaleError)."""
    locales: list[LocaleCode] = []
    for name in names:
        locale = LocaleCode.validated(name)
        if locale not in locales:
            locales.append(locale)
    return locales


def resolve_config(
    root: Path,
    cli: ConfigLayer | None = None,
    *,
    verbose: bool = False,
) -> DeployConfig:
    """Build the run configuration from CLI values and config files."""
    magento_root = ensure_magento_root(root)

    layer = cli or ConfigLayer()
    layer = layer.over(load_config_file(magento_root / PROJECT_CONFIG))
    layer = layer.over(load_config_file(get_user_config_path()))

    jobs = layer.jobs if layer.jobs is not None else default_worker_count()
    return DeployConfig(
        root=magento_root,
        areas=parse_areas(layer.areas if layer.areas is not None else DEFAULT_AREAS),
        themes=layer.themes or None,
        locales=parse_locales(layer.locales if layer.locales is not None else DEFAULT_LOCALES),
        jobs=max(1, jobs),
        verbose=verbose,
        include_dev=bool(layer.include_dev),
    )
