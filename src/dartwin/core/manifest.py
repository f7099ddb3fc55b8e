import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError

MANIFEST_NAME = "dartwin.toml"

DEFAULT_ACTUATOR_ORDER = ["irrigation", "human", "ventilation"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Layout Configuration
# =============================================================================


@dataclass
class LayoutConfig:
    """Layout engine configuration.

    Examples in dartwin.toml:

        [layout]
        actuator_order = ["irrigation", "human", "ventilation"]
        cache = true

        # Override individual layout metrics (see LayoutMetrics)
        [layout.metrics]
        goal_pitch = 260
        system_width = 900
    """

    actuator_order: list[str] = field(default_factory=lambda: list(DEFAULT_ACTUATOR_ORDER))
    metrics: dict[str, float] = field(default_factory=dict)
    cache: bool = True


# =============================================================================
# Logging Configuration
# =============================================================================


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"

    @property
    def level_number(self) -> int:
        return logging.getLevelName(self.level)


@dataclass
class DarTwinManifest:
    """
    Project manifest loaded from dartwin.toml.

    All sections are optional; a project without a manifest uses the defaults.
    """

    name: str = "unnamed"
    project_root: Path | None = None
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _string_list(value: object, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _metric_overrides(value: object) -> dict[str, float]:
    if not isinstance(value, dict):
        raise ConfigError("'layout.metrics' must be a table")
    overrides: dict[str, float] = {}
    for key, number in value.items():
        if isinstance(number, bool) or not isinstance(number, (int, float)):
            raise ConfigError(f"'layout.metrics.{key}' must be a number")
        overrides[key] = float(number)
    return overrides


def load_manifest(path: Path) -> DarTwinManifest:
    """
    Load a dartwin.toml manifest.

    Raises:
        ConfigError: If the file is not valid TOML or a value has the wrong type
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    project = data.get("project", {})
    layout_data = data.get("layout", {})
    logging_data = data.get("logging", {})

    # Parse layout config
    layout_config = LayoutConfig(
        actuator_order=_string_list(
            layout_data.get("actuator_order", DEFAULT_ACTUATOR_ORDER), "layout.actuator_order"
        ),
        metrics=_metric_overrides(layout_data.get("metrics", {})),
        cache=bool(layout_data.get("cache", True)),
    )

    # Parse logging config
    level = str(logging_data.get("level", "WARNING")).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"Unknown log level '{level}' in {path}")

    return DarTwinManifest(
        name=project.get("name", "unnamed"),
        project_root=path.parent,
        layout=layout_config,
        logging=LoggingConfig(level=level),
    )


def find_manifest(start: Path) -> Path | None:
    """Find the nearest dartwin.toml in ``start`` or one of its parents."""
    start = start.resolve()
    if start.is_file():
        start = start.parent
    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    return None


def load_project_manifest(start: Path) -> DarTwinManifest:
    """Load the manifest governing ``start``, or the defaults if there is none."""
    path = find_manifest(start)
    if path is None:
        return DarTwinManifest()
    return load_manifest(path)
