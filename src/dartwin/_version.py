"""Version lookup: the source checkout's pyproject.toml, else the installed distribution."""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION = "dartwin"

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _checkout_version() -> str | None:
    if not _PYPROJECT.is_file():
        return None
    with _PYPROJECT.open("rb") as f:
        project = tomllib.load(f).get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_version() -> str:
    """Return the DarTwin version, or ``0.0.0`` when neither source knows it."""
    found = _checkout_version()
    if found:
        return found
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"
