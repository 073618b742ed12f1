"""Environment checks run before the CLI touches the network or database."""

from __future__ import annotations

import importlib.util
import sys
from collections.abc import Mapping
from importlib import metadata

from tmsync import __version__

MIN_PYTHON = (3, 12)

# import name → distribution name on the package index
REQUIRED_PACKAGES: dict[str, str] = {
    "pydantic": "pydantic",
    "pydantic_settings": "pydantic-settings",
    "sqlalchemy": "SQLAlchemy",
    "requests": "requests",
}

INSTALL_HINT = 'Install project dependencies with `python -m pip install -e ".[dev]"`.'


def validate_runtime(
    min_python: tuple[int, int] = MIN_PYTHON,
    required: Mapping[str, str] = REQUIRED_PACKAGES,
    python_version: tuple[int, int] | None = None,
) -> None:
    """Raise RuntimeError if the interpreter is too old or a dependency is missing."""
    current = python_version or sys.version_info[:2]
    if current < min_python:
        raise RuntimeError(
            f"tmsync requires Python >={min_python[0]}.{min_python[1]}, "
            f"found {current[0]}.{current[1]}. {INSTALL_HINT}"
        )

    missing = sorted(
        dist for module, dist in required.items() if importlib.util.find_spec(module) is None
    )
    if missing:
        raise RuntimeError(f"Missing required packages: {', '.join(missing)}. {INSTALL_HINT}")


def describe_runtime(required: Mapping[str, str] = REQUIRED_PACKAGES) -> str:
    """One-line summary of tmsync, Python and dependency versions."""
    parts = [f"tmsync {__version__}", f"Python {sys.version.split()[0]}"]
    for dist in required.values():
        try:
            parts.append(f"{dist} {metadata.version(dist)}")
        except metadata.PackageNotFoundError:
            parts.append(f"{dist} (not installed)")
    return ", ".join(parts)
