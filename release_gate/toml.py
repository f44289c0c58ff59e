"""TOML reading and writing utilities.

Uses tomlkit to preserve formatting and comments when modifying
pyproject.toml, so a version bump commit only touches the version line.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, cast

import tomlkit
from packaging.utils import canonicalize_name

TOOL_TABLE = "release-gate"


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file.

    Returns a TOMLDocument that preserves formatting when modified and saved.
    """
    return tomlkit.parse(path.read_text())


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    """Save a TOMLDocument back to disk, preserving original formatting."""
    path.write_text(tomlkit.dumps(doc))


def get_project_name(doc: tomlkit.TOMLDocument, fallback: str) -> str:
    """Extract the canonical package name from [project].name.

    Names are normalized per PEP 503 (lowercase, hyphens instead of
    underscores).

    Args:
        doc: Parsed pyproject.toml document.
        fallback: Value to return if name is not specified.
    """
    return canonicalize_name(doc.get("project", {}).get("name", fallback))


def get_project_version(doc: tomlkit.TOMLDocument) -> str | None:
    """Extract the static version from [project].version.

    Returns None when the version is missing or declared dynamic.
    """
    version = doc.get("project", {}).get("version")
    return str(version) if version is not None else None


def set_project_version(path: Path, new_version: str) -> None:
    """Rewrite [project].version in place, leaving everything else intact."""
    doc = load_pyproject(path)
    # Cast needed because tomlkit types are complex unions
    project = cast(dict[str, Any], doc["project"])
    project["version"] = new_version
    save_pyproject(path, doc)


def read_project_version(path: Path) -> str | None:
    """Load the manifest and return its current static version."""
    return get_project_version(load_pyproject(path))


def get_tool_config(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Return the [tool.release-gate] table as plain Python data."""
    table = doc.get("tool", {}).get(TOOL_TABLE)
    if table is None:
        return {}
    return cast(dict[str, Any], table.unwrap())
