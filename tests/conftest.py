"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from release_gate.config import ReleaseConfig
from release_gate.models import BumpType, ReleaseContext

PYPROJECT = """\
[project]
name = "Demo_Package"
# bumped by release-gate
version = "1.2.3"
dependencies = ["click>=8.0"]

[tool.release-gate]
branch = "main"
token-env = ""
"""


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(PYPROJECT)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document with a full [tool.release-gate] table."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"

[tool.release-gate]
branch = "release"
remote = "upstream"
bump-command = "uv version --bump {bump}"

[[tool.release-gate.gates]]
name = "tests"
command = "pytest -x"

[[tool.release-gate.gates]]
name = "lint"
command = "ruff check ."
"""
    return tomlkit.parse(content)


@pytest.fixture
def config() -> ReleaseConfig:
    return ReleaseConfig(token_env="")


@pytest.fixture
def make_ctx(tmp_pyproject: Path):
    """Factory for a ReleaseContext rooted at the temporary project."""

    def _make(bump_type: BumpType = BumpType.NONE) -> ReleaseContext:
        return ReleaseContext(
            root=tmp_pyproject.parent,
            manifest=tmp_pyproject,
            package="demo-package",
            current_version="1.2.3",
            bump_type=bump_type,
        )

    return _make
