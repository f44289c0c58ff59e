"""Release configuration.

Settings live in the package's own pyproject.toml under
``[tool.release-gate]``. Every key is optional; the defaults describe a
uv-managed package tested with pytest, checked with ruff, documented with
Sphinx and published with ``uv publish``. ``{dist}`` in the build and
publish commands is replaced by ``dist-dir``::

    [tool.release-gate]
    branch = "main"
    token-env = "UV_PUBLISH_TOKEN"
    bump-command = "uv version --bump {bump}"
    dist-dir = "build/dist"

    [[tool.release-gate.gates]]
    name = "tests"
    command = "uv run --all-extras pytest"
"""

from __future__ import annotations

import os
from pathlib import Path, PurePath

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from tomlkit.exceptions import ParseError

from .errors import ConfigError
from .toml import TOOL_TABLE, get_tool_config, load_pyproject


def _kebab(name: str) -> str:
    return name.replace("_", "-")


class GateConfig(BaseModel):
    """A named pass/fail check run before anything is released."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    command: str = Field(min_length=1)


DEFAULT_GATES: list[GateConfig] = [
    GateConfig(name="tests", command="uv run --all-extras pytest"),
    GateConfig(name="format", command="uv run ruff format --check ."),
    GateConfig(name="lint", command="uv run ruff check ."),
    GateConfig(
        name="docs",
        command="uv run --all-extras sphinx-build -W -b html docs docs/_build/html",
    ),
]


class ReleaseConfig(BaseModel):
    """Validated contents of [tool.release-gate].

    Attributes:
        branch: The only branch releases may be cut from.
        remote: Git remote that receives the release commit and tag.
        token_env: Environment variable holding the registry credential.
                   An empty string disables the credential check.
        bump_command: External version-bump tool. ``{bump}`` is replaced by
                      the bump type. Unset means the built-in bumper.
        build_command: Builds the distributions into ``{dist}``.
        dry_run_command: Validates the upload without publishing.
        publish_command: The real, irreversible upload.
        dist_dir: Build output directory relative to the repository root,
                  emptied before every build.
        gates: Quality gates, run in order.
    """

    model_config = ConfigDict(
        extra="forbid", alias_generator=_kebab, populate_by_name=True
    )

    branch: str = "main"
    remote: str = "origin"
    token_env: str = "UV_PUBLISH_TOKEN"
    bump_command: str | None = None
    build_command: str = "uv build --out-dir {dist}"
    dry_run_command: str = "uv publish --dry-run {dist}/*"
    publish_command: str = "uv publish {dist}/*"
    dist_dir: str = "dist"
    gates: list[GateConfig] = Field(
        default_factory=lambda: [g.model_copy() for g in DEFAULT_GATES]
    )

    @field_validator("dist_dir")
    @classmethod
    def _dist_dir_inside_repository(cls, value: str) -> str:
        # Emptied before every build.
        if not value.strip() or PurePath(value).is_absolute():
            raise ValueError("must be a relative path inside the repository")
        normalized = os.path.normpath(value)
        parts = PurePath(normalized).parts
        if normalized == "." or parts[0] in ("..", ".git"):
            raise ValueError(
                f"{value!r} is not a build directory inside the repository"
            )
        return value

    def render(self, command: str) -> str:
        """Substitute ``{dist}`` in a configured command line."""
        return command.replace("{dist}", self.dist_dir)

    def toolchain_commands(self) -> list[str]:
        """Every command line the pipeline requires to be runnable."""
        return [
            *(gate.command for gate in self.gates),
            self.render(self.build_command),
            self.render(self.dry_run_command),
            self.render(self.publish_command),
        ]


def load_config(manifest: Path) -> ReleaseConfig:
    """Read and validate [tool.release-gate] from a pyproject.toml.

    Raises:
        ConfigError: If the manifest is missing, unparsable, or the table
                     contains unknown keys or wrongly typed values.
    """
    if not manifest.exists():
        raise ConfigError(f"{manifest.name} not found in {manifest.parent}")
    try:
        doc = load_pyproject(manifest)
    except (OSError, ParseError) as exc:
        raise ConfigError(f"could not parse {manifest.name}: {exc}") from exc

    try:
        return ReleaseConfig.model_validate(get_tool_config(doc))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"invalid [tool.{TOOL_TABLE}]: {problems}") from exc
