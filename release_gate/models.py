"""Data models for release-gate.

These Pydantic models represent the state threaded through one release
run. They are created fresh per invocation and discarded at exit.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class BumpType(str, Enum):
    """Semantic-version increment requested for a release."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


class Stage(str, Enum):
    """States of the release state machine."""

    START = "start"
    PREFLIGHT = "preflight"
    QUALITY_GATES = "quality-gates"
    VERSION_BUMP = "version-bump"
    DEGRADED_BUMP = "degraded-bump"
    TAG = "tag"
    PUBLISH = "publish"
    DONE = "done"
    ABORTED = "aborted"


class VersionBump(BaseModel):
    """Records the version change made by a release.

    Attributes:
        old: The version before bumping.
        new: The version after bumping.
        bump_type: The increment that produced ``new``.
    """

    old: str
    new: str
    bump_type: BumpType


class GateResult(BaseModel):
    """Outcome of a single quality gate."""

    name: str
    passed: bool
    message: str = ""


class PublishAttempt(BaseModel):
    """One call to the registry, either the dry run or the real upload."""

    dry_run: bool
    success: bool
    error: str | None = None


class ReleaseContext(BaseModel):
    """Everything a release run knows, passed explicitly to every stage.

    Attributes:
        root: Repository root the release runs in.
        manifest: Path to the package's pyproject.toml.
        package: Canonical package name from [project].name.
        branch: Current git branch, filled in by preflight.
        clean: Whether the working tree was clean at preflight.
        current_version: Manifest version when the run started.
        bump_type: Requested increment; NONE skips bump and tag.
        bump: The version change, once applied.
        tag: Release tag, always "v" + the post-bump manifest version.
    """

    root: Path
    manifest: Path
    package: str
    current_version: str
    bump_type: BumpType = BumpType.NONE
    branch: str | None = None
    clean: bool | None = None
    bump: VersionBump | None = None
    tag: str | None = None
    gate_results: list[GateResult] = Field(default_factory=list)
    publish_attempts: list[PublishAttempt] = Field(default_factory=list)
    history: list[Stage] = Field(default_factory=list)

    @property
    def new_version(self) -> str | None:
        return self.bump.new if self.bump else None

    @property
    def release_version(self) -> str:
        """Version being published: the bumped one, else the current one."""
        return self.new_version or self.current_version
