"""Release pipeline: preflight → gates → [bump → tag] → publish.

This module orchestrates a single release as an explicit state machine:
1. Start: take the repository's release lock
2. Preflight: release branch, clean tree, toolchain and credentials
3. Quality gates: tests, formatting, lint, docs (fail-fast)
4. Version bump, or a degraded manual bump if the bump tool is missing
5. Tag: commit the bump, annotated tag, push branch and tag
6. Publish: dry run, then the real upload

Steps 4 and 5 only run when a bump type was requested; otherwise the
current version is published as is. Any failure moves the machine to
``aborted`` and nothing after it runs.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import click

from .bump import (
    Confirm,
    apply_bump,
    bump_tool_available,
    confirm_manual_bump,
    expected_version,
)
from .config import ReleaseConfig, load_config
from .errors import ConfigError, Interrupted, ReleaseError
from .gates import run_gates
from .lock import ReleaseLock
from .models import BumpType, ReleaseContext, Stage
from .preflight import run_preflight
from .publisher import publish
from .shell import error, info, step
from .tagger import check_tag_free, tag_name, tag_release
from .toml import get_project_name, get_project_version, load_pyproject
from .versions import parse_bump_type

MANIFEST = "pyproject.toml"

# Allowed moves between non-terminal stages. Any stage may also abort.
TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.START: frozenset({Stage.PREFLIGHT}),
    Stage.PREFLIGHT: frozenset({Stage.QUALITY_GATES}),
    Stage.QUALITY_GATES: frozenset({Stage.VERSION_BUMP, Stage.PUBLISH}),
    Stage.VERSION_BUMP: frozenset({Stage.DEGRADED_BUMP, Stage.TAG}),
    Stage.DEGRADED_BUMP: frozenset({Stage.TAG}),
    Stage.TAG: frozenset({Stage.PUBLISH}),
    Stage.PUBLISH: frozenset({Stage.DONE}),
}
TERMINAL = frozenset({Stage.DONE, Stage.ABORTED})


def load_context(root: Path, bump_type: BumpType) -> ReleaseContext:
    """Read the manifest and build the context for a fresh run.

    Raises:
        ConfigError: If the manifest has no static [project].version.
    """
    manifest = root / MANIFEST
    doc = load_pyproject(manifest)
    version = get_project_version(doc)
    if version is None:
        raise ConfigError(
            f"{MANIFEST} has no static [project].version; "
            "release-gate needs a version it can bump and tag"
        )
    return ReleaseContext(
        root=root,
        manifest=manifest,
        package=get_project_name(doc, root.name),
        current_version=version,
        bump_type=bump_type,
    )


class ReleasePipeline:
    """Drives one release through its stages.

    Each handler performs its stage and returns the next stage; the
    transition is checked against TRANSITIONS before it is taken.
    """

    def __init__(
        self,
        ctx: ReleaseContext,
        config: ReleaseConfig,
        *,
        lock: ReleaseLock | None = None,
        confirm: Confirm | None = None,
    ) -> None:
        self.ctx = ctx
        self.config = config
        self.lock = lock
        self.confirm = confirm
        self.error: ReleaseError | None = None
        self.handlers: dict[Stage, Callable[[], Stage]] = {
            Stage.START: self._start,
            Stage.PREFLIGHT: self._preflight,
            Stage.QUALITY_GATES: self._quality_gates,
            Stage.VERSION_BUMP: self._version_bump,
            Stage.DEGRADED_BUMP: self._degraded_bump,
            Stage.TAG: self._tag,
            Stage.PUBLISH: self._publish,
        }

    def run(self) -> Stage:
        """Run until done or aborted and return the terminal stage."""
        stage = Stage.START
        try:
            while stage not in TERMINAL:
                self.ctx.history.append(stage)
                next_stage = self.handlers[stage]()
                if next_stage not in TRANSITIONS[stage]:
                    raise RuntimeError(
                        f"illegal transition {stage.value} → {next_stage.value}"
                    )
                stage = next_stage
        except ReleaseError as exc:
            self.error = exc
            stage = Stage.ABORTED
        except KeyboardInterrupt:
            self.error = Interrupted(f"interrupted during {stage.value}")
            stage = Stage.ABORTED
        finally:
            if self.lock is not None:
                self.lock.release()
        self.ctx.history.append(stage)
        return stage

    def _start(self) -> Stage:
        step(f"Starting release of {self.ctx.package} {self.ctx.current_version}")
        if self.lock is None:
            self.lock = ReleaseLock.for_repository()
        self.lock.acquire()
        return Stage.PREFLIGHT

    def _preflight(self) -> Stage:
        run_preflight(self.ctx, self.config)
        return Stage.QUALITY_GATES

    def _quality_gates(self) -> Stage:
        run_gates(self.config.gates, self.ctx.gate_results)
        if self.ctx.bump_type is BumpType.NONE:
            info(f"No version bump requested, publishing {self.ctx.current_version}")
            return Stage.PUBLISH
        return Stage.VERSION_BUMP

    def _version_bump(self) -> Stage:
        # Refuse a taken tag before the manifest is touched.
        check_tag_free(tag_name(expected_version(self.ctx)), self.config.remote)
        if not bump_tool_available(self.config):
            return Stage.DEGRADED_BUMP
        apply_bump(self.ctx, self.config)
        return Stage.TAG

    def _degraded_bump(self) -> Stage:
        if self.confirm is None:
            confirm_manual_bump(self.ctx, self.config)
        else:
            confirm_manual_bump(self.ctx, self.config, self.confirm)
        return Stage.TAG

    def _tag(self) -> Stage:
        tag_release(self.ctx, self.config)
        return Stage.PUBLISH

    def _publish(self) -> Stage:
        publish(self.ctx, self.config)
        return Stage.DONE


def report_failure(exc: ReleaseError) -> None:
    """Print a labeled error and any recovery hints to stderr."""
    error(str(exc))
    for hint in exc.hints():
        click.echo(f"  {hint}", err=True)


def run_release(
    bump: str | None = None,
    *,
    confirm: Confirm | None = None,
) -> int:
    """Execute the full release pipeline in the working directory.

    Git and every configured command run in the working directory, which
    must hold the pyproject.toml being released.

    Args:
        bump: Requested bump type ("major", "minor", "patch"). None or an
              empty string publishes the current version without bumping.
        confirm: Prompt used by the manual bump fallback.

    Returns:
        Process exit code: 0 when the release completed, 1 otherwise.
    """
    root = Path.cwd()
    bump_type = parse_bump_type(bump)

    try:
        config = load_config(root / MANIFEST)
        ctx = load_context(root, bump_type)
    except ConfigError as exc:
        report_failure(exc)
        return 1

    pipeline = ReleasePipeline(ctx, config, confirm=confirm)
    final = pipeline.run()
    if final is not Stage.DONE:
        if pipeline.error is not None:
            report_failure(pipeline.error)
        return 1

    click.echo(f"\n{'=' * 60}\nReleased {ctx.package} {ctx.release_version}\n{'=' * 60}")
    return 0
