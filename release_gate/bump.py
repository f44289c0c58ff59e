"""Version bumping for the release commit.

The built-in bumper rewrites [project].version with tomlkit and is always
available. A project may instead configure an external ``bump-command``;
when that tool is missing the pipeline degrades to a manual edit the
operator has to confirm.
"""

from __future__ import annotations

from collections.abc import Callable

import click
from tomlkit.exceptions import TOMLKitError

from .config import ReleaseConfig
from .errors import BumpError
from .models import ReleaseContext, VersionBump
from .shell import check_command, executable, info, step, warn, which
from .toml import read_project_version, set_project_version
from .versions import bump_version

Confirm = Callable[[str], bool]


def bump_tool_available(config: ReleaseConfig) -> bool:
    """Whether the automated bump can run without operator help."""
    if config.bump_command is None:
        return True
    return which(executable(config.bump_command)) is not None


def expected_version(ctx: ReleaseContext) -> str:
    """Compute the version the bump must produce."""
    try:
        return bump_version(ctx.current_version, ctx.bump_type)
    except ValueError as exc:
        raise BumpError(
            f"current version {ctx.current_version!r} is not semantic: {exc}"
        ) from exc


def apply_bump(ctx: ReleaseContext, config: ReleaseConfig) -> VersionBump:
    """Bump the manifest version automatically and record it on the context."""
    step(f"Bumping {ctx.bump_type.value} version")
    new = expected_version(ctx)

    if config.bump_command is None:
        try:
            set_project_version(ctx.manifest, new)
        except (OSError, TOMLKitError) as exc:
            raise BumpError(f"could not write {ctx.manifest}: {exc}") from exc
    else:
        command = config.bump_command.replace("{bump}", ctx.bump_type.value)
        command = command.replace("{version}", new)
        diagnostic = check_command(command)
        if diagnostic is not None:
            raise BumpError(diagnostic)

    return _record_bump(ctx, new)


def _confirm(prompt: str) -> bool:
    return click.confirm(prompt, default=False)


def confirm_manual_bump(
    ctx: ReleaseContext, config: ReleaseConfig, confirm: Confirm = _confirm
) -> VersionBump:
    """Block until the operator has bumped the version by hand.

    Used when the configured bump tool is not installed. The operator is
    told which version to write; the manifest is checked afterwards.
    """
    step(f"Bumping {ctx.bump_type.value} version (manual)")
    new = expected_version(ctx)
    tool = executable(config.bump_command or "")
    warn(f"{tool} not found, the version has to be bumped manually")
    warn(f'Set version = "{new}" under [project] in {ctx.manifest}')

    try:
        confirmed = confirm("Continue after manually bumping the version?")
    except click.Abort as exc:
        raise BumpError("manual version bump aborted by operator") from exc
    if not confirmed:
        raise BumpError("manual version bump not confirmed")

    return _record_bump(ctx, new)


def _record_bump(ctx: ReleaseContext, expected: str) -> VersionBump:
    """Re-read the manifest and check it holds the expected version."""
    try:
        actual = read_project_version(ctx.manifest)
    except (OSError, TOMLKitError) as exc:
        raise BumpError(f"could not read {ctx.manifest}: {exc}") from exc
    if actual != expected:
        raise BumpError(
            f"{ctx.manifest.name} has version {actual}, expected {expected} "
            f"after a {ctx.bump_type.value} bump of {ctx.current_version}"
        )
    bump = VersionBump(old=ctx.current_version, new=actual, bump_type=ctx.bump_type)
    ctx.bump = bump
    info(f"New version: {bump.old} → {bump.new}")
    return bump
