"""Publish to the package registry: build, dry run, then the real upload.

Registry uploads are immutable, so the real publish is issued at most once
and only right after a successful dry run. It is never retried.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from .config import ReleaseConfig
from .errors import PublishError
from .models import PublishAttempt, ReleaseContext
from .shell import check_command, info, step


def clean_dist(root: Path, dist_dir: str) -> Path:
    """Empty the build output directory so only this version is uploaded.

    Raises:
        PublishError: If the directory resolves to the repository root or
                      outside it, e.g. through a symlink.
    """
    root = root.resolve()
    dist = (root / dist_dir).resolve()
    git_dir = root / ".git"
    if root not in dist.parents or dist == git_dir or git_dir in dist.parents:
        raise PublishError("dry-run", f"refusing to empty {dist}: not inside {root}")
    if dist.exists():
        for entry in dist.iterdir():
            if entry.is_dir():
                shutil.rmtree(entry)
            else:
                entry.unlink()
    dist.mkdir(parents=True, exist_ok=True)
    return dist


def dry_run(ctx: ReleaseContext, config: ReleaseConfig) -> PublishAttempt:
    """Build fresh distributions and validate the upload without publishing."""
    clean_dist(ctx.root, config.dist_dir)

    info("Building distributions...")
    diagnostic = check_command(config.render(config.build_command))
    if diagnostic is None:
        info("Running publish dry run...")
        diagnostic = check_command(config.render(config.dry_run_command))

    attempt = PublishAttempt(dry_run=True, success=diagnostic is None, error=diagnostic)
    ctx.publish_attempts.append(attempt)
    if diagnostic is not None:
        raise PublishError("dry-run", diagnostic)
    info("Publish dry run passed ✓")
    return attempt


def real_publish(ctx: ReleaseContext, config: ReleaseConfig) -> PublishAttempt:
    """Perform the irreversible upload.

    Raises:
        PublishError: If the last recorded attempt is not a successful dry
                      run, or if the upload fails.
    """
    last = ctx.publish_attempts[-1] if ctx.publish_attempts else None
    if last is None or not (last.dry_run and last.success):
        raise PublishError("publish", "refusing to publish without a passing dry run")

    info(f"Publishing {ctx.package} {ctx.release_version}...")
    diagnostic = check_command(config.render(config.publish_command))
    attempt = PublishAttempt(dry_run=False, success=diagnostic is None, error=diagnostic)
    ctx.publish_attempts.append(attempt)
    if diagnostic is not None:
        raise PublishError("publish", diagnostic)
    return attempt


def publish(ctx: ReleaseContext, config: ReleaseConfig) -> None:
    """Dry run, then publish for real."""
    step(f"Publishing {ctx.package} {ctx.release_version}")
    dry_run(ctx, config)
    real_publish(ctx, config)
    info(f"Successfully published {ctx.package} {ctx.release_version} ✓")
