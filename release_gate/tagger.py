"""Release commit, annotated tag and push.

Runs only when the version was bumped. Sub-steps are not rolled back on
failure; the raised TagError says which ones completed and which git
commands finish the release by hand.
"""

from __future__ import annotations

import shlex
import subprocess

from .config import ReleaseConfig
from .errors import TagError
from .models import ReleaseContext
from .shell import git, info, step
from .toml import read_project_version


def tag_name(version: str) -> str:
    """Release tag for a version: "v" + version."""
    return f"v{version}"


def check_tag_free(tag: str, remote: str, modified: list[str] | None = None) -> None:
    """Refuse to reuse a tag that already exists locally or on the remote."""
    if git("tag", "--list", tag, check=False):
        raise TagError(
            "check-tag", f"tag {tag} already exists locally", modified=modified
        )
    if git("ls-remote", "--tags", remote, f"refs/tags/{tag}", check=False):
        raise TagError(
            "check-tag", f"tag {tag} already exists on {remote}", modified=modified
        )


def bumped_files(ctx: ReleaseContext) -> list[str]:
    """Files changed by the version bump, relative to the repository root.

    Preflight required a clean tree, so every modified or new file comes
    from the bump: the manifest, and e.g. uv.lock when ``uv version`` ran.
    """
    manifest = str(ctx.manifest.relative_to(ctx.root))
    try:
        output = git("ls-files", "--modified", "--others", "--exclude-standard")
    except subprocess.CalledProcessError as exc:
        raise TagError("stage", _describe(exc), modified=[manifest]) from exc
    files = list(dict.fromkeys(output.splitlines()))
    return files or [manifest]


def _describe(exc: subprocess.CalledProcessError) -> str:
    return (exc.stderr or "").strip() or f"exit status {exc.returncode}"


def _step_failed(
    stage: str,
    detail: str,
    completed: list[str],
    remaining: list[tuple[str, tuple[str, ...]]],
    files: list[str],
) -> TagError:
    commands = [f"git {shlex.join(args)}" for _, args in remaining]
    modified = files if "commit" not in completed else None
    return TagError(stage, detail, list(completed), commands, modified)


def tag_release(ctx: ReleaseContext, config: ReleaseConfig) -> str:
    """Commit the bump, tag it, push the branch, then the tag.

    The tag name is derived from the manifest as it is on disk after the
    bump, so it always matches what gets published.

    Returns:
        The tag that was created and pushed.
    """
    step("Tagging release")
    version = read_project_version(ctx.manifest)
    if version is None:
        raise TagError("check-tag", f"{ctx.manifest.name} has no [project].version")
    tag = tag_name(version)
    files = bumped_files(ctx)
    # Checked again here: another clone may have pushed the tag meanwhile.
    check_tag_free(tag, config.remote, modified=files)
    ctx.tag = tag

    plan: list[tuple[str, tuple[str, ...]]] = [
        ("stage", ("add", "--", *files)),
        ("commit", ("commit", "-m", f"Bump version to {version}")),
        ("tag", ("tag", "-a", tag, "-m", f"Release {version}")),
        ("push-branch", ("push", config.remote, config.branch)),
        ("push-tag", ("push", config.remote, tag)),
    ]

    completed: list[str] = []
    for index, (stage, args) in enumerate(plan):
        try:
            git(*args)
        except subprocess.CalledProcessError as exc:
            detail = _describe(exc)
            raise _step_failed(stage, detail, completed, plan[index:], files) from exc
        except OSError as exc:
            detail = str(exc)
            raise _step_failed(stage, detail, completed, plan[index:], files) from exc
        completed.append(stage)

    info(f"Git tag {tag} created and pushed ✓")
    return tag
