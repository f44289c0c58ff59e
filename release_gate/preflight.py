"""Preflight validation: is the repository in a releasable state?

Each check either returns silently or raises a PreflightError subclass.
All of them must pass before any quality gate runs.
"""

from __future__ import annotations

import os
import subprocess

from .config import ReleaseConfig
from .errors import DirtyTree, PreflightError, ToolUnavailable, WrongBranch
from .models import ReleaseContext
from .shell import executable, git, info, step, which


def query_git(*args: str) -> str:
    """Run a read-only git query, mapping failures to preflight errors."""
    try:
        return git(*args)
    except FileNotFoundError as exc:
        raise ToolUnavailable("git is not installed") from exc
    except subprocess.CalledProcessError as exc:
        raise PreflightError(
            f"git {' '.join(args)} failed: {(exc.stderr or '').strip()}"
        ) from exc


def check_branch(ctx: ReleaseContext, config: ReleaseConfig) -> None:
    """Require the release branch to be checked out.

    A detached HEAD reports as "HEAD" and is rejected like any other branch.
    """
    branch = query_git("rev-parse", "--abbrev-ref", "HEAD")
    ctx.branch = branch
    if branch != config.branch:
        raise WrongBranch(
            f"Must be on {config.branch} branch to release. Current branch: {branch}"
        )
    info(f"On {branch} branch ✓")


def check_clean_working_tree(ctx: ReleaseContext) -> None:
    """Reject any tracked or untracked pending change."""
    status = query_git("status", "--porcelain")
    ctx.clean = not status
    if status:
        changed = status.splitlines()
        shown = "\n".join(f"  {line}" for line in changed[:10])
        more = f"\n  ... and {len(changed) - 10} more" if len(changed) > 10 else ""
        raise DirtyTree(f"Working directory is not clean:\n{shown}{more}")
    info("Working directory is clean ✓")


def check_tool_availability(config: ReleaseConfig) -> None:
    """Require every configured executable and the registry credential."""
    tools = ["git"]
    for command in config.toolchain_commands():
        name = executable(command)
        if name and name not in tools:
            tools.append(name)

    missing = [name for name in tools if which(name) is None]
    if missing:
        raise ToolUnavailable(f"not found on PATH: {', '.join(missing)}")

    if config.token_env and not os.environ.get(config.token_env):
        raise ToolUnavailable(
            f"registry credentials missing: set {config.token_env} "
            f'(or token-env = "" to rely on trusted publishing)'
        )
    info(f"Toolchain available: {', '.join(tools)} ✓")


def run_preflight(ctx: ReleaseContext, config: ReleaseConfig) -> None:
    """Run all preflight checks in order, stopping at the first failure."""
    step("Preflight checks")
    check_branch(ctx, config)
    check_clean_working_tree(ctx)
    check_tool_availability(config)
