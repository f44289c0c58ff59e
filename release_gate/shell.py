"""Shell, git and console utilities.

Provides thin wrappers around subprocess calls for running git and the
external release toolchain, plus the labeled console output used by every
pipeline stage.
"""

from __future__ import annotations

import shlex
import shutil
import subprocess

import click


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "status", "--porcelain").
        check: If True (default), raise CalledProcessError on non-zero exit.
               Set to False for lookups that may legitimately fail.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def split_command(command: str) -> list[str]:
    """Split a configured command line into argv form."""
    return shlex.split(command)


def run_command(command: str) -> subprocess.CompletedProcess[bytes]:
    """Run a configured command line.

    Output is not captured - it streams directly to the terminal so the
    operator can follow test runs, builds and uploads.

    Raises:
        OSError: If the executable cannot be started.
    """
    return subprocess.run(split_command(command))


def check_command(command: str) -> str | None:
    """Run a command as a pass/fail check.

    Returns:
        None on success, otherwise a one-line diagnostic naming the command
        and why it failed.
    """
    try:
        result = run_command(command)
    except OSError as exc:
        return f"`{command}` could not be started: {exc}"
    if result.returncode != 0:
        return f"`{command}` exited with status {result.returncode}"
    return None


def executable(command: str) -> str:
    """Return the executable name of a command line."""
    argv = split_command(command)
    return argv[0] if argv else ""


def which(name: str) -> str | None:
    """Locate an executable on PATH."""
    return shutil.which(name)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the stages of the release pipeline in terminal output.
    """
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    click.echo(click.style("[INFO]", fg="green") + f" {msg}")


def warn(msg: str) -> None:
    click.echo(click.style("[WARN]", fg="yellow") + f" {msg}")


def error(msg: str) -> None:
    """Print an error message to stderr."""
    click.echo(click.style("ERROR:", fg="red") + f" {msg}", err=True)
