"""CLI entry point for release-gate."""

from __future__ import annotations

import click

from release_gate.pipeline import run_release

EXAMPLES = """\b
Examples:
  release-gate patch    # Bump patch version and publish
  release-gate minor    # Bump minor version and publish
  release-gate          # Publish current version without bumping
"""


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EXAMPLES,
)
@click.version_option(package_name="release-gate")
@click.argument("bump", required=False, metavar="[major|minor|patch]")
def cli(bump: str | None) -> None:
    """Check, tag and publish a release of the package in the current repo.

    Runs preflight checks and quality gates, optionally bumps the version
    and pushes an annotated tag, then publishes to the package registry.
    """
    raise SystemExit(run_release(bump))
