"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
"""

from __future__ import annotations

import semver

from .models import BumpType
from .shell import warn


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3" → "1.2.3"

    Raises:
        ValueError: For more than 3 components ("1.2.3.post1") or
                    prerelease/build metadata, which a bump would drop.
    """
    parts = version_str.split(".")
    if len(parts) > 3:
        raise ValueError(
            f"{version_str!r} has more than major.minor.patch components"
        )
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    version = semver.Version.parse(".".join(parts))
    if version.prerelease or version.build:
        raise ValueError(f"{version_str!r} carries prerelease or build metadata")
    return version


def bump_version(version_str: str, bump_type: BumpType) -> str:
    """Apply a semantic-version increment and return the new version.

    Examples:
        ("1.2.3", MAJOR) → "2.0.0"
        ("1.2.3", MINOR) → "1.3.0"
        ("1.2.3", PATCH) → "1.2.4"
        ("1.2.3", NONE) → "1.2.3"
    """
    if bump_type is BumpType.NONE:
        return version_str
    version = parse_version(version_str)
    if bump_type is BumpType.MAJOR:
        return str(version.bump_major())
    if bump_type is BumpType.MINOR:
        return str(version.bump_minor())
    return str(version.bump_patch())


def parse_bump_type(raw: str | None) -> BumpType:
    """Interpret the operator's bump argument.

    A missing or empty argument means no bump. Unrecognized values fall
    back to a patch bump after a warning rather than aborting the release.
    """
    if raw is None or not raw.strip():
        return BumpType.NONE
    try:
        return BumpType(raw.strip().lower())
    except ValueError:
        warn(f"Unknown version type '{raw}', defaulting to patch")
        return BumpType.PATCH
