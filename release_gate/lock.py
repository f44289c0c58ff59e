"""Exclusive lock preventing two releases of the same repository at once.

The lock is a file inside the git directory, created with O_EXCL and
holding the owner's PID. It is removed when the run ends, whatever the
outcome. A lock left behind by a killed run has to be removed by hand.
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import ReleaseLocked
from .preflight import query_git

LOCK_NAME = "release-gate.lock"


class ReleaseLock:
    """File lock held for the duration of one release run."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.held = False

    @classmethod
    def for_repository(cls) -> ReleaseLock:
        """Lock for the repository containing the working directory."""
        git_dir = Path(query_git("rev-parse", "--absolute-git-dir"))
        return cls(git_dir / LOCK_NAME)

    def acquire(self) -> None:
        """Create the lock file.

        Raises:
            ReleaseLocked: If another run already holds the lock.
        """
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError as exc:
            try:
                owner = self.path.read_text().strip() or "unknown"
            except OSError:
                owner = "unknown"
            raise ReleaseLocked(
                f"another release is in progress (pid {owner})", str(self.path)
            ) from exc
        with os.fdopen(fd, "w") as fh:
            fh.write(f"{os.getpid()}\n")
        self.held = True

    def release(self) -> None:
        if self.held:
            self.path.unlink(missing_ok=True)
            self.held = False

    def __enter__(self) -> ReleaseLock:
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()
