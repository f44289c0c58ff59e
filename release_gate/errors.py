"""Exception hierarchy for the release pipeline.

Every failure is terminal for the run. Each error carries a short category
label and a human-readable detail; the orchestrator prints both and exits
with status 1.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all release failures."""

    category = "release"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def hints(self) -> list[str]:
        """Follow-up instructions for the operator, if any."""
        return []

    def __str__(self) -> str:
        return f"[{self.category}] {self.detail}"


class Interrupted(ReleaseError):
    """Raised when the operator stops the run mid-pipeline."""

    category = "interrupted"

    def hints(self) -> list[str]:
        return ["Completed steps are not undone; inspect the repository before re-running."]


class ConfigError(ReleaseError):
    """Raised when the manifest or [tool.release-gate] table is invalid."""

    category = "config"


class PreflightError(ReleaseError):
    """Raised when the repository is not in a releasable state."""

    category = "preflight"


class WrongBranch(PreflightError):
    category = "preflight: wrong branch"


class DirtyTree(PreflightError):
    category = "preflight: dirty tree"

    def hints(self) -> list[str]:
        return ["Commit or stash your changes, then re-run."]


class ToolUnavailable(PreflightError):
    category = "preflight: tool unavailable"


class ReleaseLocked(PreflightError):
    category = "preflight: release locked"

    def __init__(self, detail: str, lock_path: str) -> None:
        super().__init__(detail)
        self.lock_path = lock_path

    def hints(self) -> list[str]:
        return [
            "If no other release is running, the lock is stale: "
            f"remove {self.lock_path} and re-run."
        ]


class GateFailure(ReleaseError):
    """Raised by the first quality gate that fails."""

    category = "gate"

    def __init__(self, gate: str, diagnostic: str) -> None:
        super().__init__(f"{gate} gate failed: {diagnostic}")
        self.gate = gate
        self.diagnostic = diagnostic


class BumpError(ReleaseError):
    category = "bump"


class TagError(ReleaseError):
    """Raised when a commit/tag/push sub-step fails.

    Already-completed sub-steps are not rolled back. ``completed`` lists them
    and ``remaining`` holds the git commands that finish the release by hand.
    ``modified`` names the files the version bump changed, which stay
    uncommitted when the failure happens before the commit.
    """

    category = "tag"

    def __init__(
        self,
        stage: str,
        detail: str,
        completed: list[str] | None = None,
        remaining: list[str] | None = None,
        modified: list[str] | None = None,
    ) -> None:
        super().__init__(f"{stage} failed: {detail}")
        self.stage = stage
        self.completed = list(completed or [])
        self.remaining = list(remaining or [])
        self.modified = list(modified or [])

    @property
    def partial(self) -> bool:
        """True when some sub-steps already changed the repository or remote."""
        return bool(self.completed)

    def hints(self) -> list[str]:
        if not self.partial:
            if not self.modified:
                return ["Nothing was committed, tagged or pushed."]
            return [
                "Nothing was committed, tagged or pushed, but the version bump "
                "is still in the working tree: " + ", ".join(self.modified),
                "Revert or commit it before re-running; preflight rejects a dirty tree.",
            ]
        lines = ["Already done (not rolled back): " + ", ".join(self.completed)]
        if self.remaining:
            lines.append("Inspect the repository, then finish by hand:")
            lines.extend(f"  {cmd}" for cmd in self.remaining)
        return lines


class PublishError(ReleaseError):
    """Raised when the dry-run or the real publish fails."""

    category = "publish"

    def __init__(self, phase: str, detail: str) -> None:
        super().__init__(f"{phase} failed: {detail}")
        self.phase = phase
