"""Tests for release_gate.publisher."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from release_gate.config import ReleaseConfig
from release_gate.errors import PublishError
from release_gate.models import PublishAttempt
from release_gate.publisher import clean_dist, dry_run, publish, real_publish


class TestCleanDist:
    def test_creates_missing_dir(self, tmp_path: Path) -> None:
        assert clean_dist(tmp_path, "dist") == (tmp_path / "dist").resolve()
        assert (tmp_path / "dist").is_dir()

    def test_removes_stale_artifacts(self, tmp_path: Path) -> None:
        dist = tmp_path / "dist"
        (dist / "nested").mkdir(parents=True)
        (dist / "demo-1.2.2-py3-none-any.whl").write_text("old")
        (dist / "nested" / "file").write_text("old")

        clean_dist(tmp_path, "dist")

        assert list(dist.iterdir()) == []

    @pytest.mark.parametrize("dist_dir", [".", "..", "dist/..", ".git"])
    def test_refuses_repository_root_and_outside(
        self, tmp_path: Path, dist_dir: str
    ) -> None:
        repo = tmp_path / "repo"
        (repo / ".git").mkdir(parents=True)
        (repo / "src.py").write_text("print()")

        with pytest.raises(PublishError, match="refusing to empty"):
            clean_dist(repo, dist_dir)

        assert (repo / ".git").is_dir()
        assert (repo / "src.py").exists()

    def test_refuses_symlink_escaping_repository(self, tmp_path: Path) -> None:
        repo = tmp_path / "repo"
        repo.mkdir()
        outside = tmp_path / "elsewhere"
        outside.mkdir()
        (outside / "keep.txt").write_text("keep")
        (repo / "dist").symlink_to(outside)

        with pytest.raises(PublishError):
            clean_dist(repo, "dist")

        assert (outside / "keep.txt").exists()


class TestPublish:
    @patch("release_gate.publisher.check_command")
    @patch("release_gate.publisher.step")
    def test_dry_run_then_publish(
        self, mock_step: MagicMock, mock_check: MagicMock, make_ctx
    ) -> None:
        mock_check.return_value = None
        ctx = make_ctx()

        publish(ctx, ReleaseConfig())

        assert [c.args[0] for c in mock_check.call_args_list] == [
            "uv build --out-dir dist",
            "uv publish --dry-run dist/*",
            "uv publish dist/*",
        ]
        assert ctx.publish_attempts == [
            PublishAttempt(dry_run=True, success=True),
            PublishAttempt(dry_run=False, success=True),
        ]
        assert (ctx.root / "dist").is_dir()

    @patch("release_gate.publisher.check_command")
    @patch("release_gate.publisher.step")
    def test_dry_run_failure_never_publishes(
        self, mock_step: MagicMock, mock_check: MagicMock, make_ctx
    ) -> None:
        mock_check.side_effect = [None, "`uv publish --dry-run dist/*` exited with status 1"]
        ctx = make_ctx()

        with pytest.raises(PublishError) as excinfo:
            publish(ctx, ReleaseConfig())

        assert excinfo.value.phase == "dry-run"
        assert mock_check.call_count == 2
        assert ctx.publish_attempts == [
            PublishAttempt(
                dry_run=True,
                success=False,
                error="`uv publish --dry-run dist/*` exited with status 1",
            )
        ]

    @patch("release_gate.publisher.check_command")
    @patch("release_gate.publisher.step")
    def test_build_failure_is_a_dry_run_failure(
        self, mock_step: MagicMock, mock_check: MagicMock, make_ctx
    ) -> None:
        mock_check.return_value = "`uv build --out-dir dist` exited with status 2"

        with pytest.raises(PublishError, match="dry-run failed"):
            publish(make_ctx(), ReleaseConfig())

        mock_check.assert_called_once()

    @patch("release_gate.publisher.check_command")
    @patch("release_gate.publisher.step")
    def test_publish_failure_not_retried(
        self, mock_step: MagicMock, mock_check: MagicMock, make_ctx
    ) -> None:
        mock_check.side_effect = [None, None, "`uv publish dist/*` exited with status 1"]
        ctx = make_ctx()

        with pytest.raises(PublishError) as excinfo:
            publish(ctx, ReleaseConfig())

        assert excinfo.value.phase == "publish"
        assert mock_check.call_count == 3
        assert ctx.publish_attempts[-1].success is False


class TestRealPublishGuard:
    @patch("release_gate.publisher.check_command")
    def test_refuses_without_dry_run(self, mock_check: MagicMock, make_ctx) -> None:
        with pytest.raises(PublishError, match="without a passing dry run"):
            real_publish(make_ctx(), ReleaseConfig())
        mock_check.assert_not_called()

    @patch("release_gate.publisher.check_command")
    def test_refuses_after_failed_dry_run(
        self, mock_check: MagicMock, make_ctx
    ) -> None:
        ctx = make_ctx()
        ctx.publish_attempts.append(
            PublishAttempt(dry_run=True, success=False, error="boom")
        )
        with pytest.raises(PublishError):
            real_publish(ctx, ReleaseConfig())
        mock_check.assert_not_called()

    @patch("release_gate.publisher.check_command")
    @patch("release_gate.publisher.step")
    def test_dry_run_records_attempt(
        self, mock_step: MagicMock, mock_check: MagicMock, make_ctx
    ) -> None:
        mock_check.return_value = None
        ctx = make_ctx()
        attempt = dry_run(ctx, ReleaseConfig())
        assert attempt.dry_run and attempt.success

    @patch("release_gate.publisher.check_command")
    @patch("release_gate.publisher.step")
    def test_custom_dist_dir_used_by_build_and_upload(
        self, mock_step: MagicMock, mock_check: MagicMock, make_ctx
    ) -> None:
        mock_check.return_value = None
        ctx = make_ctx()
        stale = ctx.root / "build" / "dist" / "demo-1.2.2.tar.gz"
        stale.parent.mkdir(parents=True)
        stale.write_text("old")

        publish(ctx, ReleaseConfig(dist_dir="build/dist"))

        assert [c.args[0] for c in mock_check.call_args_list] == [
            "uv build --out-dir build/dist",
            "uv publish --dry-run build/dist/*",
            "uv publish build/dist/*",
        ]
        assert not stale.exists()
        assert not (ctx.root / "dist").exists()
