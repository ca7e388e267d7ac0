"""Tests for the `scout worker` command."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from typer.testing import CliRunner

from scout.cli import app

runner = CliRunner()


@pytest.fixture
def sync_worker(monkeypatch):
    worker = AsyncMock()
    worker.try_run_next.return_value = True
    monkeypatch.setattr("scout.core.logging.setup_logging", lambda: None)
    monkeypatch.setattr(
        "scout.worker.factory.get_services", lambda: SimpleNamespace(worker=worker)
    )
    return worker


class TestWorkerOnce:
    """Tests for `scout worker --once`."""

    def test_runs_queued_job_without_recovery(self, sync_worker):
        """Should run the pending job instead of failing it as interrupted."""
        result = runner.invoke(app, ["worker", "--once"])

        assert result.exit_code == 0
        assert "Ran one job" in result.output
        sync_worker.try_run_next.assert_awaited_once()
        sync_worker.recover_orphaned_jobs.assert_not_awaited()
        sync_worker.start.assert_not_awaited()

    def test_no_pending_jobs(self, sync_worker):
        """Should report when there is nothing to run."""
        sync_worker.try_run_next.return_value = False

        result = runner.invoke(app, ["worker", "--once"])

        assert result.exit_code == 0
        assert "No pending jobs" in result.output
