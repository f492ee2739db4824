"""Tests for the file-backed deployment logger."""

import pytest

from promoter.logger import DeployLogger


def read_log(logger: DeployLogger) -> str:
    return logger.log_path.read_text(encoding="utf-8")


class TestDeployLogger:
    def test_log_file_layout(self, tmp_path):
        logger = DeployLogger("cli", "deploy", log_dir=tmp_path, quiet=True)
        logger.close()

        assert logger.log_path.parent.parent == tmp_path / "cli"
        assert logger.log_path.name.endswith("_deploy.log")
        content = read_log(logger)
        assert "Scope: cli" in content
        assert "Status: SUCCESS" in content

    def test_output_is_stripped_of_ansi_codes(self, tmp_path):
        with DeployLogger("cli", "sync-files", log_dir=tmp_path, quiet=True) as logger:
            logger.log_output("\x1b[32mok\x1b[0m\nsecond", stream="stderr")

        content = read_log(logger)
        assert "  [stderr] ok" in content
        assert "  [stderr] second" in content
        assert "\x1b[" not in content

    def test_errors_mark_the_run_failed(self, tmp_path):
        with DeployLogger("api", "server", log_dir=tmp_path, quiet=True) as logger:
            logger.log_error("Code sync failed", context="rsync exited 23")

        assert logger.has_errors
        content = read_log(logger)
        assert "Context: rsync exited 23" in content
        assert "Status: FAILED" in content

    def test_context_manager_records_exception(self, tmp_path):
        with pytest.raises(RuntimeError):
            with DeployLogger("cli", "backup", log_dir=tmp_path, quiet=True) as logger:
                raise RuntimeError("boom")

        content = read_log(logger)
        assert "boom" in content
        assert "Context: RuntimeError" in content
        assert logger.log_file is None

    def test_warning_and_step_reach_the_file(self, tmp_path):
        with DeployLogger("cli", "pre-check", log_dir=tmp_path, quiet=True) as logger:
            logger.step("Checking production connectivity")
            logger.warning("Production disk is 95% full")

        content = read_log(logger)
        assert "[INFO] Step: Checking production connectivity" in content
        assert "[WARNING] Production disk is 95% full" in content
