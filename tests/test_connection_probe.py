"""Tests for the production reachability probe."""

from dataclasses import replace

from promoter.exceptions import SSHError
from promoter.models.config import ProductionConfig
from promoter.services.connection_probe import ConnectionProbe


class TestConnectionProbe:
    def test_success(self, config, executor):
        check = ConnectionProbe(config, executor).test_connection()

        assert check.success
        assert check.message == "Successfully connected to production server"
        assert executor.commands == ["echo 'Connection successful'"]

    def test_authentication_failure(self, config, executor):
        executor.respond(
            "Connection successful",
            returncode=255,
            stderr="deploy@prod.example.com: Permission denied (publickey).",
        )

        check = ConnectionProbe(config, executor).test_connection()

        assert not check.success
        assert "authentication failed" in check.message

    def test_changed_host_key(self, config, executor):
        executor.respond(
            "Connection successful",
            returncode=255,
            stderr="@ WARNING: REMOTE HOST IDENTIFICATION HAS CHANGED! @\nHost key verification failed.",
        )

        check = ConnectionProbe(config, executor).test_connection()

        assert not check.success
        assert "host key mismatch" in check.message

    def test_transport_error_never_raises(self, config, executor):
        executor.fail_with("Connection successful", SSHError("Could not start ssh: not found"))

        check = ConnectionProbe(config, executor).test_connection()

        assert not check.success
        assert check.message == "Connection failed: Could not start ssh: not found"

    def test_unconfigured_host_issues_no_command(self, config, executor):
        config = replace(config, production=ProductionConfig())

        check = ConnectionProbe(config, executor).test_connection()

        assert not check.success
        assert "not configured" in check.message
        assert executor.calls == []
