"""Production reachability probe."""

from typing import Optional

from promoter.constants import SSH_PROBE_COMMAND, SSH_PROBE_MARKER
from promoter.exceptions import ConnectivityError, SSHError
from promoter.logger import DeployLogger
from promoter.models.config import DeploymentConfig
from promoter.models.results import ConnectionCheck
from promoter.services.remote_executor import RemoteExecutor

# stderr fragments from OpenSSH, mapped to operator-facing reasons
SSH_FAILURE_HINTS = (
    ("REMOTE HOST IDENTIFICATION HAS CHANGED", "host key mismatch"),
    ("Host key verification failed", "host key verification failed"),
    ("Permission denied", "authentication failed"),
    ("Connection timed out", "connection timed out"),
    ("Operation timed out", "connection timed out"),
    ("Connection refused", "connection refused"),
    ("Could not resolve hostname", "unknown host"),
)


class ConnectionProbe:
    """Checks that production is reachable and accepts our key."""

    def __init__(
        self,
        config: DeploymentConfig,
        executor: RemoteExecutor,
        logger: Optional[DeployLogger] = None,
    ):
        self.config = config
        self.executor = executor
        self.logger = logger

    def test_connection(self) -> ConnectionCheck:
        """Run a trivial remote command. Never raises."""
        try:
            self._probe()
        except (ConnectivityError, SSHError) as e:
            return ConnectionCheck(success=False, message=f"Connection failed: {e.message}")

        return ConnectionCheck(
            success=True,
            message="Successfully connected to production server",
        )

    def _probe(self) -> None:
        production = self.config.production
        if not production.has_ssh_target:
            raise ConnectivityError(
                "production host not configured (set PROD_HOST and PROD_USER)"
            )

        result = self.executor.run(SSH_PROBE_COMMAND)
        if not (result.is_success and SSH_PROBE_MARKER in result.stdout):
            raise ConnectivityError(
                self._describe_failure(result.stderr, result.error_summary)
            )

        if self.logger:
            self.logger.log(f"Connected to {production.ssh_user}@{production.host}")

    @staticmethod
    def _describe_failure(stderr: str, fallback: str) -> str:
        for fragment, reason in SSH_FAILURE_HINTS:
            if fragment in stderr:
                return f"{reason} ({fallback})"
        return fallback
