"""Remote execution: commands over SSH, file uploads, and rsync mirrors."""

import re
import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence, Union

from promoter.constants import RSYNC_BASE_FLAGS
from promoter.exceptions import SSHError
from promoter.logger import DeployLogger
from promoter.models.results import RemoteResult
from promoter.models.ssh import SSHConnection

SECRET_PATTERN = re.compile(r"(MYSQL_PWD=)(\S+)")


def redact(command: str) -> str:
    """Hide inline database passwords before a command is logged."""
    return SECRET_PATTERN.sub(r"\1****", command)


class RemoteExecutor(ABC):
    """
    Capability interface for talking to the production host.

    Implementations return a RemoteResult for every command that ran,
    whatever its exit code, and raise SSHError only when the transport
    itself could not run (missing binary, caller-imposed timeout).
    """

    @property
    @abstractmethod
    def host(self) -> str:
        """Host this executor targets."""

    @abstractmethod
    def run(self, command: str, timeout: Optional[float] = None) -> RemoteResult:
        """Run a shell command on the remote host."""

    @abstractmethod
    def upload(
        self,
        local_path: Union[str, Path],
        remote_path: str,
        timeout: Optional[float] = None,
    ) -> RemoteResult:
        """Copy one local file to the remote host."""

    @abstractmethod
    def mirror(
        self,
        source: Union[str, Path],
        destination: str,
        excludes: Sequence[str] = (),
        dry_run: bool = False,
        timeout: Optional[float] = None,
    ) -> RemoteResult:
        """Delta-transfer a local directory tree onto a remote directory."""


class SSHExecutor(RemoteExecutor):
    """RemoteExecutor over the ssh, scp and rsync command-line tools."""

    def __init__(
        self,
        connection: SSHConnection,
        default_timeout: Optional[float] = None,
        logger: Optional[DeployLogger] = None,
    ):
        """
        Initialize SSH executor.

        Args:
            connection: Target host, user and SSH options
            default_timeout: Per-call timeout in seconds when the caller
                passes none; None means no limit
            logger: Optional logger for commands and their output
        """
        self.connection = connection
        self.default_timeout = default_timeout
        self.logger = logger

    @property
    def host(self) -> str:
        return self.connection.host

    def run(self, command: str, timeout: Optional[float] = None) -> RemoteResult:
        """
        Execute command on remote host via SSH.

        Args:
            command: Command to execute
            timeout: Command timeout in seconds

        Returns:
            RemoteResult with execution details
        """
        return self._execute(self.connection.build_command(command), command, timeout)

    def upload(
        self,
        local_path: Union[str, Path],
        remote_path: str,
        timeout: Optional[float] = None,
    ) -> RemoteResult:
        argv = self.connection.scp_command_prefix + [
            str(local_path),
            self.connection.remote_target(remote_path),
        ]
        return self._execute(argv, f"scp {local_path} -> {remote_path}", timeout)

    def mirror(
        self,
        source: Union[str, Path],
        destination: str,
        excludes: Sequence[str] = (),
        dry_run: bool = False,
        timeout: Optional[float] = None,
    ) -> RemoteResult:
        argv = self.build_rsync_command(source, destination, excludes, dry_run)
        return self._execute(argv, " ".join(argv), timeout)

    def build_rsync_command(
        self,
        source: Union[str, Path],
        destination: str,
        excludes: Sequence[str] = (),
        dry_run: bool = False,
    ) -> List[str]:
        """rsync argv; both paths get a trailing slash so contents are mirrored."""
        argv = ["rsync"] + RSYNC_BASE_FLAGS + ["--itemize-changes"]
        if dry_run:
            argv.append("--dry-run")
        for pattern in excludes:
            argv.extend(["--exclude", pattern])
        argv.extend(["-e", self.connection.rsync_remote_shell])
        argv.append(str(source).rstrip("/") + "/")
        argv.append(self.connection.remote_target(destination.rstrip("/") + "/"))
        return argv

    def _execute(
        self, argv: List[str], display: str, timeout: Optional[float]
    ) -> RemoteResult:
        if timeout is None:
            timeout = self.default_timeout

        display = redact(display)
        if self.logger:
            self.logger.log_command(display)

        start_time = time.time()
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            raise SSHError(
                f"Command timed out after {timeout}s",
                context=f"Host: {self.host}, Command: {display}",
            )
        except OSError as e:
            raise SSHError(
                f"Could not start {argv[0]}: {e}",
                context=f"Host: {self.host}, Command: {display}",
            )

        remote_result = RemoteResult(
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            host=self.host,
            command=display,
            duration_seconds=time.time() - start_time,
        )

        if self.logger:
            self.logger.log_output(remote_result.stdout, "stdout")
            self.logger.log_output(remote_result.stderr, "stderr")

        return remote_result
