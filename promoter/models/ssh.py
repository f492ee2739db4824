"""
SSH Configuration Models

Dataclass models for SSH operations.
"""

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from promoter.constants import DEFAULT_SSH_PORT, SSH_CONNECTION_TIMEOUT


@dataclass(frozen=True)
class SSHConfig:
    """SSH settings shared by every connection to production."""

    key_path: Optional[str] = None
    port: int = DEFAULT_SSH_PORT
    connect_timeout: int = SSH_CONNECTION_TIMEOUT

    @property
    def key_path_expanded(self) -> Optional[Path]:
        """Get expanded key path (resolves ~)."""
        if self.key_path:
            return Path(self.key_path).expanduser()
        return None

    def options(self) -> List[str]:
        """Options shared by ssh, scp and rsync's remote shell."""
        opts = [
            "-o",
            "BatchMode=yes",
            "-o",
            f"ConnectTimeout={self.connect_timeout}",
            "-o",
            "StrictHostKeyChecking=accept-new",
            "-o",
            "LogLevel=ERROR",
        ]
        if self.key_path_expanded:
            opts = ["-i", str(self.key_path_expanded)] + opts
        return opts

    def __repr__(self) -> str:
        return f"SSHConfig(key={self.key_path}, port={self.port})"


@dataclass(frozen=True)
class SSHConnection:
    """SSH connection details for a specific host."""

    host: str
    user: str
    config: SSHConfig = SSHConfig()

    @property
    def connection_string(self) -> str:
        """Get SSH connection string (user@host)."""
        return f"{self.user}@{self.host}"

    @property
    def ssh_command_prefix(self) -> List[str]:
        """Get SSH command prefix for subprocess."""
        return (
            ["ssh", "-p", str(self.config.port)]
            + self.config.options()
            + [self.connection_string]
        )

    @property
    def scp_command_prefix(self) -> List[str]:
        """Get scp command prefix (scp takes the port as -P)."""
        return ["scp", "-P", str(self.config.port)] + self.config.options()

    @property
    def rsync_remote_shell(self) -> str:
        """Remote shell string for rsync's -e flag."""
        parts = ["ssh", "-p", str(self.config.port)] + self.config.options()
        return " ".join(shlex.quote(part) for part in parts)

    def remote_target(self, remote_path: str) -> str:
        """user@host:path for scp/rsync."""
        return f"{self.connection_string}:{remote_path}"

    def build_command(self, remote_command: str) -> List[str]:
        """Build full SSH command with remote command."""
        return self.ssh_command_prefix + [remote_command]

    def __repr__(self) -> str:
        return f"SSHConnection(host={self.host}, user={self.user})"
