"""
Deployment Configuration Models

Immutable description of the development and production environments.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy.engine import URL

from promoter.constants import (
    DEFAULT_BUILD_COMMAND,
    DEFAULT_DB_HOST,
    DEFAULT_DB_PORT,
    DEFAULT_INSTALL_COMMAND,
    DEFAULT_LOG_DIR,
    DEFAULT_REMOTE_TMP_DIR,
    DEFAULT_SERVICE_GROUP,
)
from promoter.models.ssh import SSHConfig, SSHConnection


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for one MySQL-compatible database."""

    host: str = DEFAULT_DB_HOST
    port: int = DEFAULT_DB_PORT
    name: str = ""
    user: str = ""
    password: str = field(default="", repr=False)
    url: Optional[str] = field(default=None, repr=False)

    @property
    def has_credentials(self) -> bool:
        return bool(self.name and self.user and self.password)

    def sqlalchemy_url(self):
        """SQLAlchemy URL; an explicit url wins over the discrete fields."""
        if self.url:
            return self.url
        return URL.create(
            "mysql+pymysql",
            username=self.user or None,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.name or None,
        )


@dataclass(frozen=True)
class ProductionConfig:
    """Remote production host."""

    host: Optional[str] = None
    ssh_user: Optional[str] = None
    remote_path: Optional[str] = None
    database: DatabaseConfig = DatabaseConfig()

    @property
    def has_ssh_target(self) -> bool:
        return bool(self.host and self.ssh_user)

    @property
    def is_configured(self) -> bool:
        """Host, user, path and database credentials are all present."""
        return bool(
            self.has_ssh_target and self.remote_path and self.database.has_credentials
        )


@dataclass(frozen=True)
class DevelopmentConfig:
    """Local development tree and database."""

    local_path: Optional[str] = None
    database: DatabaseConfig = DatabaseConfig()

    @property
    def local_path_expanded(self) -> Optional[Path]:
        if self.local_path:
            return Path(self.local_path).expanduser()
        return None


@dataclass(frozen=True)
class DeploymentConfig:
    """Both environments plus transport and remote-layout settings."""

    production: ProductionConfig = ProductionConfig()
    development: DevelopmentConfig = DevelopmentConfig()
    ssh: SSHConfig = SSHConfig()
    remote_tmp_dir: str = DEFAULT_REMOTE_TMP_DIR
    service_group: str = DEFAULT_SERVICE_GROUP
    install_command: str = DEFAULT_INSTALL_COMMAND
    build_command: str = DEFAULT_BUILD_COMMAND
    command_timeout: Optional[float] = None
    scripts_dir: Optional[str] = None
    log_dir: str = DEFAULT_LOG_DIR
    redis_url: Optional[str] = None

    def connection(self) -> SSHConnection:
        """SSH connection to production (host/user may be empty)."""
        return SSHConnection(
            host=self.production.host or "",
            user=self.production.ssh_user or "",
            config=self.ssh,
        )

    def to_summary(self) -> Dict[str, Any]:
        """Non-secret view for status and config endpoints."""
        return {
            "production": {
                "host": self.production.host,
                "path": self.production.remote_path,
                "configured": self.production.is_configured,
            },
            "development": {
                "path": self.development.local_path,
                "database": self.development.database.name,
            },
        }

    def __repr__(self) -> str:
        return (
            f"DeploymentConfig(production={self.production.host}, "
            f"development={self.development.local_path})"
        )
