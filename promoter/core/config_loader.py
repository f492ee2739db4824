"""
Deployment Configuration Loader

Builds a DeploymentConfig from, lowest precedence first:
  1. an optional YAML file (PROMOTER_CONFIG or ./promoter.yml)
  2. an optional .env file
  3. the process environment

Development database credentials come from a credentials provider and
are cached with the config after the first successful load. A load whose
credentials lookup failed is returned but not cached, so the next call
tries again.
"""

import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml
from dotenv import dotenv_values

from promoter.constants import (
    DEFAULT_BUILD_COMMAND,
    DEFAULT_CONFIG_FILE,
    DEFAULT_DB_HOST,
    DEFAULT_DB_PORT,
    DEFAULT_ENV_FILE,
    DEFAULT_INSTALL_COMMAND,
    DEFAULT_LOG_DIR,
    DEFAULT_REMOTE_TMP_DIR,
    DEFAULT_SERVICE_GROUP,
    DEFAULT_SSH_PORT,
)
from promoter.exceptions import ConfigurationError
from promoter.models.config import (
    DatabaseConfig,
    DeploymentConfig,
    DevelopmentConfig,
    ProductionConfig,
)
from promoter.models.ssh import SSHConfig


# YAML path -> environment variable name
YAML_KEYS: Dict[Tuple[str, ...], str] = {
    ("production", "host"): "PROD_HOST",
    ("production", "user"): "PROD_USER",
    ("production", "path"): "PROD_PATH",
    ("production", "database", "host"): "PROD_DB_HOST",
    ("production", "database", "port"): "PROD_DB_PORT",
    ("production", "database", "name"): "PROD_DB_NAME",
    ("production", "database", "user"): "PROD_DB_USER",
    ("production", "database", "password"): "PROD_DB_PASS",
    ("development", "path"): "DEV_PATH",
    ("development", "database", "host"): "DB_HOST",
    ("development", "database", "port"): "DB_PORT",
    ("development", "database", "name"): "DB_NAME",
    ("development", "database", "user"): "DB_USER",
    ("development", "database", "password"): "DB_PASSWORD",
    ("development", "database", "url"): "DEV_DATABASE_URL",
    ("ssh", "key"): "PROMOTER_SSH_KEY",
    ("ssh", "port"): "PROMOTER_SSH_PORT",
    ("ssh", "timeout"): "PROMOTER_SSH_TIMEOUT",
    ("remote", "tmp_dir"): "PROMOTER_REMOTE_TMP",
    ("remote", "service_group"): "PROMOTER_SERVICE_GROUP",
    ("remote", "install_command"): "PROMOTER_INSTALL_COMMAND",
    ("remote", "build_command"): "PROMOTER_BUILD_COMMAND",
    ("logging", "dir"): "PROMOTER_LOG_DIR",
    ("scripts_dir",): "PROMOTER_SCRIPTS_DIR",
    ("redis_url",): "PROMOTER_REDIS_URL",
}


class CredentialsProvider(ABC):
    """Source of development database credentials."""

    @abstractmethod
    def get_database_credentials(self) -> Optional[Dict[str, Any]]:
        """
        Return {host, port, database, username, password} or None.

        May raise; the loader treats any exception as a failed lookup.
        """


class EnvCredentialsProvider(CredentialsProvider):
    """Reads DB_* variables from the merged settings."""

    def __init__(self, values: Mapping[str, str]):
        self.values = values

    def get_database_credentials(self) -> Optional[Dict[str, Any]]:
        if not self.values.get("DB_NAME"):
            return None
        return {
            "host": self.values.get("DB_HOST") or DEFAULT_DB_HOST,
            "port": self.values.get("DB_PORT") or DEFAULT_DB_PORT,
            "database": self.values.get("DB_NAME"),
            "username": self.values.get("DB_USER", ""),
            "password": self.values.get("DB_PASSWORD", ""),
        }


def load_yaml_settings(path: Path) -> Dict[str, str]:
    """Flatten a promoter.yml file into environment-style keys."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid config file: {path}", context="Top level must be a mapping"
        )

    flat: Dict[str, str] = {}
    for keys, env_name in YAML_KEYS.items():
        node: Any = data
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                node = None
                break
            node = node[key]
        if node is not None:
            flat[env_name] = str(node)
    return flat


def _int(values: Mapping[str, str], key: str, default: int) -> int:
    raw = values.get(key)
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be an integer", context=f"Got: {raw!r}")


def _float(values: Mapping[str, str], key: str) -> Optional[float]:
    raw = values.get(key)
    if raw in (None, ""):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number", context=f"Got: {raw!r}")


class ConfigLoader:
    """Loads and caches the process-wide DeploymentConfig."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        config_file: Optional[Path] = None,
        env_file: Optional[Path] = None,
        credentials_provider: Optional[CredentialsProvider] = None,
    ):
        self.environ = dict(os.environ if environ is None else environ)
        self.config_file = config_file
        self.env_file = env_file
        self.credentials_provider = credentials_provider
        self.last_error: Optional[str] = None
        self._config: Optional[DeploymentConfig] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    def load(self) -> DeploymentConfig:
        """
        Return the cached config, building it on first call.

        Raises:
            ConfigurationError: If a setting is malformed
        """
        with self._lock:
            if self._config is not None:
                return self._config

            values = self._merged_settings()
            provider = self.credentials_provider or EnvCredentialsProvider(values)

            credentials: Optional[Dict[str, Any]] = None
            credentials_failed = False
            try:
                credentials = provider.get_database_credentials()
            except Exception as e:
                credentials_failed = True
                self.last_error = f"Failed to load database credentials: {e}"

            config = self._build(values, credentials)

            if not credentials_failed:
                self._config = config
                self.last_error = None
            return config

    def reset(self) -> None:
        """Drop the cached config (tests and reload)."""
        with self._lock:
            self._config = None

    def _merged_settings(self) -> Dict[str, str]:
        values: Dict[str, str] = {}

        config_file = self.config_file
        if config_file is None:
            configured = self.environ.get("PROMOTER_CONFIG")
            config_file = Path(configured) if configured else Path(DEFAULT_CONFIG_FILE)
            if not configured and not config_file.exists():
                config_file = None
        if config_file is not None:
            if not Path(config_file).exists():
                raise ConfigurationError(
                    f"Config file not found: {config_file}",
                    context="Check PROMOTER_CONFIG",
                )
            values.update(load_yaml_settings(Path(config_file)))

        env_file = self.env_file
        if env_file is None and Path(DEFAULT_ENV_FILE).exists():
            env_file = Path(DEFAULT_ENV_FILE)
        if env_file is not None and Path(env_file).exists():
            values.update(
                {k: v for k, v in dotenv_values(env_file).items() if v is not None}
            )

        values.update(self.environ)
        return values

    def _build(
        self, values: Mapping[str, str], credentials: Optional[Dict[str, Any]]
    ) -> DeploymentConfig:
        production = ProductionConfig(
            host=values.get("PROD_HOST") or None,
            ssh_user=values.get("PROD_USER") or None,
            remote_path=(values.get("PROD_PATH") or "").rstrip("/") or None,
            database=DatabaseConfig(
                host=values.get("PROD_DB_HOST") or DEFAULT_DB_HOST,
                port=_int(values, "PROD_DB_PORT", DEFAULT_DB_PORT),
                name=values.get("PROD_DB_NAME", ""),
                user=values.get("PROD_DB_USER", ""),
                password=values.get("PROD_DB_PASS", ""),
            ),
        )

        if credentials:
            dev_database = DatabaseConfig(
                host=credentials.get("host") or DEFAULT_DB_HOST,
                port=int(credentials.get("port") or DEFAULT_DB_PORT),
                name=credentials.get("database", ""),
                user=credentials.get("username", ""),
                password=credentials.get("password", ""),
                url=values.get("DEV_DATABASE_URL") or None,
            )
        else:
            dev_database = DatabaseConfig(
                host=values.get("DB_HOST") or DEFAULT_DB_HOST,
                port=_int(values, "DB_PORT", DEFAULT_DB_PORT),
                name=values.get("DB_NAME", ""),
                user=values.get("DB_USER", ""),
                password=values.get("DB_PASSWORD", ""),
                url=values.get("DEV_DATABASE_URL") or None,
            )

        development = DevelopmentConfig(
            local_path=(values.get("DEV_PATH") or "").rstrip("/") or None,
            database=dev_database,
        )

        return DeploymentConfig(
            production=production,
            development=development,
            ssh=SSHConfig(
                key_path=values.get("PROMOTER_SSH_KEY") or None,
                port=_int(values, "PROMOTER_SSH_PORT", DEFAULT_SSH_PORT),
            ),
            remote_tmp_dir=(
                values.get("PROMOTER_REMOTE_TMP") or DEFAULT_REMOTE_TMP_DIR
            ).rstrip("/")
            or "/",
            service_group=values.get("PROMOTER_SERVICE_GROUP") or DEFAULT_SERVICE_GROUP,
            install_command=values.get("PROMOTER_INSTALL_COMMAND")
            or DEFAULT_INSTALL_COMMAND,
            build_command=values.get("PROMOTER_BUILD_COMMAND") or DEFAULT_BUILD_COMMAND,
            command_timeout=_float(values, "PROMOTER_SSH_TIMEOUT"),
            scripts_dir=values.get("PROMOTER_SCRIPTS_DIR") or None,
            log_dir=values.get("PROMOTER_LOG_DIR") or DEFAULT_LOG_DIR,
            redis_url=values.get("PROMOTER_REDIS_URL") or None,
        )


_default_loader: Optional[ConfigLoader] = None


def get_config_loader() -> ConfigLoader:
    """Process-wide loader used by the CLI and API composition roots."""
    global _default_loader
    if _default_loader is None:
        _default_loader = ConfigLoader()
    return _default_loader
