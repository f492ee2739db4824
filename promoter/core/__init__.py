"""
Promoter Core

Configuration loading shared by the CLI and the HTTP API.
"""

from .config_loader import (
    ConfigLoader,
    CredentialsProvider,
    EnvCredentialsProvider,
    get_config_loader,
)

__all__ = [
    "ConfigLoader",
    "CredentialsProvider",
    "EnvCredentialsProvider",
    "get_config_loader",
]
