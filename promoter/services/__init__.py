"""
Promoter Services Layer

Pipeline stages, orchestration and deployment tracking.
"""

from .remote_executor import RemoteExecutor, SSHExecutor
from .connection_probe import ConnectionProbe
from .backup_service import BackupService
from .data_exporter import DataExporter, create_development_engine
from .data_importer import DataImporter
from .file_sync import FileSyncEngine
from .history_store import (
    DeploymentHistoryStore,
    DeploymentStore,
    InMemoryDeploymentStore,
    RedisDeploymentStore,
    build_deployment_store,
)
from .orchestrator import DeploymentOrchestrator, build_orchestrator
from .lifecycle import DeploymentLifecycleTracker

__all__ = [
    "RemoteExecutor",
    "SSHExecutor",
    "ConnectionProbe",
    "BackupService",
    "DataExporter",
    "create_development_engine",
    "DataImporter",
    "FileSyncEngine",
    "DeploymentHistoryStore",
    "DeploymentStore",
    "InMemoryDeploymentStore",
    "RedisDeploymentStore",
    "build_deployment_store",
    "DeploymentOrchestrator",
    "build_orchestrator",
    "DeploymentLifecycleTracker",
]
