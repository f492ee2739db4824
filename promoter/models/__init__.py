"""
Promoter Domain Models

Clean dataclass-based models for type-safe data handling.
"""

from .results import (
    RemoteResult,
    ConnectionCheck,
    BackupResult,
    ExportSnapshot,
    ImportReport,
    DeploymentResult,
    ResultBuilder,
)
from .config import (
    DatabaseConfig,
    ProductionConfig,
    DevelopmentConfig,
    DeploymentConfig,
)
from .options import (
    SyncOptions,
    FileSyncOptions,
)
from .deployment import (
    DeploymentStatus,
    StepStatus,
    PipelineStage,
    DeploymentStep,
    DeploymentRecord,
    CancelOutcome,
    DeploymentStats,
    PreflightReport,
)
from .ssh import (
    SSHConfig,
    SSHConnection,
)

__all__ = [
    # Results
    "RemoteResult",
    "ConnectionCheck",
    "BackupResult",
    "ExportSnapshot",
    "ImportReport",
    "DeploymentResult",
    "ResultBuilder",
    # Config
    "DatabaseConfig",
    "ProductionConfig",
    "DevelopmentConfig",
    "DeploymentConfig",
    # Options
    "SyncOptions",
    "FileSyncOptions",
    # Deployment
    "DeploymentStatus",
    "StepStatus",
    "PipelineStage",
    "DeploymentStep",
    "DeploymentRecord",
    "CancelOutcome",
    "DeploymentStats",
    "PreflightReport",
    # SSH
    "SSHConfig",
    "SSHConnection",
]
