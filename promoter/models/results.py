"""
Result Models

Dataclass models for operation results and command outputs.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class RemoteResult:
    """Result of a remote command or transfer."""

    returncode: int
    stdout: str = ""
    stderr: str = ""
    host: str = ""
    command: str = ""
    duration_seconds: float = 0.0

    @property
    def is_success(self) -> bool:
        """Check if the command succeeded."""
        return self.returncode == 0

    @property
    def is_failure(self) -> bool:
        """Check if the command failed."""
        return self.returncode != 0

    @property
    def error_summary(self) -> str:
        """Last meaningful stderr line, falling back to stdout and exit code."""
        for stream in (self.stderr, self.stdout):
            lines = [line.strip() for line in stream.splitlines() if line.strip()]
            if lines:
                return lines[-1]
        return f"exit code {self.returncode}"

    def __repr__(self) -> str:
        return f"RemoteResult(host={self.host}, returncode={self.returncode}, duration={self.duration_seconds:.2f}s)"


@dataclass(frozen=True)
class ConnectionCheck:
    """Outcome of a production reachability probe."""

    success: bool
    message: str


@dataclass(frozen=True)
class BackupResult:
    """Outcome of a production database backup."""

    success: bool
    message: str
    backup_file: Optional[str] = None
    remote_path: Optional[str] = None


@dataclass
class ExportSnapshot:
    """Rows read from the development database, keyed by entity."""

    data: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    total_records: int = 0

    @property
    def counts(self) -> Dict[str, int]:
        """Row count per entity, in export order."""
        return {key: len(rows) for key, rows in self.data.items()}


@dataclass(frozen=True)
class ImportReport:
    """What the importer generated and where it ran."""

    script_path: str
    remote_path: str
    statements: int
    tables: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DeploymentResult:
    """
    Outcome of a sync or deployment run.

    Frozen with tuple fields: once returned it never changes.
    """

    success: bool
    message: str
    details: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    duration_ms: int = 0

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "message": self.message,
            "details": list(self.details),
            "errors": list(self.errors),
            "timestamp": self.timestamp.isoformat(),
            "duration": self.duration_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentResult":
        """Create from dictionary."""
        return cls(
            success=data.get("success", False),
            message=data.get("message", ""),
            details=tuple(data.get("details", [])),
            errors=tuple(data.get("errors", [])),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            duration_ms=data.get("duration", 0),
        )

    def __repr__(self) -> str:
        return f"DeploymentResult(success={self.success}, details={len(self.details)}, errors={len(self.errors)})"


class ResultBuilder:
    """Accumulates details and errors for a single run, then freezes them."""

    def __init__(self):
        self.timestamp = datetime.now(timezone.utc)
        self.details: List[str] = []
        self.errors: List[str] = []
        self._started = time.monotonic()

    def detail(self, message: str) -> None:
        self.details.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    def merge(self, result: DeploymentResult) -> None:
        """Append another result's details and errors in order."""
        self.details.extend(result.details)
        self.errors.extend(result.errors)

    def build(self, success: bool, message: str) -> DeploymentResult:
        return DeploymentResult(
            success=success,
            message=message,
            details=tuple(self.details),
            errors=tuple(self.errors),
            timestamp=self.timestamp,
            duration_ms=int((time.monotonic() - self._started) * 1000),
        )
