"""
Deployment Lifecycle Models

Records tracked by the lifecycle tracker, one per deployment invocation.
"""

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from promoter.constants import DEPLOYMENT_ID_PREFIX
from promoter.exceptions import InvalidStateError
from promoter.models.results import DeploymentResult


class DeploymentStatus(Enum):
    """Status of a tracked deployment."""

    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"


class StepStatus(Enum):
    """Status of one pipeline stage inside a deployment."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PipelineStage(Enum):
    """Fixed, ordered stages of a full deployment."""

    CONNECTIVITY = "Production Connectivity"
    BACKUP = "Production Backup"
    DATABASE = "Database Sync"
    FILES = "File Sync"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def generate_deployment_id() -> str:
    """Build an id like deploy_<millis>_<random>."""
    return f"{DEPLOYMENT_ID_PREFIX}{int(time.time() * 1000)}_{secrets.token_hex(5)}"


@dataclass
class DeploymentStep:
    """State of a single stage."""

    name: str
    status: StepStatus = StepStatus.PENDING
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentStep":
        return cls(
            name=data["name"],
            status=StepStatus(data.get("status", "pending")),
            started_at=_parse_time(data.get("startedAt")),
            finished_at=_parse_time(data.get("finishedAt")),
        )


@dataclass
class DeploymentRecord:
    """
    One deployment invocation.

    Starts RUNNING and moves exactly once to SUCCESS or FAILED.
    """

    id: str
    triggered_by: str
    status: DeploymentStatus = DeploymentStatus.RUNNING
    started_at: datetime = field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None
    result: Optional[DeploymentResult] = None
    steps: List[DeploymentStep] = field(
        default_factory=lambda: [DeploymentStep(stage.value) for stage in PipelineStage]
    )

    @classmethod
    def start(cls, triggered_by: str) -> "DeploymentRecord":
        return cls(id=generate_deployment_id(), triggered_by=triggered_by)

    @property
    def is_running(self) -> bool:
        return self.status == DeploymentStatus.RUNNING

    @property
    def duration_ms(self) -> Optional[int]:
        if self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    def get_step(self, name: str) -> Optional[DeploymentStep]:
        for step in self.steps:
            if step.name == name:
                return step
        return None

    def mark_step(self, stage: PipelineStage, status: StepStatus) -> None:
        """Update one stage's status and timing."""
        step = self.get_step(stage.value)
        if step is None:
            return
        now = _utcnow()
        if status == StepStatus.RUNNING:
            step.started_at = now
        elif status in (StepStatus.COMPLETED, StepStatus.FAILED, StepStatus.SKIPPED):
            step.finished_at = now
        step.status = status

    def finish(self, result: DeploymentResult) -> None:
        """Transition to SUCCESS/FAILED from the result. Only once."""
        if not self.is_running:
            raise InvalidStateError(
                f"Deployment '{self.id}' already finished",
                context=f"Status: {self.status.value}",
            )
        self.result = result
        self.finished_at = _utcnow()
        self.status = (
            DeploymentStatus.SUCCESS if result.success else DeploymentStatus.FAILED
        )
        for step in self.steps:
            if step.status == StepStatus.PENDING:
                step.status = StepStatus.SKIPPED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "status": self.status.value,
            "triggeredBy": self.triggered_by,
            "startedAt": self.started_at.isoformat(),
            "finishedAt": self.finished_at.isoformat() if self.finished_at else None,
            "duration": self.duration_ms,
            "steps": [step.to_dict() for step in self.steps],
            "result": self.result.to_dict() if self.result else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeploymentRecord":
        """Create from dictionary."""
        result = data.get("result")
        return cls(
            id=data["id"],
            triggered_by=data.get("triggeredBy", ""),
            status=DeploymentStatus(data.get("status", "running")),
            started_at=datetime.fromisoformat(data["startedAt"]),
            finished_at=_parse_time(data.get("finishedAt")),
            result=DeploymentResult.from_dict(result) if result else None,
            steps=[DeploymentStep.from_dict(step) for step in data.get("steps", [])],
        )

    def __repr__(self) -> str:
        return f"DeploymentRecord(id={self.id}, status={self.status.value}, by={self.triggered_by})"


@dataclass(frozen=True)
class CancelOutcome:
    """Answer to a cancellation request."""

    cancelled: bool
    message: str
    note: Optional[str] = None


@dataclass(frozen=True)
class DeploymentStats:
    """Aggregates over retained records."""

    total_deployments: int
    successful_deployments: int
    failed_deployments: int
    average_duration_ms: float
    last_deployment: Optional[datetime]
    is_currently_deploying: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalDeployments": self.total_deployments,
            "successfulDeployments": self.successful_deployments,
            "failedDeployments": self.failed_deployments,
            "averageDuration": self.average_duration_ms,
            "lastDeployment": (
                self.last_deployment.isoformat() if self.last_deployment else None
            ),
            "isCurrentlyDeploying": self.is_currently_deploying,
        }


@dataclass
class PreflightReport:
    """Result of pre-deployment checks."""

    checks: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def all_passed(self) -> bool:
        return len(self.errors) == 0

    def passed(self, name: str, value: str) -> None:
        self.checks[name] = value

    def failed(self, name: str, value: str, error: str) -> None:
        self.checks[name] = value
        self.errors.append(error)

    def warn(self, name: str, value: str, warning: str) -> None:
        self.checks[name] = value
        self.warnings.append(warning)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allPassed": self.all_passed,
            "checks": dict(self.checks),
            "warnings": list(self.warnings),
            "errors": list(self.errors),
        }
