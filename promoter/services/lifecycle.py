"""Tracked, single-flight deployments running on a background worker."""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.markup import escape

from promoter.constants import MSG_CANCEL_NOTE, MSG_CANCEL_UNSUPPORTED
from promoter.exceptions import (
    ConflictError,
    DeploymentNotFoundError,
    InvalidStateError,
)
from promoter.logger import DeployLogger
from promoter.models.deployment import (
    CancelOutcome,
    DeploymentRecord,
    DeploymentStats,
    DeploymentStatus,
    PipelineStage,
    PreflightReport,
    StepStatus,
)
from promoter.models.options import SyncOptions
from promoter.models.results import DeploymentResult
from promoter.services.history_store import DeploymentStore, InMemoryDeploymentStore
from promoter.services.orchestrator import DeploymentOrchestrator

error_console = Console(stderr=True)


class DeploymentLifecycleTracker:
    """
    Starts full deployments in the background and keeps their records.

    At most one deployment runs at a time; the store's try_start is the
    only gate. Running deployments cannot be cancelled.
    """

    def __init__(
        self,
        orchestrator: DeploymentOrchestrator,
        store: Optional[DeploymentStore] = None,
        max_workers: int = 1,
        logger: Optional[DeployLogger] = None,
    ):
        self.orchestrator = orchestrator
        self.store = store if store is not None else InMemoryDeploymentStore()
        self.logger = logger
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="promoter-deploy"
        )
        self._futures: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def start_deployment(
        self, triggered_by: str, options: Optional[SyncOptions] = None
    ) -> DeploymentRecord:
        """
        Claim the running slot and launch a full deployment.

        Returns:
            Snapshot of the record as it was when started

        Raises:
            ConflictError: If another deployment is running
        """
        record = DeploymentRecord.start(triggered_by)
        if not self.store.try_start(record):
            current = self.store.running()
            raise ConflictError(current.id if current else None)

        snapshot = DeploymentRecord.from_dict(record.to_dict())
        if self.logger:
            self.logger.log(f"Deployment {record.id} started by {triggered_by}")

        future = self._pool.submit(self._run, record, options or SyncOptions())
        with self._lock:
            self._futures[record.id] = future
        future.add_done_callback(lambda _: self._forget(record.id))
        return snapshot

    def _forget(self, deployment_id: str) -> None:
        with self._lock:
            self._futures.pop(deployment_id, None)

    def _run(self, record: DeploymentRecord, options: SyncOptions) -> DeploymentRecord:
        def on_stage(stage: PipelineStage, status: StepStatus) -> None:
            record.mark_step(stage, status)
            self.store.save(record)

        try:
            result = self.orchestrator.full_deployment(options, listener=on_stage)
        except Exception as e:
            # The future is never inspected; the record and stderr carry the crash
            if self.logger:
                self.logger.log_error(f"Deployment {record.id} crashed", context=repr(e))
            else:
                error_console.print(
                    f"[bold red]✗ Deployment {record.id} crashed:[/bold red] {escape(repr(e))}"
                )
            record.finish(
                DeploymentResult(
                    success=False,
                    message=f"Deployment failed: {e}",
                    errors=(f"❌ {type(e).__name__}: {e}",),
                )
            )
            self.store.finish(record)
            return record

        record.finish(result)
        self.store.finish(record)
        if self.logger:
            self.logger.log(f"Deployment {record.id} finished: {record.status.value}")
        return record

    def wait(self, deployment_id: str, timeout: Optional[float] = None) -> Optional[DeploymentRecord]:
        """Block until a started deployment finishes, then return its record."""
        with self._lock:
            future = self._futures.get(deployment_id)
        if future is not None:
            wait_futures([future], timeout=timeout)
        return self.store.get(deployment_id)

    def get_deployment(self, deployment_id: str) -> Optional[DeploymentRecord]:
        return self.store.get(deployment_id)

    def get_all_deployments(self) -> List[DeploymentRecord]:
        """Retained records, newest last."""
        return self.store.all()

    def is_deployment_running(self) -> bool:
        return self.store.is_running()

    def get_current_deployment(self) -> Optional[DeploymentRecord]:
        return self.store.running()

    def cancel_deployment(self, deployment_id: str) -> CancelOutcome:
        """
        Cancellation is always refused for running deployments.

        Raises:
            DeploymentNotFoundError: Unknown id
            InvalidStateError: Deployment already finished
        """
        record = self.store.get(deployment_id)
        if record is None:
            raise DeploymentNotFoundError(deployment_id)
        if not record.is_running:
            raise InvalidStateError(
                "Deployment is not currently running",
                context=f"Status: {record.status.value}",
            )
        return CancelOutcome(
            cancelled=False, message=MSG_CANCEL_UNSUPPORTED, note=MSG_CANCEL_NOTE
        )

    def get_stats(self) -> DeploymentStats:
        records = self.store.all()
        finished = [record for record in records if not record.is_running]
        durations = [
            record.duration_ms for record in finished if record.duration_ms is not None
        ]
        return DeploymentStats(
            total_deployments=len(records),
            successful_deployments=sum(
                1 for record in finished if record.status == DeploymentStatus.SUCCESS
            ),
            failed_deployments=sum(
                1 for record in finished if record.status == DeploymentStatus.FAILED
            ),
            average_duration_ms=sum(durations) / len(durations) if durations else 0.0,
            last_deployment=max((record.started_at for record in records), default=None),
            is_currently_deploying=any(record.is_running for record in records),
        )

    def pre_check(self) -> PreflightReport:
        return self.orchestrator.pre_deployment_checks()

    def get_system_status(self) -> Dict[str, Any]:
        status = self.orchestrator.get_system_status()
        status["isDeploying"] = self.is_deployment_running()
        return status

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)
