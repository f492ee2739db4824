"""Tests for tracked, single-flight deployments."""

import threading

import fakeredis
import pytest

from promoter.constants import MSG_CANCEL_UNSUPPORTED
from promoter.exceptions import ConflictError, DeploymentNotFoundError, InvalidStateError
from promoter.models.deployment import (
    DeploymentStatus,
    PipelineStage,
    PreflightReport,
    StepStatus,
)
from promoter.models.options import SyncOptions
from promoter.models.results import DeploymentResult
from promoter.services.history_store import RedisDeploymentStore
from promoter.services.lifecycle import DeploymentLifecycleTracker


class GatedOrchestrator:
    """Orchestrator double whose full_deployment blocks until released."""

    def __init__(self, success: bool = True, error: Exception = None):
        self.release = threading.Event()
        self.entered = threading.Event()
        self.success = success
        self.error = error
        self.calls = 0
        self.options = []

    def full_deployment(self, options=None, listener=None):
        self.calls += 1
        self.options.append(options)
        listener(PipelineStage.CONNECTIVITY, StepStatus.RUNNING)
        self.entered.set()
        self.release.wait(timeout=5)
        if self.error is not None:
            raise self.error
        listener(PipelineStage.CONNECTIVITY, StepStatus.COMPLETED)
        return DeploymentResult(
            success=self.success,
            message="done" if self.success else "Deployment completed with errors",
        )

    def pre_deployment_checks(self):
        return PreflightReport(checks={"productionConnection": "ok"})

    def get_system_status(self):
        return {"production": {"connected": True}}


@pytest.fixture
def gated():
    return GatedOrchestrator()


@pytest.fixture
def tracker(gated):
    tracker = DeploymentLifecycleTracker(gated)
    yield tracker
    gated.release.set()
    tracker.shutdown()


class TestStartDeployment:
    def test_returns_running_record(self, tracker, gated):
        record = tracker.start_deployment("Ada (ada@example.com)")

        assert record.id.startswith("deploy_")
        assert record.status == DeploymentStatus.RUNNING
        assert record.triggered_by == "Ada (ada@example.com)"
        assert tracker.is_deployment_running()

    def test_conflict_while_running(self, tracker, gated):
        first = tracker.start_deployment("a")
        gated.entered.wait(timeout=5)

        with pytest.raises(ConflictError) as excinfo:
            tracker.start_deployment("b")
        assert excinfo.value.running_id == first.id

    def test_concurrent_starts_admit_exactly_one(self, tracker, gated):
        barrier = threading.Barrier(8)
        started, conflicts = [], []

        def attempt(index):
            barrier.wait()
            try:
                started.append(tracker.start_deployment(f"user {index}"))
            except ConflictError:
                conflicts.append(index)

        threads = [threading.Thread(target=attempt, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(started) == 1
        assert len(conflicts) == 7

    def test_finishes_with_result(self, tracker, gated):
        record = tracker.start_deployment("a", SyncOptions(dry_run=True))
        gated.release.set()

        finished = tracker.wait(record.id, timeout=5)

        assert finished.status == DeploymentStatus.SUCCESS
        assert finished.result.message == "done"
        assert finished.finished_at is not None
        assert finished.get_step(PipelineStage.CONNECTIVITY.value).status == StepStatus.COMPLETED
        assert finished.get_step(PipelineStage.FILES.value).status == StepStatus.SKIPPED
        assert gated.options[0].dry_run
        assert not tracker.is_deployment_running()

    def test_failed_result_marks_record_failed(self):
        gated = GatedOrchestrator(success=False)
        gated.release.set()
        tracker = DeploymentLifecycleTracker(gated)

        record = tracker.start_deployment("a")
        finished = tracker.wait(record.id, timeout=5)
        tracker.shutdown()

        assert finished.status == DeploymentStatus.FAILED

    def test_crash_marks_record_failed_and_frees_slot(self, capsys):
        gated = GatedOrchestrator(error=RuntimeError("disk on fire"))
        gated.release.set()
        tracker = DeploymentLifecycleTracker(gated)

        record = tracker.start_deployment("a")
        finished = tracker.wait(record.id, timeout=5)
        tracker.shutdown()

        assert finished.status == DeploymentStatus.FAILED
        assert "disk on fire" in finished.result.errors[0]
        assert not tracker.is_deployment_running()
        assert "RuntimeError('disk" in capsys.readouterr().err

    def test_next_deployment_after_finish(self, tracker, gated):
        gated.release.set()
        first = tracker.start_deployment("a")
        tracker.wait(first.id, timeout=5)

        second = tracker.start_deployment("b")

        assert second.id != first.id
        assert [record.id for record in tracker.get_all_deployments()][0] == first.id


class TestQueries:
    def test_current_deployment(self, tracker, gated):
        assert tracker.get_current_deployment() is None
        record = tracker.start_deployment("a")
        assert tracker.get_current_deployment().id == record.id

    def test_get_unknown(self, tracker):
        assert tracker.get_deployment("deploy_nope") is None

    def test_stats(self, tracker, gated):
        gated.release.set()
        record = tracker.start_deployment("a")
        tracker.wait(record.id, timeout=5)

        stats = tracker.get_stats()

        assert stats.total_deployments == 1
        assert stats.successful_deployments == 1
        assert stats.failed_deployments == 0
        assert stats.last_deployment is not None
        assert not stats.is_currently_deploying
        assert stats.to_dict()["totalDeployments"] == 1

    def test_pre_check_and_status_delegate(self, tracker):
        assert tracker.pre_check().all_passed
        status = tracker.get_system_status()
        assert status["isDeploying"] is False


class TestCancellation:
    def test_running_deployment_is_not_cancelled(self, tracker, gated):
        record = tracker.start_deployment("a")

        outcome = tracker.cancel_deployment(record.id)

        assert not outcome.cancelled
        assert outcome.message == MSG_CANCEL_UNSUPPORTED
        assert tracker.is_deployment_running()

    def test_finished_deployment(self, tracker, gated):
        gated.release.set()
        record = tracker.start_deployment("a")
        tracker.wait(record.id, timeout=5)

        with pytest.raises(InvalidStateError):
            tracker.cancel_deployment(record.id)

    def test_unknown_deployment(self, tracker):
        with pytest.raises(DeploymentNotFoundError):
            tracker.cancel_deployment("deploy_nope")


class TestRedisBackedTracker:
    def test_conflict_across_trackers_sharing_redis(self):
        client = fakeredis.FakeRedis(decode_responses=True)
        gated = GatedOrchestrator()
        first = DeploymentLifecycleTracker(gated, store=RedisDeploymentStore(client))
        second = DeploymentLifecycleTracker(GatedOrchestrator(), store=RedisDeploymentStore(client))

        try:
            record = first.start_deployment("a")
            with pytest.raises(ConflictError):
                second.start_deployment("b")

            gated.release.set()
            finished = first.wait(record.id, timeout=5)
            assert finished.status == DeploymentStatus.SUCCESS
            assert second.get_deployment(record.id).status == DeploymentStatus.SUCCESS
        finally:
            gated.release.set()
            first.shutdown()
            second.shutdown()
