"""Direct pipeline operations, run synchronously per request."""

from typing import Optional

from fastapi import APIRouter, Depends

from promoter.api.dependencies import get_orchestrator, get_tracker
from promoter.api.schemas import (
    ApiResponse,
    DeployRequest,
    SyncDatabaseRequest,
    SyncFilesRequest,
)
from promoter.models.results import DeploymentResult
from promoter.services.lifecycle import DeploymentLifecycleTracker
from promoter.services.orchestrator import DeploymentOrchestrator

router = APIRouter(tags=["deployment"])


def _result_response(result: DeploymentResult) -> ApiResponse:
    data = result.to_dict()
    return ApiResponse(
        success=result.success,
        message=result.message,
        data={key: data[key] for key in ("details", "errors", "duration", "timestamp")},
    )


@router.get("/status", response_model=ApiResponse)
def system_status(tracker: DeploymentLifecycleTracker = Depends(get_tracker)):
    """Production reachability, configuration and history summary."""
    return ApiResponse(
        success=True,
        message="System status retrieved successfully",
        data=tracker.get_system_status(),
    )


@router.post("/test-connection", response_model=ApiResponse)
def test_connection(orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)):
    check = orchestrator.test_connection()
    return ApiResponse(
        success=check.success,
        message=check.message,
        data={"connected": check.success},
    )


@router.post("/backup", response_model=ApiResponse)
def create_backup(orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)):
    backup = orchestrator.create_backup()
    return ApiResponse(
        success=backup.success,
        message=backup.message,
        data={"backupFile": backup.backup_file} if backup.success else None,
    )


@router.post("/sync-database", response_model=ApiResponse)
def sync_database(
    request: Optional[SyncDatabaseRequest] = None,
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
):
    options = (request or SyncDatabaseRequest()).to_options()
    return _result_response(orchestrator.sync_database(options))


@router.post("/sync-files", response_model=ApiResponse)
def sync_files(
    request: Optional[SyncFilesRequest] = None,
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
):
    options = (request or SyncFilesRequest()).to_options()
    return _result_response(orchestrator.sync_files(options))


@router.post("/deploy", response_model=ApiResponse)
def deploy(
    request: Optional[DeployRequest] = None,
    orchestrator: DeploymentOrchestrator = Depends(get_orchestrator),
):
    """Untracked full deployment; /api/production-deployment/deploy is the tracked one."""
    options = (request or DeployRequest()).to_options()
    return _result_response(orchestrator.full_deployment(options))


@router.get("/history", response_model=ApiResponse)
def history(orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)):
    return ApiResponse(
        success=True,
        message="Deployment history retrieved successfully",
        data={"deployments": [result.to_dict() for result in orchestrator.history.all()]},
    )


@router.get("/config", response_model=ApiResponse)
def deployment_config(orchestrator: DeploymentOrchestrator = Depends(get_orchestrator)):
    summary = orchestrator.config.to_summary()
    summary["features"] = {
        "databaseSync": True,
        "fileSync": True,
        "backupSupport": True,
        "dryRunMode": True,
        "historyTracking": True,
    }
    return ApiResponse(
        success=True,
        message="Deployment configuration retrieved successfully",
        data=summary,
    )
