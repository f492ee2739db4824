"""Tracked production deployments (single-flight, background)."""

from typing import Optional

from fastapi import APIRouter, Depends

from promoter.api.dependencies import get_operator, get_tracker
from promoter.api.schemas import ApiResponse, DeployRequest
from promoter.constants import MSG_NONE_RUNNING
from promoter.exceptions import DeploymentNotFoundError
from promoter.services.lifecycle import DeploymentLifecycleTracker

router = APIRouter(tags=["production-deployment"])


@router.post("/deploy", response_model=ApiResponse, status_code=201)
def start_deployment(
    request: Optional[DeployRequest] = None,
    operator: str = Depends(get_operator),
    tracker: DeploymentLifecycleTracker = Depends(get_tracker),
):
    """Start a deployment; ConflictError (409) while another one runs."""
    options = (request or DeployRequest()).to_options()
    record = tracker.start_deployment(operator, options)
    return ApiResponse(
        success=True,
        message="Production deployment started successfully",
        data=record.to_dict(),
    )


@router.get("/status/{deployment_id}", response_model=ApiResponse)
def deployment_status(
    deployment_id: str, tracker: DeploymentLifecycleTracker = Depends(get_tracker)
):
    record = tracker.get_deployment(deployment_id)
    if record is None:
        raise DeploymentNotFoundError(deployment_id)
    return ApiResponse(success=True, message="Deployment found", data=record.to_dict())


@router.get("/history", response_model=ApiResponse)
def deployment_history(tracker: DeploymentLifecycleTracker = Depends(get_tracker)):
    records = list(reversed(tracker.get_all_deployments()))
    return ApiResponse(
        success=True,
        message=f"{len(records)} deployments",
        data=[record.to_dict() for record in records],
    )


@router.get("/current", response_model=ApiResponse)
def current_deployment(tracker: DeploymentLifecycleTracker = Depends(get_tracker)):
    record = tracker.get_current_deployment()
    if record is None:
        return ApiResponse(success=True, message=MSG_NONE_RUNNING, data=None)
    return ApiResponse(
        success=True, message="Deployment in progress", data=record.to_dict()
    )


@router.get("/stats", response_model=ApiResponse)
def deployment_stats(tracker: DeploymentLifecycleTracker = Depends(get_tracker)):
    return ApiResponse(
        success=True,
        message="Deployment statistics retrieved",
        data=tracker.get_stats().to_dict(),
    )


@router.get("/pre-check", response_model=ApiResponse)
def pre_check(tracker: DeploymentLifecycleTracker = Depends(get_tracker)):
    report = tracker.pre_check()
    return ApiResponse(
        success=True,
        message=(
            "All pre-deployment checks passed"
            if report.all_passed
            else "Some checks failed or have warnings"
        ),
        data=report.to_dict(),
    )


@router.delete("/cancel/{deployment_id}", response_model=ApiResponse)
def cancel_deployment(
    deployment_id: str, tracker: DeploymentLifecycleTracker = Depends(get_tracker)
):
    outcome = tracker.cancel_deployment(deployment_id)
    return ApiResponse(
        success=outcome.cancelled,
        message=outcome.message,
        data={"cancelled": outcome.cancelled, "note": outcome.note},
    )
