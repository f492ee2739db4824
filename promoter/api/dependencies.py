"""FastAPI dependencies resolving the shared tracker and orchestrator."""

import threading
from typing import Optional

from fastapi import Header, HTTPException, Request

from promoter.core.config_loader import get_config_loader
from promoter.logger import DeployLogger
from promoter.services.history_store import build_deployment_store
from promoter.services.lifecycle import DeploymentLifecycleTracker
from promoter.services.orchestrator import DeploymentOrchestrator, build_orchestrator

_wiring_lock = threading.Lock()


def _ensure_wired(request: Request) -> None:
    """Build the orchestrator and tracker from config on first use."""
    state = request.app.state
    if state.tracker is not None:
        return

    with _wiring_lock:
        if state.tracker is not None:
            return
        if state.orchestrator is None:
            config = get_config_loader().load()
            logger = DeployLogger("api", "server", log_dir=config.log_dir, quiet=True)
            state.logger = logger
            state.orchestrator = build_orchestrator(config, logger=logger)
            state.tracker = DeploymentLifecycleTracker(
                state.orchestrator,
                store=build_deployment_store(config.redis_url),
                logger=logger,
            )
        else:
            state.tracker = DeploymentLifecycleTracker(state.orchestrator)


def get_orchestrator(request: Request) -> DeploymentOrchestrator:
    _ensure_wired(request)
    return request.app.state.orchestrator


def get_tracker(request: Request) -> DeploymentLifecycleTracker:
    _ensure_wired(request)
    return request.app.state.tracker


def get_operator(x_operator: Optional[str] = Header(None)) -> str:
    """Operator identity set by the authenticating proxy in front of the API."""
    if not x_operator or not x_operator.strip():
        raise HTTPException(status_code=401, detail="User not authenticated")
    return x_operator.strip()
