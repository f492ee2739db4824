"""FastAPI application for Promoter."""

from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from promoter import __version__
from promoter.exceptions import (
    ConflictError,
    DeploymentNotFoundError,
    InvalidStateError,
    PromoterError,
)
from promoter.services.lifecycle import DeploymentLifecycleTracker
from promoter.services.orchestrator import DeploymentOrchestrator

ERROR_STATUS = {
    ConflictError: 409,
    DeploymentNotFoundError: 404,
    InvalidStateError: 400,
}


def _error_response(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if error:
        body["error"] = error
    return JSONResponse(status_code=status_code, content=body)


def create_app(
    tracker: Optional[DeploymentLifecycleTracker] = None,
    orchestrator: Optional[DeploymentOrchestrator] = None,
) -> FastAPI:
    """
    Build the API.

    Without arguments the orchestrator and tracker are wired from the
    environment on the first request that needs them.
    """
    app = FastAPI(
        title="Promoter",
        description="Development to production promotion pipeline",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if tracker is not None and orchestrator is None:
        orchestrator = tracker.orchestrator
    app.state.orchestrator = orchestrator
    app.state.tracker = tracker
    app.state.logger = None

    @app.exception_handler(PromoterError)
    async def promoter_error_handler(request: Request, exc: PromoterError):
        status_code = ERROR_STATUS.get(type(exc), 500)
        return _error_response(status_code, exc.message, exc.context)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    from promoter.api.routes import deployment, production

    app.include_router(deployment.router, prefix="/api/deployment")
    app.include_router(production.router, prefix="/api/production-deployment")

    @app.get("/")
    def root():
        """Health check."""
        return {"status": "ok", "service": "promoter"}

    @app.on_event("shutdown")
    def shutdown_event():
        if app.state.tracker is not None:
            app.state.tracker.shutdown(wait=False)
        if app.state.logger is not None:
            app.state.logger.close()

    return app


def start_server(port: int = 8401, host: str = "127.0.0.1"):
    """Start the API server."""
    uvicorn.run(create_app(), host=host, port=port, log_level="info")
