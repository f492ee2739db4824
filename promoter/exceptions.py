"""
Promoter Exception Hierarchy

Clean exception hierarchy for consistent error handling across the
pipeline, the CLI and the HTTP API.
"""

from typing import Optional


class PromoterError(Exception):
    """Base exception for all Promoter errors."""

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(self.format_message())

    def format_message(self) -> str:
        """Format error message with optional context."""
        if self.context:
            return f"{self.message}\nContext: {self.context}"
        return self.message

    @property
    def summary(self) -> str:
        """Single-line form for result error lists."""
        if self.context:
            return f"{self.message}: {self.context}"
        return self.message


class ConfigurationError(PromoterError):
    """Raised when configuration is invalid or missing."""

    pass


class SSHError(PromoterError):
    """Raised when the remote transport itself could not run."""

    pass


class ConnectivityError(PromoterError):
    """Raised when the production host is unreachable or rejects us."""

    pass


class BackupError(PromoterError):
    """Raised when the production database dump fails."""

    pass


class ExportError(PromoterError):
    """Raised when reading from the development database fails."""

    pass


class DataImportError(PromoterError):
    """Raised when the generated SQL script cannot be applied remotely."""

    pass


class FileSyncError(PromoterError):
    """Raised when a transfer or the remote install/build fails."""

    pass


class ConflictError(PromoterError):
    """Raised when a deployment is requested while another one is running."""

    def __init__(self, running_id: Optional[str] = None):
        self.running_id = running_id
        message = "A deployment is already in progress. Please wait for it to complete."
        context = f"Running deployment: {running_id}" if running_id else None
        super().__init__(message, context)


class DeploymentNotFoundError(PromoterError):
    """Raised when a deployment id is unknown."""

    def __init__(self, deployment_id: str):
        self.deployment_id = deployment_id
        super().__init__(f"Deployment '{deployment_id}' not found")


class InvalidStateError(PromoterError):
    """Raised when a deployment record is asked for an illegal transition."""

    pass
