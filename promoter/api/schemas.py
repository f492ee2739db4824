"""Request and response models for the HTTP API."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from promoter.models.options import FileSyncOptions, SyncOptions


class CamelModel(BaseModel):
    """Accepts camelCase (wire) and snake_case (Python) field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(BaseModel):
    """Envelope for every endpoint."""

    success: bool
    message: str = ""
    data: Optional[Any] = None


class SyncDatabaseRequest(CamelModel):
    include_properties: bool = True
    include_blog: bool = True
    include_news: bool = True
    include_market_reports: bool = True
    include_email_templates: bool = True
    include_users: bool = False
    backup_first: bool = True
    dry_run: bool = False

    def to_options(self) -> SyncOptions:
        # Files are synced separately on this endpoint
        return SyncOptions(include_files=False, **self.model_dump())


class DeployRequest(SyncDatabaseRequest):
    include_files: bool = True

    def to_options(self) -> SyncOptions:
        return SyncOptions(**self.model_dump())


class SyncFilesRequest(CamelModel):
    include_uploads: bool = True
    dry_run: bool = False

    def to_options(self) -> FileSyncOptions:
        return FileSyncOptions(**self.model_dump())
