"""
Sync Option Models

Flag sets that select what a sync or deployment touches.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class SyncOptions:
    """
    Which development entities to export, plus run-mode flags.

    Users are opt-in and never carry password hashes; backups are on and
    dry runs off unless the caller says otherwise.
    """

    include_properties: bool = True
    include_blog: bool = True
    include_news: bool = True
    include_market_reports: bool = True
    include_email_templates: bool = True
    include_users: bool = False
    include_files: bool = True
    backup_first: bool = True
    dry_run: bool = False

    def includes(self, option: str) -> bool:
        """Check an include_* flag by name."""
        return bool(getattr(self, option))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FileSyncOptions:
    """Options for a code/uploads mirror."""

    include_uploads: bool = True
    dry_run: bool = False
