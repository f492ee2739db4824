"""
Entity Registry

Maps SyncOptions flags to development tables, in export order.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from promoter.models.options import SyncOptions


REPLACE = "replace"
MERGE = "merge"


@dataclass(frozen=True)
class EntitySpec:
    """One exportable table."""

    key: str
    table: str
    option: str
    label: str
    columns: Optional[Tuple[str, ...]] = None
    strategy: str = REPLACE
    primary_key: str = "id"


# Only non-sensitive profile fields; password hashes never leave development.
USER_COLUMNS = (
    "id",
    "email",
    "role",
    "profile",
    "is_active",
    "created_at",
    "updated_at",
)

ENTITIES: Tuple[EntitySpec, ...] = (
    EntitySpec("properties", "properties", "include_properties", "Properties"),
    EntitySpec("blogPosts", "blog_posts", "include_blog", "Blog Posts"),
    EntitySpec("featuredNews", "featured_news", "include_news", "Featured News"),
    EntitySpec(
        "marketReports", "market_reports", "include_market_reports", "Market Reports"
    ),
    EntitySpec(
        "emailTemplates", "email_templates", "include_email_templates", "Email Templates"
    ),
    EntitySpec(
        "emailCampaigns", "email_campaigns", "include_email_templates", "Email Campaigns"
    ),
    EntitySpec(
        "users", "users", "include_users", "Users", columns=USER_COLUMNS, strategy=MERGE
    ),
)


def enabled_entities(options: SyncOptions) -> Tuple[EntitySpec, ...]:
    """Entities selected by the options, in export order."""
    return tuple(entity for entity in ENTITIES if options.includes(entity.option))


def get_entity(key: str) -> Optional[EntitySpec]:
    for entity in ENTITIES:
        if entity.key == key:
            return entity
    return None
