"""Development database export."""

from typing import Any, Dict, List, Optional

from sqlalchemy import MetaData, Table, create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from promoter.entities import EntitySpec, enabled_entities
from promoter.exceptions import ExportError
from promoter.logger import DeployLogger
from promoter.models.config import DatabaseConfig
from promoter.models.options import SyncOptions
from promoter.models.results import ExportSnapshot


def create_development_engine(database: DatabaseConfig) -> Engine:
    """Engine for the development database (connects lazily)."""
    return create_engine(database.sqlalchemy_url(), pool_pre_ping=True)


class DataExporter:
    """Reads full snapshots of the selected development tables."""

    def __init__(self, engine: Engine, logger: Optional[DeployLogger] = None):
        self.engine = engine
        self.logger = logger

    def export_development_data(self, options: SyncOptions) -> ExportSnapshot:
        """
        Read every row of each enabled entity, in registry order.

        Raises:
            ExportError: If any read fails
        """
        snapshot = ExportSnapshot()
        entities = enabled_entities(options)
        if not entities:
            return snapshot

        try:
            with self.engine.connect() as conn:
                for entity in entities:
                    rows = self._read_entity(conn, entity)
                    snapshot.data[entity.key] = rows
                    snapshot.total_records += len(rows)
                    if self.logger:
                        self.logger.log(f"Exported {len(rows)} rows from {entity.table}")
        except SQLAlchemyError as e:
            raise ExportError(
                "Failed to export development data",
                context=str(e).splitlines()[0] if str(e) else type(e).__name__,
            )

        return snapshot

    def _read_entity(self, conn, entity: EntitySpec) -> List[Dict[str, Any]]:
        table = Table(entity.table, MetaData(), autoload_with=conn)

        if entity.columns:
            # Restricted entities: only whitelisted columns that actually exist
            columns = [table.c[name] for name in entity.columns if name in table.c]
            if not columns:
                raise ExportError(
                    f"Table '{entity.table}' has none of the exportable columns",
                    context=", ".join(entity.columns),
                )
            statement = select(*columns)
        else:
            statement = select(table)

        primary_key = list(table.primary_key.columns)
        if primary_key:
            statement = statement.order_by(*primary_key)

        return [dict(row._mapping) for row in conn.execute(statement)]

    def ping(self) -> bool:
        """Check the development database answers SELECT 1."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            return False
