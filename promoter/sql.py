"""
SQL Script Builder

Renders literal MySQL statements for the production import script.

Quoting contract:
- strings are single-quoted with every embedded ' doubled
  (backslashes are doubled too, since MySQL treats them as escapes);
- None renders as the bare token NULL, never '' or 'null';
- booleans render as 1/0 and numbers verbatim;
- dates and datetimes render as quoted ISO text;
- dicts and lists are JSON-encoded, then quoted like strings.
"""

import json
import math
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, List, Mapping


NULL = "NULL"


def quote_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "''")
    return f"'{escaped}'"


def quote_identifier(name: str) -> str:
    """Backtick-quote a table or column name."""
    return "`" + name.replace("`", "``") + "`"


def quote_literal(value: Any) -> str:
    """Render a Python value as a MySQL literal."""
    if value is None:
        return NULL
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return NULL
        return repr(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return quote_string(value.isoformat(sep=" "))
    if isinstance(value, (date, time)):
        return quote_string(value.isoformat())
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "X'" + bytes(value).hex() + "'"
    if isinstance(value, (dict, list, tuple)):
        return quote_string(json.dumps(value, default=str))
    return quote_string(str(value))


class SqlScript:
    """Ordered list of statements rendered as one script."""

    def __init__(self):
        self._lines: List[str] = []
        self.statements = 0

    def comment(self, text: str) -> None:
        self._lines.append(f"-- {text}")

    def statement(self, sql: str) -> None:
        self._lines.append(sql.rstrip(";") + ";")
        self.statements += 1

    def truncate(self, table: str) -> None:
        self.statement(f"TRUNCATE TABLE {quote_identifier(table)}")

    def insert(self, table: str, row: Mapping[str, Any]) -> None:
        self.statement(self._insert_sql(table, row))

    def upsert(self, table: str, row: Mapping[str, Any], key: str = "id") -> None:
        """Insert, or update every non-key column when the key already exists."""
        updates = [
            f"{quote_identifier(column)} = VALUES({quote_identifier(column)})"
            for column in row
            if column != key
        ]
        if not updates:
            self.statement(self._insert_sql(table, row).replace("INSERT", "INSERT IGNORE", 1))
            return
        self.statement(
            f"{self._insert_sql(table, row)} ON DUPLICATE KEY UPDATE {', '.join(updates)}"
        )

    def render(self) -> str:
        return "\n".join(self._lines) + "\n"

    @staticmethod
    def _insert_sql(table: str, row: Mapping[str, Any]) -> str:
        columns = ", ".join(quote_identifier(column) for column in row)
        values = ", ".join(quote_literal(value) for value in row.values())
        return f"INSERT INTO {quote_identifier(table)} ({columns}) VALUES ({values})"

    def __len__(self) -> int:
        return self.statements
