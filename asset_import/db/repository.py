from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from ..models.asset_types import AssetProfile
from ..models.import_row import ImportRow
from ..services.validators import to_date, to_int, to_number

"""Asset table access: existing-record index, table clearing and row mapping.

Field names in the pipeline are camelCase (reportUnit); the tables use
snake_case columns (report_unit). The mapping between the two is purely
mechanical.
"""

__all__ = [
    "IndexLoadError",
    "INTEGER_FIELDS",
    "DECIMAL_FIELDS",
    "CREATE_TIME_COLUMN",
    "camel_to_snake",
    "snake_to_camel",
    "load_existing_index",
    "clear_table",
    "build_insert_rows",
]

logger = logging.getLogger(__name__)

INTEGER_FIELDS = frozenset({"actualQuantity", "usedQuantity"})
DECIMAL_FIELDS = frozenset({"unitPrice", "amount"})
CREATE_TIME_COLUMN = "create_time"

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class IndexLoadError(Exception):
    """Raised when the existing records of a table cannot be loaded."""


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def load_existing_index(cursor: Any, table: str) -> dict[str, dict[str, Any]]:
    """Load every stored record of the table into an id -> record map.

    Record keys are camelCase field names. IDs are trimmed text.
    """
    try:
        cursor.execute(f'SELECT * FROM "{table}"')
        names = [snake_to_camel(d[0]) for d in cursor.description]
        fetched = cursor.fetchall()
    except Exception as e:
        raise IndexLoadError(f"failed loading existing records of '{table}': {e}") from e

    index: dict[str, dict[str, Any]] = {}
    for raw in fetched:
        record = dict(zip(names, raw))
        asset_id = record.get("id")
        if asset_id is None:
            continue
        index[str(asset_id).strip()] = record
    logger.info("loaded %d existing records from %s", len(index), table)
    return index


def clear_table(cursor: Any, table: str) -> int:
    """Delete every row of the table; returns the number of deleted rows."""
    cursor.execute(f'DELETE FROM "{table}"')
    deleted = cursor.rowcount if isinstance(cursor.rowcount, int) else 0
    logger.info("cleared %s (%d rows)", table, max(deleted, 0))
    return max(deleted, 0)


def _db_value(field: str, row: ImportRow, profile: AssetProfile) -> Any:
    if field == "id":
        return row.asset_id
    value = row.get(field)
    if field in INTEGER_FIELDS:
        return to_int(value)
    if field in DECIMAL_FIELDS:
        return to_number(value)
    if field == profile.date_field:
        return to_date(value)
    return value


def build_insert_rows(
    rows: Sequence[ImportRow], profile: AssetProfile, create_time: datetime
) -> tuple[list[str], list[tuple[Any, ...]]]:
    """Map validated rows to (columns, value tuples) for batch_insert.

    Only columns known to the profile are written, plus create_time.
    """
    fields = profile.fields
    columns = [camel_to_snake(f) for f in fields] + [CREATE_TIME_COLUMN]
    values = [
        tuple(_db_value(f, row, profile) for f in fields) + (create_time,)
        for row in rows
    ]
    return columns, values
