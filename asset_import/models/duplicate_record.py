from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

"""DuplicateRecord model: one row skipped because it already exists."""

__all__ = [
    "DuplicateRecord",
    "DUPLICATE_TYPE_SYSTEM",
]

DUPLICATE_TYPE_SYSTEM = "系统已存在"


@dataclass(frozen=True)
class DuplicateRecord:
    """Diagnostic record for a system duplicate.

    duplicate_row_number is 0 when the match came from the database rather
    than from another row of the same file. The key-field values are the
    stored ones.
    """
    current_row_number: int
    duplicate_row_number: int
    asset_id: str
    duplicate_type: str
    report_unit: str | None
    asset_category: str | None
    asset_name: str | None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
