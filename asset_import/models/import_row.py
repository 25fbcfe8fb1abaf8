from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""ImportRow model for the asset Excel import pipeline.

ImportRow represents a single parsed spreadsheet row after header mapping.
"""

__all__ = [
    "ImportRow",
]


@dataclass(frozen=True)
class ImportRow:
    """Logical representation of one spreadsheet row after header mapping.

    The row_number is the 1-based Excel row number (the first data row under a
    title row and a header row is row 3). Values are keyed by field name
    (``reportUnit``, ``assetName`` ...) and keep the raw cell value; trimming
    and type conversion happen in the validators.
    """
    row_number: int
    values: dict[str, Any]

    def get(self, field: str) -> Any:
        return self.values.get(field)

    def text(self, field: str) -> str | None:
        """Return the trimmed text of a field, or None when blank."""
        value = self.values.get(field)
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @property
    def asset_id(self) -> str | None:
        """Trimmed asset ID, None when missing or blank."""
        return self.text("id")

    @property
    def asset_name(self) -> str | None:
        value = self.values.get("assetName")
        return None if value is None else str(value)
