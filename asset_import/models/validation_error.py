from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

"""ValidationError model for import error reporting.

A ValidationError is data, not an exception: the pipeline captures every
row-level failure as one of these and keeps going. Row 0 is reserved for
session-level summary entries that are not tied to a spreadsheet row.
"""

__all__ = [
    "Severity",
    "ErrorKind",
    "ValidationError",
    "SUMMARY_ROW",
]

SUMMARY_ROW = 0


class Severity(Enum):
    """CRITICAL rows are rejected; INFO entries are informational only."""
    CRITICAL = "CRITICAL"
    INFO = "INFO"


class ErrorKind(Enum):
    """Classification of a reported error (UPPER_SNAKE)."""
    MISSING_ID = "MISSING_ID"
    KEY_FIELD_MISMATCH = "KEY_FIELD_MISMATCH"
    FIELD_VALIDATION = "FIELD_VALIDATION"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    DUPLICATE_SUMMARY = "DUPLICATE_SUMMARY"


@dataclass(frozen=True)
class ValidationError:
    """One entry of the import error report.

    Attributes:
        row_number: 1-based Excel row number, 0 for summary entries
        field_names: offending field names, comma-joined in rule order
        message: aggregated localized message (one fragment per violation)
        severity: CRITICAL or INFO
        kind: error classification
        asset_id: asset ID of the row when known
        asset_name: asset name of the row when known
    """
    row_number: int
    field_names: str
    message: str
    severity: Severity
    kind: ErrorKind
    asset_id: str | None = None
    asset_name: str | None = None

    @property
    def is_critical(self) -> bool:
        return self.severity is Severity.CRITICAL

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the report's wire keys."""
        return {
            "excelRowNum": self.row_number,
            "errorFields": self.field_names,
            "errorMsg": self.message,
            "errorLevel": self.severity.value,
            "errorType": self.kind.value,
            "assetId": self.asset_id,
            "assetName": self.asset_name,
        }

    def to_json_line(self) -> str:
        # 保留中文原文 (ensure_ascii=False)
        return json.dumps(self.to_dict(), ensure_ascii=False)
