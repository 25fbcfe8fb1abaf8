from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Result payload models returned to the presentation layer.

Shape of ImportResult.to_dict():

    {
      "success": true,
      "message": "软件资产导入完成，成功导入50条数据，存在2条错误",
      "data": {
        "totalRows": 52,
        "successCount": 50,
        "errorCount": 2,
        "importSummary": {"totalProcessed": 52, "successfullyImported": 50, "criticalErrors": 2},
        "errorDetails": [...],
        "successRecords": [...]
      }
    }
"""


@dataclass(frozen=True)
class SuccessRecord:
    """Identifying fields of one imported row."""
    excel_row_num: int
    asset_id: str | None
    asset_name: str | None
    report_unit: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "excelRowNum": self.excel_row_num,
            "assetId": self.asset_id,
            "assetName": self.asset_name,
            "reportUnit": self.report_unit,
        }


@dataclass(frozen=True)
class ImportSummary:
    total_processed: int
    successfully_imported: int
    critical_errors: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProcessed": self.total_processed,
            "successfullyImported": self.successfully_imported,
            "criticalErrors": self.critical_errors,
        }


@dataclass(frozen=True)
class ImportData:
    """Counts and details of a completed import.

    total_rows = success_count + error_count; system duplicates are not part
    of the batch accounting. success_records may be truncated, success_count
    never is.
    """
    total_rows: int
    success_count: int
    error_count: int
    import_summary: ImportSummary
    error_details: list[dict[str, Any]] = field(default_factory=list)
    success_records: list[SuccessRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRows": self.total_rows,
            "successCount": self.success_count,
            "errorCount": self.error_count,
            "importSummary": self.import_summary.to_dict(),
            "errorDetails": list(self.error_details),
            "successRecords": [r.to_dict() for r in self.success_records],
        }


@dataclass(frozen=True)
class ImportResult:
    """Top-level import response.

    success is False only when the session itself failed (unreadable file,
    index load failure, persistence failure); row errors still yield True.
    """
    success: bool
    message: str
    data: ImportData | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data.to_dict() if self.data is not None else None,
        }
