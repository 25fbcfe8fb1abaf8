from __future__ import annotations

from ..models.import_outcome import ImportOutcome
from ..models.import_result import ImportData, ImportResult, ImportSummary, SuccessRecord

"""Result aggregation and SUMMARY line rendering.

build_import_result() turns an ImportOutcome into the externally visible
payload; message templates:

- 完全成功: "软件资产导入完成，成功导入30条数据"
- 有错误:   "软件资产导入完成，成功导入45条数据，存在3条错误"
- 全部错误: "软件资产导入完成，成功导入0条数据，存在20条错误"

The error number in the message counts CRITICAL entries only; the INFO
duplicate summary is part of errorCount but never turns a clean import into
one "with errors".
"""

__all__ = [
    "SUCCESS_RECORD_LIMIT",
    "build_import_result",
    "build_error_result",
    "render_message",
    "render_summary_line",
]

SUCCESS_RECORD_LIMIT = 100


def render_message(label: str, success_count: int, critical_errors: int) -> str:
    if critical_errors == 0:
        return f"{label}导入完成，成功导入{success_count}条数据"
    if success_count == 0:
        return f"{label}导入完成，成功导入0条数据，存在{critical_errors}条错误"
    return f"{label}导入完成，成功导入{success_count}条数据，存在{critical_errors}条错误"


def build_import_result(
    outcome: ImportOutcome, label: str, *, limit: int = SUCCESS_RECORD_LIMIT
) -> ImportResult:
    """Build the success payload of a completed import session.

    Args:
        outcome: classified rows of the session
        label: localized asset type name used in the message
        limit: maximum number of success records carried in the payload;
            successCount is never truncated
    """
    success_count = len(outcome.valid_rows)
    error_count = len(outcome.errors)
    critical = len(outcome.critical_errors)
    total_rows = success_count + error_count

    success_records = [
        SuccessRecord(
            excel_row_num=row.row_number,
            asset_id=row.asset_id,
            asset_name=row.asset_name,
            report_unit=row.text("reportUnit"),
        )
        for row in outcome.valid_rows[:limit]
    ]
    data = ImportData(
        total_rows=total_rows,
        success_count=success_count,
        error_count=error_count,
        import_summary=ImportSummary(
            total_processed=total_rows,
            successfully_imported=success_count,
            critical_errors=critical,
        ),
        error_details=[e.to_dict() for e in outcome.errors],
        success_records=success_records,
    )
    return ImportResult(success=True, message=render_message(label, success_count, critical), data=data)


def build_error_result(label: str, reason: str) -> ImportResult:
    """Result of a session that failed as a whole (no data section)."""
    return ImportResult(success=False, message=f"{label}导入失败: {reason}")


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 避免科学计数法
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(
    asset_type: str,
    result: ImportResult,
    elapsed_seconds: float,
    duplicates: int = 0,
) -> str:
    """Render the SUMMARY line printed at the end of a CLI run.

    Format:
    SUMMARY type={type} rows={total} success={n} errors={critical}
    duplicates={n} elapsed_sec={elapsed}

    A failed session reports zero counts.
    """
    if result.data is not None:
        rows = result.data.total_rows
        success = result.data.success_count
        errors = result.data.import_summary.critical_errors
    else:
        rows = success = errors = 0
    return (
        f"SUMMARY type={asset_type} "
        f"rows={rows} "
        f"success={success} "
        f"errors={errors} "
        f"duplicates={duplicates} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )
