from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from ..config.loader import ImportConfig
from ..db.batch_insert import batch_insert
from ..db.repository import build_insert_rows, clear_table, load_existing_index
from ..excel.reader import read_import_rows
from ..logging.error_log import ErrorLogBuffer
from ..models.asset_types import AssetProfile, AssetType
from ..models.import_outcome import ImportOutcome
from ..models.import_result import ImportResult
from ..models.import_row import ImportRow
from .duplicates import ExistingAssetIndex
from .pipeline import process_rows
from .profiles import build_profile
from .progress import RowProgress
from .summary import build_error_result, build_import_result

"""Import session: file check -> index -> read -> validate -> persist -> result.

Modes:
- clear: 清空再导入. The existing index is empty and the target table is
  emptied in the same transaction that inserts the valid rows.
- incremental: the target table is loaded as the existing index; matching
  rows are skipped as duplicates and nothing is deleted.

With cursor=None (mock mode) nothing touches a database: the index is empty
and persistence is skipped.

A failure of the session itself never shows up as a row error; it turns the
whole result into success=False with message "<label>导入失败: <reason>".
"""

__all__ = [
    "ImportFileError",
    "ImportReport",
    "ALLOWED_SUFFIXES",
    "MODES",
    "validate_file",
    "load_index",
    "persist_valid_rows",
    "run_import",
]

logger = logging.getLogger(__name__)

ALLOWED_SUFFIXES = (".xlsx",)
MODES = ("clear", "incremental")


class ImportFileError(Exception):
    """Raised when the uploaded file is missing, empty, too large or not Excel."""


@dataclass(frozen=True)
class ImportReport:
    """What a CLI run needs besides the payload itself."""
    result: ImportResult
    outcome: ImportOutcome | None = None
    inserted_rows: int = 0
    elapsed_seconds: float = 0.0
    error_log_path: Path | None = None

    @property
    def duplicate_count(self) -> int:
        return self.outcome.duplicate_count if self.outcome is not None else 0


def validate_file(path: Path, max_file_size_mb: float) -> None:
    if not path.exists() or not path.is_file():
        raise ImportFileError(f"文件不存在: {path}")
    size = path.stat().st_size
    if size == 0:
        raise ImportFileError("文件不能为空")
    if path.suffix.lower() not in ALLOWED_SUFFIXES:
        raise ImportFileError("仅支持Excel文件（.xlsx）")
    if size > max_file_size_mb * 1024 * 1024:
        raise ImportFileError(f"文件大小不能超过{max_file_size_mb:g}MB")


def load_index(cursor: Any, profile: AssetProfile, mode: str) -> ExistingAssetIndex:
    if cursor is None or mode == "clear":
        return {}
    return load_existing_index(cursor, profile.table_name)


def persist_valid_rows(
    cursor: Any,
    profile: AssetProfile,
    rows: Sequence[ImportRow],
    *,
    clear: bool,
    create_time: datetime | None = None,
) -> int:
    """Write the valid rows in one transaction; returns the inserted row count.

    Any failure rolls the transaction back and is re-raised.
    """
    stamp = create_time if create_time is not None else datetime.now()
    cursor.execute("BEGIN")
    try:
        if clear:
            clear_table(cursor, profile.table_name)
        columns, values = build_insert_rows(rows, profile, stamp)
        inserted = batch_insert(cursor, profile.table_name, columns, values).inserted_rows
        cursor.execute("COMMIT")
    except Exception:
        logger.error("persistence failed for %s, rolling back", profile.table_name)
        cursor.execute("ROLLBACK")
        raise
    logger.info("inserted %d rows into %s", inserted, profile.table_name)
    return inserted


def run_import(
    path: Path,
    asset_type: AssetType,
    config: ImportConfig,
    cursor: Any = None,
    *,
    mode: str | None = None,
    dry_run: bool = False,
    error_log: ErrorLogBuffer | None = None,
) -> ImportReport:
    """Run one import session for a workbook.

    Args:
        path: workbook to import
        asset_type: target asset table
        config: loaded import config
        cursor: database cursor, None = mock mode
        mode: "clear" or "incremental", defaults to config.mode
        dry_run: validate only, never write to the database
        error_log: buffer that receives every error of the outcome

    Returns:
        ImportReport wrapping the result payload
    """
    start = time.monotonic()
    effective_mode = mode or config.mode
    if effective_mode not in MODES:
        raise ValueError(f"unknown import mode: {effective_mode}")
    profile = build_profile(asset_type, config)

    outcome: ImportOutcome | None = None
    inserted = 0
    log_path: Path | None = None
    try:
        validate_file(path, config.max_file_size_mb)
        index = load_index(cursor, profile, effective_mode)
        sheet = read_import_rows(path, profile, header_rows=config.header_rows)
        logger.info(
            "read %d data rows from %s (sheet=%s, ignored columns=%s)",
            len(sheet.rows), path.name, sheet.sheet_name, sheet.ignored_columns,
        )

        with RowProgress(len(sheet.rows), description=profile.label) as progress:
            outcome = process_rows(sheet.rows, index, profile, progress=progress)

        if error_log is not None:
            error_log.extend(outcome.errors)
            log_path = error_log.flush()

        if cursor is not None and not dry_run:
            inserted = persist_valid_rows(
                cursor, profile, outcome.valid_rows, clear=effective_mode == "clear"
            )
        result = build_import_result(outcome, profile.label, limit=config.success_record_limit)
    except Exception as e:
        logger.error("%s import failed: %s", profile.label, e)
        result = build_error_result(profile.label, str(e))

    elapsed = time.monotonic() - start
    return ImportReport(
        result=result,
        outcome=outcome,
        inserted_rows=inserted,
        elapsed_seconds=elapsed,
        error_log_path=log_path,
    )
