from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..models.asset_types import AssetProfile, FieldViolation
from ..models.duplicate_record import DuplicateRecord
from ..models.import_outcome import ImportOutcome
from ..models.import_row import ImportRow
from ..models.validation_error import SUMMARY_ROW, ErrorKind, Severity, ValidationError
from .duplicates import (
    DuplicateMatch,
    ExistingAssetIndex,
    KeyMismatch,
    build_duplicate_record,
    build_mismatch_error,
    resolve_duplicate,
)
from .validators import validate_fields

if TYPE_CHECKING:
    from .progress import RowProgress

"""Row-by-row import pipeline.

For every row, in order:
1. ID check: a blank ID rejects the row
2. Duplicate resolution against the existing index: an identical stored
   record skips the row, a stored record with different key fields rejects it
3. Field validation: all violations are collected into one error
4. Otherwise the row is accepted

An unexpected exception while processing a row becomes a SYSTEM_ERROR entry
for that row; the loop continues with the next row. After the last row an
INFO summary entry (row 0) is placed first when duplicates were skipped.
"""

__all__ = [
    "ID_FIELD",
    "SYSTEM_FIELD",
    "SUMMARY_FIELD",
    "process_rows",
]

logger = logging.getLogger(__name__)

ID_FIELD = "id"
SYSTEM_FIELD = "系统"
SUMMARY_FIELD = "summary"


def _missing_id_error(row: ImportRow) -> ValidationError:
    return ValidationError(
        row_number=row.row_number,
        field_names=ID_FIELD,
        message=f"第{row.row_number}行：资产ID为空；",
        severity=Severity.CRITICAL,
        kind=ErrorKind.MISSING_ID,
        asset_name=row.asset_name,
    )


def _field_error(row: ImportRow, asset_id: str, violations: list[FieldViolation]) -> ValidationError:
    names = ",".join(name for name, _ in violations)
    message = "".join(f"第{row.row_number}行：{text}；" for _, text in violations)
    return ValidationError(
        row_number=row.row_number,
        field_names=names,
        message=message,
        severity=Severity.CRITICAL,
        kind=ErrorKind.FIELD_VALIDATION,
        asset_id=asset_id,
        asset_name=row.asset_name,
    )


def _system_error(row: ImportRow, exc: Exception) -> ValidationError:
    # 只取字符串值, 避免在构造错误时再次抛出
    raw_id = row.values.get(ID_FIELD)
    raw_name = row.values.get("assetName")
    return ValidationError(
        row_number=row.row_number,
        field_names=SYSTEM_FIELD,
        message=f"第{row.row_number}行：系统错误: {exc}；",
        severity=Severity.CRITICAL,
        kind=ErrorKind.SYSTEM_ERROR,
        asset_id=(raw_id.strip() or None) if isinstance(raw_id, str) else None,
        asset_name=raw_name if isinstance(raw_name, str) else None,
    )


def _duplicate_summary(duplicate_count: int) -> ValidationError:
    return ValidationError(
        row_number=SUMMARY_ROW,
        field_names=SUMMARY_FIELD,
        message=f"自动跳过{duplicate_count}条重复数据（系统已存在：{duplicate_count}条）",
        severity=Severity.INFO,
        kind=ErrorKind.DUPLICATE_SUMMARY,
    )


def process_rows(
    rows: Iterable[ImportRow],
    index: ExistingAssetIndex,
    profile: AssetProfile,
    *,
    progress: RowProgress | None = None,
) -> ImportOutcome:
    """Classify every row as valid, error or duplicate.

    The index is only read. Every input row ends up in exactly one of
    outcome.valid_rows, outcome.errors or outcome.duplicate_records.
    """
    valid_rows: list[ImportRow] = []
    errors: list[ValidationError] = []
    duplicates: list[DuplicateRecord] = []

    for row in rows:
        try:
            asset_id = row.asset_id
            if asset_id is None:
                logger.debug("row %d rejected: blank id", row.row_number)
                errors.append(_missing_id_error(row))
                continue

            resolution = resolve_duplicate(asset_id, row, index, profile.key_fields)
            if isinstance(resolution, DuplicateMatch):
                logger.debug("row %d skipped: id=%s already stored", row.row_number, asset_id)
                duplicates.append(build_duplicate_record(row, asset_id, resolution.stored))
                continue
            if isinstance(resolution, KeyMismatch):
                logger.debug(
                    "row %d rejected: id=%s key fields differ %s",
                    row.row_number, asset_id, list(resolution.differing_fields),
                )
                errors.append(build_mismatch_error(row, asset_id, resolution.stored, profile.key_fields))
                continue

            violations = validate_fields(row, profile)
            if violations:
                logger.debug("row %d rejected: %d violation(s)", row.row_number, len(violations))
                errors.append(_field_error(row, asset_id, violations))
                continue

            valid_rows.append(row)
        except Exception as e:
            logger.exception("row %d failed with an unexpected error", row.row_number)
            errors.append(_system_error(row, e))
        finally:
            if progress is not None:
                progress.update()

    if duplicates:
        errors.insert(0, _duplicate_summary(len(duplicates)))

    logger.info(
        "%s rows processed: valid=%d errors=%d duplicates=%d",
        profile.label, len(valid_rows), len(errors), len(duplicates),
    )
    return ImportOutcome(
        valid_rows=tuple(valid_rows),
        errors=tuple(errors),
        duplicate_count=len(duplicates),
        duplicate_records=tuple(duplicates),
    )
