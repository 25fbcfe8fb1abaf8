from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from ..models.duplicate_record import DUPLICATE_TYPE_SYSTEM, DuplicateRecord
from ..models.import_row import ImportRow
from ..models.validation_error import ErrorKind, Severity, ValidationError

"""Duplicate resolution against the existing asset index.

A row whose ID is already stored is either a harmless re-submission (every
key field equal, the row is skipped) or a conflict (some key field differs,
the row is rejected and the submitter has to pick another ID). Key fields are
compared as exact values; None only equals None.
"""

__all__ = [
    "ExistingAssetIndex",
    "NotFound",
    "DuplicateMatch",
    "KeyMismatch",
    "Resolution",
    "MISMATCH_FIELD",
    "resolve_duplicate",
    "build_duplicate_record",
    "build_mismatch_error",
]

# id -> stored record (field name -> value)
ExistingAssetIndex = Mapping[str, Mapping[str, Any]]

MISMATCH_FIELD = "资产ID"


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class DuplicateMatch:
    stored: Mapping[str, Any]


@dataclass(frozen=True)
class KeyMismatch:
    stored: Mapping[str, Any]
    differing_fields: tuple[str, ...]


Resolution = Union[NotFound, DuplicateMatch, KeyMismatch]


def resolve_duplicate(
    asset_id: str, row: ImportRow, index: ExistingAssetIndex, key_fields: Sequence[str]
) -> Resolution:
    stored = index.get(asset_id)
    if stored is None:
        return NotFound()
    differing = tuple(f for f in key_fields if row.get(f) != stored.get(f))
    if differing:
        return KeyMismatch(stored=stored, differing_fields=differing)
    return DuplicateMatch(stored=stored)


def build_duplicate_record(row: ImportRow, asset_id: str, stored: Mapping[str, Any]) -> DuplicateRecord:
    return DuplicateRecord(
        current_row_number=row.row_number,
        duplicate_row_number=0,
        asset_id=asset_id,
        duplicate_type=DUPLICATE_TYPE_SYSTEM,
        report_unit=stored.get("reportUnit"),
        asset_category=stored.get("assetCategory"),
        asset_name=stored.get("assetName"),
    )


def _joined(values: Mapping[str, Any], key_fields: Sequence[str]) -> str:
    return "/".join("" if values.get(f) is None else str(values.get(f)) for f in key_fields)


def build_mismatch_error(
    row: ImportRow, asset_id: str, stored: Mapping[str, Any], key_fields: Sequence[str]
) -> ValidationError:
    message = (
        f"第{row.row_number}行：资产ID[{asset_id}]在系统中已存在但关键字段不一致"
        f"（系统：{_joined(stored, key_fields)}，Excel：{_joined(row.values, key_fields)}），"
        "请修改该行主键值；"
    )
    return ValidationError(
        row_number=row.row_number,
        field_names=MISMATCH_FIELD,
        message=message,
        severity=Severity.CRITICAL,
        kind=ErrorKind.KEY_FIELD_MISMATCH,
        asset_id=asset_id,
        asset_name=row.asset_name,
    )
