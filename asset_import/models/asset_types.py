from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .import_row import ImportRow

"""Asset type enum and the per-type validation profile.

One generic pipeline serves all three asset tables; everything that differs
between software, cyber and data-content imports lives in AssetProfile.
"""

__all__ = [
    "AssetType",
    "RequiredField",
    "AssetProfile",
    "FieldViolation",
    "RowRule",
]

# (field names, message fragment) 例: ("actualQuantity", "实有数量为空")
FieldViolation = tuple[str, str]
RowRule = Callable[["ImportRow"], list[FieldViolation]]


class AssetType(Enum):
    """The three asset tables that accept Excel imports.

    The value doubles as the CLI choice and the config key.
    """
    SOFTWARE = "software"
    CYBER = "cyber"
    DATA_CONTENT = "data_content"

    @property
    def label(self) -> str:
        """Localized name used in result messages (e.g. 软件资产)."""
        return _LABELS[self]


_LABELS = {
    AssetType.SOFTWARE: "软件资产",
    AssetType.CYBER: "网信资产",
    AssetType.DATA_CONTENT: "数据内容资产",
}


@dataclass(frozen=True)
class RequiredField:
    """A text field that must be non-blank after trimming."""
    name: str  # field name, e.g. "reportUnit"
    label: str  # localized label, e.g. "上报单位"


@dataclass(frozen=True)
class AssetProfile:
    """Validation and layout settings for one asset type.

    Profiles are plain values handed into the pipeline call, so tests can
    build variants (custom category maps, other date floors) without touching
    global state.
    """
    asset_type: AssetType
    table_name: str  # target table for persistence
    header_labels: Mapping[str, str]  # Excel header label -> field name
    text_fields: frozenset[str]  # fields rendered as text when read from Excel
    required_fields: tuple[RequiredField, ...]  # checked in this order
    key_fields: tuple[str, ...]  # duplicate identity, compared in this order
    category_map: Mapping[str, str]  # categoryCode -> canonical assetCategory
    date_floor: date = date(1949, 10, 1)
    date_field: str | None = "putIntoUseDate"  # None: the type has no such column
    status_field: str | None = None
    legal_statuses: tuple[str, ...] = ()
    extra_rules: tuple[RowRule, ...] = field(default=())

    @property
    def label(self) -> str:
        return self.asset_type.label

    @property
    def fields(self) -> list[str]:
        """All known field names in header order (deduplicated)."""
        seen: list[str] = []
        for name in self.header_labels.values():
            if name not in seen:
                seen.append(name)
        return seen

    @property
    def expected_columns(self) -> set[str]:
        """Columns that must be present in the sheet header.

        The ID plus every required text field, the quantity and (where the
        type has one) the date column.
        """
        required = {"id", "actualQuantity"}
        required.update(f.name for f in self.required_fields)
        if self.date_field:
            required.add(self.date_field)
        return required
