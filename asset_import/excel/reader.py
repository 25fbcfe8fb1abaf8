from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.asset_types import AssetProfile
from ..models.import_row import ImportRow

"""Excel reader for asset import templates.

Template layout: row 1 is a title row, row 2 the header row, data starts at
row 3. The number of header rows is configurable (header_rows), the header is
always the last of them.

Header cells are matched against the profile's Chinese labels (主键, 上报单位,
...) or the field names themselves. Unknown columns are ignored.
"""

__all__ = [
    "SheetHeaderError",
    "MissingColumnsError",
    "SheetData",
    "read_workbook",
    "normalize_sheet",
    "read_import_rows",
]


class SheetHeaderError(Exception):
    """Raised when the header row is missing or empty."""


class MissingColumnsError(Exception):
    """Raised when expected columns are missing in the sheet header."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]  # 识别出的字段名 (表头顺序)
    rows: list[ImportRow]
    ignored_columns: list[str] = field(default_factory=list)


def read_workbook(path: Path) -> tuple[str, pd.DataFrame]:
    """Read the first sheet of a workbook as a raw, header-less DataFrame.

    All cells are kept as objects so IDs like ``001`` survive untouched.
    """
    xls = pd.ExcelFile(path)
    if not xls.sheet_names:
        raise SheetHeaderError(f"workbook '{path.name}' has no sheets")
    name = xls.sheet_names[0]
    df = xls.parse(name, header=None, dtype=object)
    return str(name), df


def _header_to_field(profile: AssetProfile) -> dict[str, str]:
    lookup = {label.strip(): name for label, name in profile.header_labels.items()}
    for name in profile.fields:
        lookup.setdefault(name, name)
    return lookup


def _cell_to_value(value: Any, as_text: bool) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # 非标量单元格 (极少见) 原样保留
        return value
    if not as_text or isinstance(value, str):
        return value
    # 文本列中的数字按文本处理: 1001.0 -> "1001"
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return str(value)


def normalize_sheet(
    df: pd.DataFrame,
    sheet_name: str,
    profile: AssetProfile,
    header_rows: int = 2,
) -> SheetData:
    """Turn a raw DataFrame into ImportRows.

    Steps:
    1. Validate that the header row (row ``header_rows``) exists
    2. Map header cells to field names, ignoring unknown columns
    3. Validate the profile's expected columns are present
    4. Convert every non-blank data row into an ImportRow whose row_number is
       the 1-based Excel row
    """
    if header_rows < 1:
        raise ValueError("header_rows must be >= 1")
    if df.shape[0] < header_rows:
        raise SheetHeaderError(f"sheet '{sheet_name}' lacks header row {header_rows}")

    header_series = df.iloc[header_rows - 1]
    if header_series.isna().all():
        raise SheetHeaderError(f"sheet '{sheet_name}' has an empty header row {header_rows}")

    lookup = _header_to_field(profile)
    positions: list[tuple[int, str]] = []
    columns: list[str] = []
    ignored: list[str] = []
    for pos, cell in enumerate(header_series.tolist()):
        if cell is None or (not isinstance(cell, str) and pd.isna(cell)):
            continue
        label = str(cell).strip()
        name = lookup.get(label)
        if name is None or name in columns:
            ignored.append(label)
            continue
        positions.append((pos, name))
        columns.append(name)

    missing = profile.expected_columns - set(columns)
    if missing:
        raise MissingColumnsError(f"sheet '{sheet_name}' missing columns: {sorted(missing)}")

    rows: list[ImportRow] = []
    data_part = df.iloc[header_rows:]
    for index, raw in data_part.iterrows():
        if raw.isna().all():
            continue
        cells = raw.tolist()
        values = {
            name: _cell_to_value(cells[pos], name in profile.text_fields)
            for pos, name in positions
        }
        # 只含空格的行与空行同样跳过
        if all(v is None or (isinstance(v, str) and not v.strip()) for v in values.values()):
            continue
        # DataFrame index 从 0 开始 -> Excel 行号 +1
        rows.append(ImportRow(row_number=int(index) + 1, values=values))

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows, ignored_columns=ignored)


def read_import_rows(path: Path, profile: AssetProfile, header_rows: int = 2) -> SheetData:
    sheet_name, df = read_workbook(path)
    return normalize_sheet(df, sheet_name, profile, header_rows=header_rows)
