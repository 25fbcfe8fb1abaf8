from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from asset_import.excel.reader import (
    MissingColumnsError,
    SheetHeaderError,
    normalize_sheet,
    read_import_rows,
    read_workbook,
)
from asset_import.models.asset_types import AssetType
from asset_import.services.profiles import build_profile

SOFTWARE = build_profile(AssetType.SOFTWARE)


def _valid_cells(asset_id: object = "SW-1") -> list[object]:
    return [asset_id, "单位A", "006004002001001", "操作系统", "麒麟", "采购", "全网", 3, "套", "在用", "2020-01-01", "单位A"]


def test_read_and_normalize_rows(temp_workdir: Path, make_workbook, software_header):
    excel = make_workbook(
        temp_workdir / "data" / "software.xlsx",
        software_header,
        [_valid_cells("SW-1"), _valid_cells("SW-2")],
    )
    sheet = read_import_rows(excel, SOFTWARE)
    assert sheet.sheet_name == "Sheet1"
    assert sheet.columns[:3] == ["id", "reportUnit", "categoryCode"]
    assert [r.row_number for r in sheet.rows] == [3, 4]
    first = sheet.rows[0]
    assert first.asset_id == "SW-1"
    assert first.get("actualQuantity") == 3
    assert first.text("assetCategory") == "操作系统"


def test_blank_rows_skipped_and_row_numbers_kept(temp_workdir: Path, make_workbook, software_header):
    blank = [None] * len(software_header)
    excel = make_workbook(
        temp_workdir / "data" / "gaps.xlsx",
        software_header,
        [_valid_cells("SW-1"), blank, _valid_cells("SW-3")],
    )
    sheet = read_import_rows(excel, SOFTWARE)
    assert [r.row_number for r in sheet.rows] == [3, 5]


def test_whitespace_only_rows_skipped(temp_workdir: Path, make_workbook, software_header):
    spaces = ["  "] * len(software_header)
    excel = make_workbook(
        temp_workdir / "data" / "spaces.xlsx",
        software_header,
        [_valid_cells("SW-1"), spaces, _valid_cells("SW-3")],
    )
    sheet = read_import_rows(excel, SOFTWARE)
    assert [r.row_number for r in sheet.rows] == [3, 5]


def test_numeric_cells_in_text_columns_become_text(temp_workdir: Path, make_workbook, software_header):
    cells = _valid_cells(1001)
    cells[2] = 6004002001001  # 分类编码被 Excel 存成数字
    excel = make_workbook(temp_workdir / "data" / "numeric.xlsx", software_header, [cells])
    row = read_import_rows(excel, SOFTWARE).rows[0]
    assert row.get("id") == "1001"
    assert row.get("categoryCode") == "6004002001001"
    assert row.get("actualQuantity") == 3


def test_unknown_columns_ignored(temp_workdir: Path, make_workbook, software_header):
    header = software_header + ["备注"]
    excel = make_workbook(temp_workdir / "data" / "extra.xlsx", header, [_valid_cells() + ["随便"]])
    sheet = read_import_rows(excel, SOFTWARE)
    assert sheet.ignored_columns == ["备注"]
    assert "备注" not in sheet.rows[0].values


def test_field_names_accepted_as_headers():
    df = pd.DataFrame([
        ["title"] + [None] * 11,
        ["id", "reportUnit", "categoryCode", "assetCategory", "assetName", "acquisitionMethod",
         "deploymentScope", "actualQuantity", "unit", "serviceStatus", "putIntoUseDate", "inventoryUnit"],
        _valid_cells(),
    ], dtype=object)
    sheet = normalize_sheet(df, "Sheet1", SOFTWARE)
    assert sheet.rows[0].asset_id == "SW-1"


def test_missing_header_row():
    df = pd.DataFrame([["只有标题"]], dtype=object)
    with pytest.raises(SheetHeaderError):
        normalize_sheet(df, "Sheet1", SOFTWARE)


def test_missing_expected_column(temp_workdir: Path, make_workbook, software_header):
    header = [h for h in software_header if h != "资产名称"]
    cells = _valid_cells()
    del cells[4]
    excel = make_workbook(temp_workdir / "data" / "missing.xlsx", header, [cells])
    with pytest.raises(MissingColumnsError) as exc:
        read_import_rows(excel, SOFTWARE)
    assert "assetName" in str(exc.value)


def test_single_header_row_layout():
    df = pd.DataFrame([
        ["主键", "上报单位", "分类编码", "资产分类", "资产名称", "取得方式", "部署范围",
         "实有数量", "计量单位", "服务状态", "投入使用日期", "盘点单位"],
        _valid_cells(),
    ], dtype=object)
    sheet = normalize_sheet(df, "Sheet1", SOFTWARE, header_rows=1)
    assert sheet.rows[0].row_number == 2


def test_read_workbook_keeps_leading_zero_text(temp_workdir: Path, make_workbook, software_header):
    excel = make_workbook(temp_workdir / "data" / "zeros.xlsx", software_header, [_valid_cells("007")])
    name, df = read_workbook(excel)
    assert name == "Sheet1"
    assert df.iloc[2, 0] == "007"
