from __future__ import annotations

import json
from pathlib import Path

import pytest

from asset_import.cli.__main__ import EXIT_PARTIAL_FAILURE, main as cli_main

"""Integration: real workbooks through the CLI in mock mode (DISABLE_DB_CONNECT=1)."""

CYBER_HEADER = [
    "主键", "上报单位", "省", "市", "分类编码", "资产分类", "资产名称", "资产内容", "保障对象",
    "实有数量", "计量单位", "单价", "金额（元）", "投入使用日期", "已用数量", "盘点单位",
]


def _cyber(asset_id: object, **overrides: object) -> list[object]:
    cells: dict[str, object] = {
        "id": asset_id, "reportUnit": "单位A", "province": "北京市", "city": "北京市",
        "categoryCode": "006004001015", "assetCategory": "电磁频谱", "assetName": "频谱监测",
        "assetContent": "监测站", "supportObject": "全军", "actualQuantity": 4, "unit": "台",
        "unitPrice": 100.0, "amount": 400.0, "putIntoUseDate": "2018-06-01", "usedQuantity": 2,
        "inventoryUnit": "单位A",
    }
    cells.update(overrides)
    return list(cells.values())


@pytest.fixture(autouse=True)
def _mock_db(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


def test_cyber_workbook_end_to_end(write_config, temp_workdir: Path, make_workbook, capsys):
    rows = [
        _cyber("CY-1"),
        _cyber("CY-2", usedQuantity=9),
        [None] * len(CYBER_HEADER),
        _cyber(None),
        _cyber("CY-5", categoryCode="ZZZ", putIntoUseDate="1900-01-01"),
        _cyber("CY-6", actualQuantity=4.0, usedQuantity=4),
    ]
    excel = make_workbook(temp_workdir / "data" / "cyber.xlsx", CYBER_HEADER, rows, title="网信资产导入")
    output = temp_workdir / "result.json"

    code = cli_main(["--type", "cyber", "--file", str(excel), "--output", str(output)])

    assert code == EXIT_PARTIAL_FAILURE
    payload = json.loads(output.read_text(encoding="utf-8"))
    data = payload["data"]
    assert payload["message"] == "网信资产导入完成，成功导入2条数据，存在3条错误"
    assert data["totalRows"] == 5
    assert [r["assetId"] for r in data["successRecords"]] == ["CY-1", "CY-6"]

    by_row = {e["excelRowNum"]: e for e in data["errorDetails"]}
    assert set(by_row) == {4, 6, 7}
    assert by_row[4]["errorFields"] == "usedQuantity"
    assert by_row[6]["errorFields"] == "id"
    assert by_row[7]["errorFields"] == "categoryCode,putIntoUseDate"
    assert "第7行：分类编码非法（当前值：ZZZ）；" in by_row[7]["errorMsg"]

    out = capsys.readouterr().out
    assert "SUMMARY type=cyber rows=5 success=2 errors=3 duplicates=0" in out

    [log_file] = list((temp_workdir / "logs").glob("import-errors-*.log"))
    logged = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [e["excelRowNum"] for e in logged] == [4, 6, 7]


def test_dry_run_flag_accepted(write_config, temp_workdir: Path, make_workbook, capsys):
    excel = make_workbook(temp_workdir / "data" / "cyber.xlsx", CYBER_HEADER, [_cyber("CY-1")])
    code = cli_main(["--type", "cyber", "--file", str(excel), "--dry-run", "--mode", "incremental"])
    assert code == 0
    assert "import_mode=incremental" in capsys.readouterr().out
