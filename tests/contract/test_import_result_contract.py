from __future__ import annotations

from asset_import.models.asset_types import AssetType
from asset_import.models.import_row import ImportRow
from asset_import.services.pipeline import process_rows
from asset_import.services.profiles import build_profile
from asset_import.services.summary import build_error_result, build_import_result

"""Contract: shape of the import result payload handed to callers."""

TOP_KEYS = {"success", "message", "data"}
DATA_KEYS = {"totalRows", "successCount", "errorCount", "importSummary", "errorDetails", "successRecords"}
SUMMARY_KEYS = {"totalProcessed", "successfullyImported", "criticalErrors"}
ERROR_KEYS = {"excelRowNum", "errorFields", "errorMsg", "errorLevel", "errorType", "assetId", "assetName"}
SUCCESS_KEYS = {"excelRowNum", "assetId", "assetName", "reportUnit"}


def _payload() -> dict:
    profile = build_profile(AssetType.DATA_CONTENT)
    good = {
        "id": "DC-1", "reportUnit": "单位A", "categoryCode": "006004003", "assetCategory": "数据内容资产",
        "assetName": "人员库", "developmentTool": "MySql", "actualQuantity": 1, "unit": "个",
        "inventoryUnit": "单位A",
    }
    rows = [
        ImportRow(3, good),
        ImportRow(4, dict(good, id="DC-2", developmentTool="Excel")),
        ImportRow(5, dict(good, id="DC-3")),
    ]
    index = {"DC-3": {"id": "DC-3", "reportUnit": "单位A", "assetCategory": "数据内容资产", "assetName": "人员库"}}
    outcome = process_rows(rows, index, profile)
    return build_import_result(outcome, profile.label).to_dict()


def test_payload_keys():
    payload = _payload()
    assert set(payload) == TOP_KEYS
    assert set(payload["data"]) == DATA_KEYS
    assert set(payload["data"]["importSummary"]) == SUMMARY_KEYS
    for entry in payload["data"]["errorDetails"]:
        assert set(entry) == ERROR_KEYS
    for entry in payload["data"]["successRecords"]:
        assert set(entry) == SUCCESS_KEYS


def test_payload_values():
    payload = _payload()
    data = payload["data"]
    assert payload["success"] is True
    assert payload["message"] == "数据内容资产导入完成，成功导入1条数据，存在1条错误"
    assert data["totalRows"] == data["successCount"] + data["errorCount"] == 3
    assert data["importSummary"]["criticalErrors"] == 1
    summary, error = data["errorDetails"]
    assert summary == {
        "excelRowNum": 0,
        "errorFields": "summary",
        "errorMsg": "自动跳过1条重复数据（系统已存在：1条）",
        "errorLevel": "INFO",
        "errorType": "DUPLICATE_SUMMARY",
        "assetId": None,
        "assetName": None,
    }
    assert error["errorLevel"] == "CRITICAL"
    assert error["errorFields"] == "developmentTool"
    assert error["assetId"] == "DC-2"


def test_failure_payload():
    payload = build_error_result("软件资产", "failed loading existing records").to_dict()
    assert set(payload) == TOP_KEYS
    assert payload["success"] is False
    assert payload["data"] is None
    assert payload["message"].startswith("软件资产导入失败: ")
