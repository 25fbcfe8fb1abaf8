# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from asset_import.logging.init import reset_logging

SOFTWARE_HEADER = [
    "主键", "上报单位", "分类编码", "资产分类", "资产名称", "取得方式", "部署范围",
    "实有数量", "计量单位", "服务状态", "投入使用日期", "盘点单位",
]


@pytest.fixture(autouse=True)
def _fresh_logging():
    # handler 持有当时的 sys.stdout, 每个用例重新创建
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """tables:
  software: software_asset
  cyber: cyber_asset
  data_content: data_content_asset
mode: clear
header_rows: 2
date_floor: "1949-10-01"
success_record_limit: 100
max_file_size_mb: 100
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def software_values() -> dict[str, Any]:
    """Field values of one fully valid software asset row."""
    return {
        "id": "SW-001",
        "reportUnit": "第一单位",
        "categoryCode": "006004002001001",
        "assetCategory": "操作系统",
        "assetName": "麒麟操作系统",
        "acquisitionMethod": "采购",
        "deploymentScope": "全网",
        "actualQuantity": 10,
        "unit": "套",
        "serviceStatus": "在用",
        "putIntoUseDate": "2020-05-01",
        "inventoryUnit": "第一单位",
    }


@pytest.fixture()
def make_workbook() -> Callable[..., Path]:
    """Build an import workbook: title row, header row, then data rows."""

    def _make(path: Path, header: list[str], rows: list[list[Any]], title: str = "资产导入模板") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        title_row: list[Any] = [title] + [None] * (len(header) - 1)
        df = pd.DataFrame([title_row, header, *rows])
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Sheet1", header=False, index=False)
        return path

    return _make


@pytest.fixture()
def software_header() -> list[str]:
    return list(SOFTWARE_HEADER)
