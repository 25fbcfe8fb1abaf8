from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..config.category_maps import resolve_category_map
from ..config.loader import DEFAULT_DATE_FLOOR, ImportConfig
from ..models.asset_types import AssetProfile, AssetType, RequiredField
from .validators import (
    LEGAL_SERVICE_STATUS,
    check_development_tool,
    check_update_options,
    check_used_quantity,
)

"""Per-type AssetProfile construction.

Header labels follow the official import templates of each asset table.
"""

__all__ = [
    "DEFAULT_TABLES",
    "NUMERIC_FIELDS",
    "build_profile",
]

DEFAULT_TABLES: Mapping[str, str] = MappingProxyType({
    AssetType.SOFTWARE.value: "software_asset",
    AssetType.CYBER.value: "cyber_asset",
    AssetType.DATA_CONTENT.value: "data_content_asset",
})

# 这些列保留原始单元格值, 其余列一律按文本读取
NUMERIC_FIELDS = frozenset({
    "actualQuantity",
    "usedQuantity",
    "unitPrice",
    "amount",
    "putIntoUseDate",
})

_SOFTWARE_HEADERS = {
    "主键": "id",
    "标题": "title",
    "数据审核意见": "dataAuditOpinion",
    "上报单位": "reportUnit",
    "分类编码": "categoryCode",
    "资产分类": "assetCategory",
    "资产名称": "assetName",
    "取得方式": "acquisitionMethod",
    "功能简介": "functionBrief",
    "部署范围": "deploymentScope",
    "部署形式": "deploymentForm",
    "承载网络": "bearingNetwork",
    "软件著作权人": "softwareCopyright",
    "实有数量": "actualQuantity",
    "计量单位": "unit",
    "单价": "unitPrice",
    "金额": "amount",
    "计价方法": "pricingMethod",
    "计价说明": "pricingDescription",
    "服务状态": "serviceStatus",
    "投入使用日期": "putIntoUseDate",
    "盘点单位": "inventoryUnit",
}

_CYBER_HEADERS = {
    "主键": "id",
    "上报单位": "reportUnit",
    "省": "province",
    "市": "city",
    "分类编码": "categoryCode",
    "资产分类": "assetCategory",
    "资产名称": "assetName",
    "资产内容": "assetContent",
    "保障对象": "supportObject",
    "实有数量": "actualQuantity",
    "计量单位": "unit",
    "单价": "unitPrice",
    "金额（元）": "amount",
    "金额": "amount",
    "计价方法": "pricingMethod",
    "计价说明": "pricingDescription",
    "投入使用日期": "putIntoUseDate",
    "已用数量": "usedQuantity",
    "盘点单位": "inventoryUnit",
    "盘点备注": "inventoryRemark",
    "核价备注": "valuationRemark",
    "原始账备注": "originalAccountRemark",
}

_DATA_CONTENT_HEADERS = {
    "主键": "id",
    "上报单位": "reportUnit",
    "省": "province",
    "市": "city",
    "分类编码": "categoryCode",
    "资产分类": "assetCategory",
    "资产名称": "assetName",
    "数据类型": "dataType",
    "取得方式": "acquisitionMethod",
    "功能简介": "functionBrief",
    "应用领域": "applicationField",
    "开发工具": "developmentTool",
    "实有数量": "actualQuantity",
    "计量单位": "unit",
    "单价": "unitPrice",
    "金额": "amount",
    "计价方法": "pricingMethod",
    "计价说明": "pricingDescription",
    "更新周期": "updateCycle",
    "更新方式": "updateMethod",
    "盘点单位": "inventoryUnit",
}

_COMMON_HEAD = (
    RequiredField("reportUnit", "上报单位"),
    RequiredField("categoryCode", "分类编码"),
    RequiredField("assetCategory", "资产分类"),
    RequiredField("assetName", "资产名称"),
)
_COMMON_TAIL = (
    RequiredField("unit", "计量单位"),
    RequiredField("inventoryUnit", "盘点单位"),
)

_REQUIRED = {
    AssetType.SOFTWARE: _COMMON_HEAD + (
        RequiredField("acquisitionMethod", "取得方式"),
        RequiredField("deploymentScope", "部署范围"),
        RequiredField("serviceStatus", "服务状态"),
    ) + _COMMON_TAIL,
    AssetType.CYBER: _COMMON_HEAD + (
        RequiredField("assetContent", "资产内容"),
    ) + _COMMON_TAIL,
    AssetType.DATA_CONTENT: _COMMON_HEAD + (
        RequiredField("developmentTool", "开发工具"),
    ) + _COMMON_TAIL,
}

_KEY_FIELDS = {
    AssetType.SOFTWARE: ("reportUnit", "assetCategory", "assetName"),
    AssetType.CYBER: ("reportUnit", "assetCategory", "assetName", "assetContent"),
    AssetType.DATA_CONTENT: ("reportUnit", "assetCategory", "assetName"),
}

_HEADERS = {
    AssetType.SOFTWARE: _SOFTWARE_HEADERS,
    AssetType.CYBER: _CYBER_HEADERS,
    AssetType.DATA_CONTENT: _DATA_CONTENT_HEADERS,
}


def build_profile(asset_type: AssetType, config: ImportConfig | None = None) -> AssetProfile:
    """Build the AssetProfile of one asset type.

    Without a config the default table names, category maps and date floor
    apply.
    """
    headers = _HEADERS[asset_type]
    text_fields = frozenset(name for name in headers.values() if name not in NUMERIC_FIELDS)

    if config is not None:
        table_name = config.tables.get(asset_type.value, DEFAULT_TABLES[asset_type.value])
        category_map = resolve_category_map(asset_type, config.category_maps)
        date_floor = config.date_floor
    else:
        table_name = DEFAULT_TABLES[asset_type.value]
        category_map = resolve_category_map(asset_type)
        date_floor = DEFAULT_DATE_FLOOR

    if asset_type is AssetType.SOFTWARE:
        return AssetProfile(
            asset_type=asset_type,
            table_name=table_name,
            header_labels=MappingProxyType(headers),
            text_fields=text_fields,
            required_fields=_REQUIRED[asset_type],
            key_fields=_KEY_FIELDS[asset_type],
            category_map=category_map,
            date_floor=date_floor,
            status_field="serviceStatus",
            legal_statuses=LEGAL_SERVICE_STATUS,
        )
    if asset_type is AssetType.CYBER:
        return AssetProfile(
            asset_type=asset_type,
            table_name=table_name,
            header_labels=MappingProxyType(headers),
            text_fields=text_fields,
            required_fields=_REQUIRED[asset_type],
            key_fields=_KEY_FIELDS[asset_type],
            category_map=category_map,
            date_floor=date_floor,
            extra_rules=(check_used_quantity,),
        )
    # 数据内容资产表没有投入使用日期列
    return AssetProfile(
        asset_type=asset_type,
        table_name=table_name,
        header_labels=MappingProxyType(headers),
        text_fields=text_fields,
        required_fields=_REQUIRED[asset_type],
        key_fields=_KEY_FIELDS[asset_type],
        category_map=category_map,
        date_floor=date_floor,
        date_field=None,
        extra_rules=(check_development_tool, check_update_options),
    )
