from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..models.asset_types import AssetType

"""Default classification code tables (categoryCode -> assetCategory).

These mirror the database constraints of the three asset tables. They are
returned as read-only mappings; callers that need different tables pass an
override through the import config (``category_maps``) instead of mutating
these.
"""

__all__ = [
    "SOFTWARE_CATEGORIES",
    "CYBER_CATEGORIES",
    "DATA_CONTENT_CATEGORIES",
    "default_category_map",
    "resolve_category_map",
]

SOFTWARE_CATEGORIES: Mapping[str, str] = MappingProxyType({
    "006004002001001": "操作系统",
    "006004002001002": "数据库系统",
    "006004002001003": "中间件",
    "006004002001004": "软件开发环境",
    "006004002002001": "网络通信软件",
    "006004002002002": "文档处理软件",
    "006004002002003": "图形图像软件",
    "006004002002004": "数据处理软件",
    "006004002002005": "模型算法软件",
    "006004002002006": "地理信息系统",
    "006004002002007": "移动应用软件",
    "006004002002008": "安全防护软件",
    "006004002002009": "设备管理软件",
    "006004002003001": "作战指挥软件",
    "006004002003002": "业务管理软件",
    "006004002003003": "日常办公软件",
})

CYBER_CATEGORIES: Mapping[str, str] = MappingProxyType({
    "006004001001": "自动电话号码",
    "006004001002": "人工电话号码",
    "006004001003": "保密电话号码",
    "006004001004": "移动手机号码",
    "006004001005": "有线信道",
    "006004001006": "光缆纤芯",
    "006004001007": "骨干网节点互联网络地址",
    "006004001008": "骨干网节点设备管理地址",
    "006004001009": "网络地址",
    "006004001010": "文电名录",
    "006004001011": "军事网络域名",
    "006004001012": "互联网域名",
    "006004001014": "无线电报代号",
    "006004001015": "电磁频谱",
    "006004001016": "数据中心计算资产",
    "006004001017": "数据中心存储资产",
    "006004001999": "其他网信基础资产",
})

DATA_CONTENT_CATEGORIES: Mapping[str, str] = MappingProxyType({
    "006004003": "数据内容资产",
})

_DEFAULTS: dict[AssetType, Mapping[str, str]] = {
    AssetType.SOFTWARE: SOFTWARE_CATEGORIES,
    AssetType.CYBER: CYBER_CATEGORIES,
    AssetType.DATA_CONTENT: DATA_CONTENT_CATEGORIES,
}


def default_category_map(asset_type: AssetType) -> Mapping[str, str]:
    return _DEFAULTS[asset_type]


def resolve_category_map(
    asset_type: AssetType, overrides: Mapping[str, Mapping[str, str]] | None = None
) -> Mapping[str, str]:
    """Return the category map for an asset type.

    An override replaces the whole default table for that type (codes are
    trimmed, names kept as given).
    """
    if overrides and asset_type.value in overrides:
        table = {str(code).strip(): name for code, name in overrides[asset_type.value].items()}
        return MappingProxyType(table)
    return _DEFAULTS[asset_type]
