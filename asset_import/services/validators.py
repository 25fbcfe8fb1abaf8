from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from numbers import Integral, Real
from typing import Any

import pandas as pd

from ..models.asset_types import AssetProfile, FieldViolation
from ..models.import_row import ImportRow

"""Field validators for imported asset rows.

Every check is a pure function of one row returning a list of
(field name, message fragment) pairs. validate_fields() runs all checks of a
profile independently, so a row with several problems reports all of them
at once. Blank values are only reported by the required-field rule; format
and enum rules skip them.
"""

__all__ = [
    "LEGAL_SERVICE_STATUS",
    "LEGAL_DEVELOPMENT_TOOLS",
    "LEGAL_UPDATE_CYCLES",
    "LEGAL_UPDATE_METHODS",
    "to_int",
    "to_date",
    "to_number",
    "check_required_fields",
    "check_actual_quantity",
    "check_date_present",
    "check_date_floor",
    "check_category",
    "check_service_status",
    "check_amounts",
    "check_used_quantity",
    "check_development_tool",
    "check_update_options",
    "validate_fields",
]

LEGAL_SERVICE_STATUS = ("在用", "闲置", "报废", "封闭")
LEGAL_DEVELOPMENT_TOOLS = (
    "Oracle", "HDFS", "MySql", "SQL Server", "达梦", "高斯",
    "南大通用", "其他", "人大金仓", "神州通用",
)
LEGAL_UPDATE_CYCLES = ("每月", "每年", "不更新", "每半年", "每季度", "每天", "其他", "实时")
LEGAL_UPDATE_METHODS = ("在线填报", "离线填报", "其他", "商业购置", "上级请领", "自动采集")

_INT_TEXT = re.compile(r"^[+-]?\d+(\.0+)?$")
_DATE_FORMATS = ("%Y/%m/%d", "%Y/%m/%d %H:%M:%S")


# ---------------------------------------------------------------- converters

def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def to_int(value: Any) -> int | None:
    """Convert a cell value to int.

    Returns None for blank cells. Raises ValueError for anything that is not
    a whole number (``5``, ``5.0`` and ``"5"`` are accepted).
    """
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"not an integer: {value!r}")
    if isinstance(value, Integral):
        return int(value)
    if isinstance(value, Real):
        as_float = float(value)
        if as_float.is_integer():
            return int(as_float)
        raise ValueError(f"not an integer: {value!r}")
    text = str(value).strip()
    if _INT_TEXT.match(text):
        return int(text.split(".", 1)[0])
    raise ValueError(f"not an integer: {value!r}")


def to_number(value: Any) -> float | None:
    """Convert a cell value to float; None for blank, ValueError otherwise."""
    if _is_blank(value):
        return None
    if isinstance(value, bool):
        raise ValueError(f"not a number: {value!r}")
    if isinstance(value, Real):
        result = float(value)
    else:
        result = float(str(value).strip())
    # nan / inf 不是合法金额
    if not math.isfinite(result):
        raise ValueError(f"not a finite number: {value!r}")
    return result


def to_date(value: Any) -> date | None:
    """Convert a cell value to a date.

    Accepts date / datetime / pandas Timestamp cells and text such as
    ``1950-01-01`` or ``1950/01/01``. Returns None for blank cells, raises
    ValueError for anything else.
    """
    if _is_blank(value):
        return None
    # Timestamp 是 datetime 的子类
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        # pandas Timestamp 不支持 1677 年之前的日期
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        try:
            parsed = pd.to_datetime(text, errors="raise")
        except (ValueError, TypeError, OverflowError) as e:
            raise ValueError(f"not a date: {value!r}") from e
        if pd.isna(parsed):
            raise ValueError(f"not a date: {value!r}")
        return parsed.date()
    raise ValueError(f"not a date: {value!r}")


# -------------------------------------------------------------------- checks

def check_required_fields(row: ImportRow, profile: AssetProfile) -> list[FieldViolation]:
    return [
        (f.name, f"{f.label}为空")
        for f in profile.required_fields
        if row.text(f.name) is None
    ]


def check_actual_quantity(row: ImportRow) -> list[FieldViolation]:
    raw = row.get("actualQuantity")
    try:
        quantity = to_int(raw)
    except ValueError:
        return [("actualQuantity", f"实有数量需为非负整数（当前：{raw}）")]
    if quantity is None:
        return [("actualQuantity", "实有数量为空")]
    if quantity < 0:
        return [("actualQuantity", f"实有数量需为非负整数（当前：{quantity}）")]
    return []


def check_date_present(row: ImportRow, profile: AssetProfile) -> list[FieldViolation]:
    if profile.date_field is None:
        return []
    raw = row.get(profile.date_field)
    if _is_blank(raw):
        return [(profile.date_field, "投入使用日期为空")]
    try:
        to_date(raw)
    except ValueError:
        return [(profile.date_field, f"投入使用日期格式错误（当前：{raw}）")]
    return []


def check_date_floor(row: ImportRow, profile: AssetProfile) -> list[FieldViolation]:
    """Reject dates before the historical floor; blank/unparseable are skipped."""
    if profile.date_field is None:
        return []
    try:
        put_date = to_date(row.get(profile.date_field))
    except ValueError:
        return []
    if put_date is not None and put_date < profile.date_floor:
        floor = profile.date_floor.isoformat()
        return [(profile.date_field, f"投入使用日期非法（需>={floor}）")]
    return []


def check_category(row: ImportRow, category_map: Mapping[str, str]) -> list[FieldViolation]:
    """Cross-check categoryCode against assetCategory.

    Only runs when both are non-blank; blanks are the required rule's job.
    """
    code = row.text("categoryCode")
    category = row.text("assetCategory")
    if code is None or category is None:
        return []
    legal = category_map.get(code)
    if legal is None:
        return [("categoryCode", f"分类编码非法（当前值：{code}）")]
    if legal != category:
        return [(
            "categoryCode,assetCategory",
            f"分类不匹配（编码{code}对应：{legal}，Excel分类：{category}）",
        )]
    return []


def _check_enum(
    row: ImportRow, field: str, label: str, legal: Sequence[str]
) -> list[FieldViolation]:
    value = row.text(field)
    if value is not None and value not in legal:
        return [(field, f"{label}非法（当前值：{value}，仅允许：{'、'.join(legal)}）")]
    return []


def check_service_status(row: ImportRow, profile: AssetProfile) -> list[FieldViolation]:
    if profile.status_field is None:
        return []
    return _check_enum(row, profile.status_field, "服务状态", profile.legal_statuses)


def check_amounts(row: ImportRow) -> list[FieldViolation]:
    """unitPrice / amount are optional but must be non-negative when filled."""
    violations: list[FieldViolation] = []
    for field, label in (("unitPrice", "单价"), ("amount", "金额")):
        raw = row.get(field)
        try:
            number = to_number(raw)
        except ValueError:
            violations.append((field, f"{label}需为非负数（当前：{raw}）"))
            continue
        if number is not None and number < 0:
            violations.append((field, f"{label}需为非负数（当前：{raw}）"))
    return violations


# -------------------------------------------------------- type-specific rules

def check_used_quantity(row: ImportRow) -> list[FieldViolation]:
    """Cyber assets: usedQuantity is required and may not exceed actualQuantity."""
    raw = row.get("usedQuantity")
    try:
        used = to_int(raw)
    except ValueError:
        return [("usedQuantity", f"已用数量需为非负整数（当前：{raw}）")]
    if used is None:
        return [("usedQuantity", "已用数量为空")]
    if used < 0:
        return [("usedQuantity", f"已用数量需为非负整数（当前：{used}）")]
    try:
        actual = to_int(row.get("actualQuantity"))
    except ValueError:
        # reported by check_actual_quantity
        return []
    if actual is not None and used > actual:
        return [("usedQuantity", f"已用数量超限（已用：{used}，实有：{actual}）")]
    return []


def check_development_tool(row: ImportRow) -> list[FieldViolation]:
    return _check_enum(row, "developmentTool", "开发工具", LEGAL_DEVELOPMENT_TOOLS)


def check_update_options(row: ImportRow) -> list[FieldViolation]:
    return (
        _check_enum(row, "updateCycle", "更新周期", LEGAL_UPDATE_CYCLES)
        + _check_enum(row, "updateMethod", "更新方式", LEGAL_UPDATE_METHODS)
    )


# --------------------------------------------------------------------- entry

def validate_fields(row: ImportRow, profile: AssetProfile) -> list[FieldViolation]:
    """Run every rule of the profile and return all violations in rule order."""
    violations: list[FieldViolation] = []
    violations += check_required_fields(row, profile)
    violations += check_actual_quantity(row)
    violations += check_date_present(row, profile)
    violations += check_category(row, profile.category_map)
    violations += check_service_status(row, profile)
    violations += check_date_floor(row, profile)
    violations += check_amounts(row)
    for rule in profile.extra_rules:
        violations += rule(row)
    return violations
