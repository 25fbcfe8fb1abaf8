from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError as SchemaValidationError

"""Config loader for the asset import tool.

Responsibilities:
- Load YAML config (config/import.yml by default)
- Validate against the bundled JSON schema (import_schema.json)
- Apply defaults for every optional key
"""

SCHEMA_PATH = Path(__file__).with_name("import_schema.json")
DEFAULT_CONFIG_PATH = Path("config/import.yml")

DEFAULT_HEADER_ROWS = 2
DEFAULT_DATE_FLOOR = date(1949, 10, 1)
DEFAULT_SUCCESS_RECORD_LIMIT = 100
DEFAULT_MAX_FILE_SIZE_MB = 100


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    tables: dict[str, str]  # asset type value -> table name
    mode: str = "clear"  # clear: 清空再导入 / incremental: 与库内数据比对
    header_rows: int = DEFAULT_HEADER_ROWS
    date_floor: date = DEFAULT_DATE_FLOOR
    success_record_limit: int = DEFAULT_SUCCESS_RECORD_LIMIT
    max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB
    category_maps: dict[str, dict[str, str]] = field(default_factory=dict)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails schema validation (missing required keys, wrong
            types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except SchemaValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _parse_date_floor(raw: str | None) -> date:
    if raw is None:
        return DEFAULT_DATE_FLOOR
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise ConfigError(f"invalid date_floor: {raw}") from e


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    # 未加引号的纯数字编码会被 YAML 读成 int (前导 0 丢失)，只接受字符串编码
    raw_maps = data.get("category_maps") or {}
    if isinstance(raw_maps, dict):
        for kind, table in raw_maps.items():
            if isinstance(table, dict) and any(not isinstance(code, str) for code in table):
                raise ConfigError(
                    f"config validation failed: category codes of '{kind}' must be quoted strings"
                )

    # 未加引号的日期会被 YAML 直接解析成 date
    if isinstance(data.get("date_floor"), date):
        data["date_floor"] = data["date_floor"].isoformat()

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return ImportConfig(
        tables=dict(data["tables"]),
        mode=data.get("mode", "clear"),
        header_rows=data.get("header_rows", DEFAULT_HEADER_ROWS),
        date_floor=_parse_date_floor(data.get("date_floor")),
        success_record_limit=data.get("success_record_limit", DEFAULT_SUCCESS_RECORD_LIMIT),
        max_file_size_mb=data.get("max_file_size_mb", DEFAULT_MAX_FILE_SIZE_MB),
        category_maps=data.get("category_maps", {}),
        database=db,
    )
