from __future__ import annotations

import argparse
import json
import os
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import psycopg2
from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, ImportConfig, load_config
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.asset_types import AssetType
from ..services.importer import MODES, ImportReport, run_import
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m asset_import.cli --type software --file 软件资产.xlsx

Exit codes:
- 0: every row imported (skipped duplicates do not count as failures)
- 2: the session completed but some rows were rejected
- 1: fatal (config error, unreadable file, database failure)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _build_dsn(cfg: ImportConfig) -> str:
    """Resolve connection parameters.

    优先级: .env (main() 中以 override 方式加载) / 进程环境变量
    (DATABASE_URL, PGDSN 或 PGHOST 等) > config 的 database 段
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (needs a live database)
    """Provide a psycopg2 cursor; the importer issues BEGIN/COMMIT itself."""
    conn = psycopg2.connect(_build_dsn(cfg))
    conn.autocommit = True
    try:
        cur = conn.cursor()
        try:
            yield cur
        finally:
            cur.close()
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; values override the process environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Excel -> PostgreSQL asset importer")
    p.add_argument(
        "--type",
        required=True,
        choices=[t.value for t in AssetType],
        dest="asset_type",
        help="Target asset table",
    )
    p.add_argument("--file", required=True, type=Path, help="Excel workbook to import")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--mode", choices=MODES, default=None, help="Override the configured import mode")
    p.add_argument("--dry-run", action="store_true", help="Validate only, never write to the database")
    p.add_argument("--output", type=Path, default=None, help="Write the result JSON to this file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _write_result(report: ImportReport, output: Path | None) -> None:
    payload = json.dumps(report.result.to_dict(), ensure_ascii=False, indent=2)
    if output is None:
        print(payload)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload + "\n", encoding="utf-8")


def _exit_code(report: ImportReport) -> int:
    result = report.result
    if not result.success or result.data is None:
        return EXIT_FATAL
    if result.data.import_summary.critical_errors > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # 仅当 argv 为 None 时读取 sys.argv (测试中传入 [] 时不混入 pytest 参数)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    asset_type = AssetType(args.asset_type)
    error_log = ErrorLogBuffer()

    # DISABLE_DB_CONNECT=1 时完全不连接数据库
    disable_db = os.getenv("DISABLE_DB_CONNECT") == "1"
    db_mode = "mock"
    report: ImportReport | None = None
    if disable_db:
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
    else:
        try:
            with _db_connection(cfg) as cur:
                db_mode = "live"
                report = run_import(
                    args.file, asset_type, cfg, cur,
                    mode=args.mode, dry_run=args.dry_run, error_log=error_log,
                )
        except psycopg2.Error as db_e:
            if report is not None:
                # 导入已完成, 只是关闭连接失败
                logger.warning(f"closing DB connection failed: {db_e}")
            else:
                logger.info(f"DB connection failed -> fallback to mock mode: {db_e}")
                db_mode = "mock"
    if report is None:
        report = run_import(
            args.file, asset_type, cfg, None,
            mode=args.mode, dry_run=args.dry_run, error_log=error_log,
        )

    logger.info(
        f"mode={db_mode} import_mode={args.mode or cfg.mode} inserted_rows={report.inserted_rows}"
    )
    if report.error_log_path is not None:
        logger.info(f"error log: {report.error_log_path}")
    logger.info(report.result.message)

    summary_line = render_summary_line(
        asset_type.value, report.result, report.elapsed_seconds, report.duplicate_count
    )
    # log_summary 会再加 "SUMMARY " 前缀
    log_summary(summary_line[len("SUMMARY "):])

    _write_result(report, args.output)
    return _exit_code(report)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
