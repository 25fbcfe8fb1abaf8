from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""Batched INSERT of validated asset rows.

psycopg2.extras.execute_values sends the rows in pages of page_size. Column
and table names are quoted identifiers taken from the profile, never from
user input.
"""

__all__ = [
    "BatchInsertError",
    "InsertResult",
    "batch_insert",
]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    elapsed_seconds: float = 0.0


def _quote_ident(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    page_size: int = 1000,
) -> InsertResult:
    """Perform batched INSERT using psycopg2.extras.execute_values.

    Parameters
    ----------
    cursor: psycopg2 cursor (transaction handled by the caller)
    table: 目标表名
    columns: 插入列 (snake_case 列名)
    rows: 行值序列, 顺序与 columns 一致
    page_size: execute_values 的 page_size
    """
    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(_quote_ident(c) for c in columns)
    sql = f"INSERT INTO {_quote_ident(table)} ({cols_sql}) VALUES %s"

    start_time = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    return InsertResult(inserted_rows=len(rows_list), elapsed_seconds=time.time() - start_time)
