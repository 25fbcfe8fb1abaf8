from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.validation_error import ValidationError

"""Error log buffering.

- JSON Lines, one ValidationError per line (wire keys of the result payload)
- One ``logs/import-errors-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on
  the first non-empty flush
"""

__all__ = [
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for row errors. flush() appends them as JSON Lines.

    单线程使用, 不做加锁
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ValidationError] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"import-errors-{stamp}.log"
        return self._file_path

    def append(self, record: ValidationError) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ValidationError]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path, None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
