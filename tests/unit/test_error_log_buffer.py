from __future__ import annotations

import json
import re
from pathlib import Path

from asset_import.logging.error_log import ErrorLogBuffer
from asset_import.models.validation_error import ErrorKind, Severity, ValidationError


def _err(row: int) -> ValidationError:
    return ValidationError(row, "id", f"第{row}行：资产ID为空；", Severity.CRITICAL, ErrorKind.MISSING_ID)


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(_err(3))
    buf.extend([_err(4), _err(5)])
    assert len(buf) == 3
    path = buf.flush()
    assert path is not None
    assert re.fullmatch(r"import-errors-\d{8}-\d{6}\.log", path.name)
    assert path.parent.resolve() == (temp_workdir / "logs").resolve()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["excelRowNum"] for line in lines] == [3, 4, 5]
    assert "资产ID为空" in lines[0]
    assert len(buf) == 0


def test_flush_appends_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "out")
    buf.append(_err(3))
    first = buf.flush()
    buf.append(_err(4))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_flush_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "out")
    assert buf.flush() is None
    assert not (tmp_path / "out").exists()
