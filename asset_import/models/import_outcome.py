from __future__ import annotations

from dataclasses import dataclass

from .duplicate_record import DuplicateRecord
from .import_row import ImportRow
from .validation_error import ValidationError

"""ImportOutcome: the frozen result of one pipeline run."""

__all__ = [
    "ImportOutcome",
]


@dataclass(frozen=True)
class ImportOutcome:
    """Valid rows, errors and duplicates of one import session.

    Every input row lands in exactly one of valid_rows, errors or
    duplicate_records. errors[0] is the INFO duplicate summary when
    duplicate_count > 0.
    """
    valid_rows: tuple[ImportRow, ...]
    errors: tuple[ValidationError, ...]
    duplicate_count: int
    duplicate_records: tuple[DuplicateRecord, ...]

    @property
    def critical_errors(self) -> list[ValidationError]:
        return [e for e in self.errors if e.is_critical]
