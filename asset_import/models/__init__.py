"""Domain models for the asset Excel import pipeline.

This package contains the row, error and result types shared by the reader,
the validation pipeline and the result aggregator.
"""

from .asset_types import AssetProfile, AssetType, RequiredField
from .duplicate_record import DuplicateRecord
from .import_outcome import ImportOutcome
from .import_result import ImportData, ImportResult, ImportSummary, SuccessRecord
from .import_row import ImportRow
from .validation_error import ErrorKind, Severity, ValidationError

__all__ = [
    # Configuration models
    "AssetProfile",
    "AssetType",
    "RequiredField",
    # Processing models
    "ImportRow",
    "ValidationError",
    "ErrorKind",
    "Severity",
    "DuplicateRecord",
    "ImportOutcome",
    # Result payload
    "ImportResult",
    "ImportData",
    "ImportSummary",
    "SuccessRecord",
]
