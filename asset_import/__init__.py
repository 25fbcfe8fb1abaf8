"""Excel bulk-import validation for military unit asset records."""

__version__ = "0.1.0"
