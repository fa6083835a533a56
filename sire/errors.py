"""
Error taxonomy
==============

Structural problems are fatal and raised as one of the errors below.
Row-level noise (bad exponent codes, bad dates) is never raised: those rows
are dropped or nulled by the cleaning stages instead.

All errors derive from `SireError`, so the CLI can catch them in one place.
"""

from __future__ import annotations
from typing import List


class SireError(Exception):
    """Base class for every error raised by the pipeline."""


class DatasetIOError(SireError, OSError):
    """The input file is missing, unreadable or cannot be decompressed."""


class ParseError(SireError, ValueError):
    """The table structure is malformed (ragged rows, bad encoding, no header)."""


class SchemaError(SireError, KeyError):
    """One or more required columns are absent after loading."""

    def __init__(self, missing: List[str], available: List[str]) -> None:
        self.missing = list(missing)
        self.available = list(available)
        super().__init__(f"Missing required columns: {self.missing}. Available={self.available}")

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0])


class DomainError(SireError, ValueError):
    """An exponent suffix reached the scaler without being in its table."""
