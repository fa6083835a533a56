"""
Dataset loader (CSV -> DataFrame of text)
=========================================

This module reads the storm events export and projects it down to the
columns the analysis needs.

Key ideas:
- Every cell is read as text. Exponent codes such as "0", "K" or "" must
  reach the validator verbatim, so no numeric or NaN coercion happens here.
- Compression is chosen from the file extension (.bz2, .gz, .xz, .zip).
  A streaming csv pass checks row widths first; pandas then reads the file
  itself with compression="infer".
- Structural problems are fatal: DatasetIOError for files that cannot be
  opened or decompressed, ParseError for malformed rows, SchemaError for
  missing columns.
"""

from __future__ import annotations
from typing import IO, Iterator
from contextlib import contextmanager
import bz2
import csv
import gzip
import io
import logging
import lzma
import os
import zipfile
import pandas as pd

from .errors import DatasetIOError, ParseError, SchemaError
from .schema import REQUIRED_COLUMNS

logger = logging.getLogger(__name__)

# The NOAA REMARKS column holds very long free text.
csv.field_size_limit(2 ** 31 - 1)


@contextmanager
def _open_text(path: str, encoding: str) -> Iterator[IO[str]]:
    """Open `path` as text, decompressing by extension."""
    ext = os.path.splitext(path)[1].lower()
    zf = None
    if ext == ".bz2":
        f = bz2.open(path, "rt", encoding=encoding, newline="")
    elif ext == ".gz":
        f = gzip.open(path, "rt", encoding=encoding, newline="")
    elif ext == ".xz":
        f = lzma.open(path, "rt", encoding=encoding, newline="")
    elif ext == ".zip":
        zf = zipfile.ZipFile(path)
        names = zf.namelist()
        if len(names) != 1:
            zf.close()
            raise DatasetIOError(f"Expected exactly one file inside {path}, found {len(names)}")
        f = io.TextIOWrapper(zf.open(names[0]), encoding=encoding, newline="")
    else:
        f = open(path, "r", encoding=encoding, newline="")
    try:
        yield f
    finally:
        f.close()
        if zf is not None:
            zf.close()


def _check_structure(f: IO[str], path: str) -> int:
    """Stream through the table and verify every row has the header's width.

    pandas pads short rows with blank cells, which would hide them from the
    validator, so the field count is checked here first.

    Returns:
        number of data rows.
    """
    reader = csv.reader(f)
    header = next(reader, None)
    if not header:
        raise ParseError(f"No header row in {path}")
    width = len(header)
    rows = 0
    for row in reader:
        if not row or (len(row) == 1 and not row[0].strip()):
            continue  # blank or whitespace-only line, skipped by pandas too
        rows += 1
        if len(row) != width:
            raise ParseError(
                f"Ragged row in {path}: line {reader.line_num} has {len(row)} fields, expected {width}"
            )
    return rows


def load_storm_table(path: str, encoding: str = "utf-8") -> pd.DataFrame:
    """Read a delimited, optionally compressed table with a header row.

    Returns:
        DataFrame where every cell is a str (blank cells are "").
    """
    if not os.path.isfile(path):
        raise DatasetIOError(f"Dataset file not found: {path}")
    try:
        with _open_text(path, encoding) as f:
            expected_rows = _check_structure(f, path)
        df = pd.read_csv(
            path,
            dtype=str,
            keep_default_na=False,
            na_filter=False,
            compression="infer",
            encoding=encoding,
        )
    except UnicodeDecodeError as e:
        raise ParseError(f"Cannot decode {path} as {encoding}: {e}") from e
    except csv.Error as e:
        raise ParseError(f"Malformed rows in {path}: {e}") from e
    except pd.errors.ParserError as e:
        raise ParseError(f"Malformed rows in {path}: {e}") from e
    except DatasetIOError:
        raise
    except (OSError, EOFError, lzma.LZMAError, zipfile.BadZipFile) as e:
        raise DatasetIOError(f"Cannot read {path}: {e}") from e

    if len(df) != expected_rows:
        raise ParseError(f"Row count mismatch in {path}: scanned {expected_rows}, parsed {len(df)}")

    logger.info("Loaded %s: %s rows, %d columns", os.path.basename(path), f"{len(df):,}", len(df.columns))
    return df


def prune_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Keep only REQUIRED_COLUMNS, in their fixed order.

    Names must match exactly. Row count and order are unchanged.
    """
    cols = list(df.columns)
    missing = [c for c in REQUIRED_COLUMNS if c not in cols]
    if missing:
        raise SchemaError(missing, cols)
    out = df[REQUIRED_COLUMNS].copy()
    logger.info("Column selection: kept %d of %d columns", len(REQUIRED_COLUMNS), len(cols))
    return out
