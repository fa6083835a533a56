"""Unit tests for loading and column pruning."""

from __future__ import annotations

import gzip
import lzma
import zipfile

import pandas as pd
import pytest

from sire.errors import DatasetIOError, ParseError, SchemaError
from sire.loader import load_storm_table, prune_columns
from sire.schema import REQUIRED_COLUMNS
from tests.factories import HEADER, ROWS


def test_load_plain_csv_keeps_every_cell_as_text(storm_csv) -> None:
    df = load_storm_table(storm_csv)

    assert list(df.columns) == HEADER
    assert len(df) == len(ROWS)
    assert all(df[c].map(type).eq(str).all() for c in df.columns)
    # exponent codes and blanks survive verbatim
    assert df["PROPDMGEXP"].tolist() == [r[6] for r in ROWS]
    assert df.loc[2, "PROPDMG"] == ""
    assert df.loc[0, "REMARKS"] == "touchdown, near town"


def test_load_bz2_matches_plain(storm_csv, storm_bz2) -> None:
    pd.testing.assert_frame_equal(load_storm_table(storm_bz2), load_storm_table(storm_csv))


def test_load_gzip(tmp_path, raw) -> None:
    path = tmp_path / "storm.csv.gz"
    with gzip.open(path, "wt", encoding="utf-8", newline="") as f:
        raw.to_csv(f, index=False)

    assert len(load_storm_table(str(path))) == len(ROWS)


def test_load_xz(tmp_path, raw) -> None:
    path = tmp_path / "storm.csv.xz"
    with lzma.open(path, "wt", encoding="utf-8", newline="") as f:
        raw.to_csv(f, index=False)

    assert len(load_storm_table(str(path))) == len(ROWS)


def test_load_single_member_zip(tmp_path, raw, storm_csv) -> None:
    path = tmp_path / "storm.csv.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("storm.csv", raw.to_csv(index=False))

    pd.testing.assert_frame_equal(load_storm_table(str(path)), load_storm_table(storm_csv))


def test_zip_with_two_members_raises_io_error(tmp_path, raw) -> None:
    path = tmp_path / "storm.zip"
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("a.csv", raw.to_csv(index=False))
        zf.writestr("b.csv", raw.to_csv(index=False))

    with pytest.raises(DatasetIOError, match="exactly one file"):
        load_storm_table(str(path))


def test_whitespace_only_lines_are_skipped(tmp_path, raw) -> None:
    lines = raw.to_csv(index=False).splitlines()
    lines.insert(3, "   ")
    lines.append(" \t ")
    path = tmp_path / "padded.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    df = load_storm_table(str(path))

    assert len(df) == len(ROWS)
    assert df["EVTYPE"].tolist() == raw["EVTYPE"].tolist()


def test_header_only_gives_empty_frame(tmp_path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text(",".join(HEADER) + "\n", encoding="utf-8")

    df = load_storm_table(str(path))
    assert df.empty
    assert list(df.columns) == HEADER


def test_missing_file_raises_io_error(tmp_path) -> None:
    with pytest.raises(DatasetIOError) as exc:
        load_storm_table(str(tmp_path / "nope.csv.bz2"))
    assert isinstance(exc.value, OSError)


def test_corrupt_compressed_file_raises_io_error(tmp_path) -> None:
    path = tmp_path / "broken.csv.bz2"
    path.write_bytes(b"this is not bzip2 data")

    with pytest.raises(DatasetIOError):
        load_storm_table(str(path))


def test_corrupt_gzip_raises_io_error(tmp_path) -> None:
    path = tmp_path / "broken.csv.gz"
    path.write_bytes(b"not gzip data")

    with pytest.raises(DatasetIOError):
        load_storm_table(str(path))


def test_empty_file_raises_parse_error(tmp_path) -> None:
    path = tmp_path / "blank.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ParseError):
        load_storm_table(str(path))


@pytest.mark.parametrize(
    "line",
    [
        "1,5/2/1995 0:00:00,TORNADO,1,10,25,K,0,,x,EXTRA",  # too many fields
        "1,5/2/1995 0:00:00,TORNADO,1,10,25,K",  # too few fields
    ],
)
def test_ragged_row_raises_parse_error(tmp_path, line) -> None:
    good = ",".join(ROWS[1])
    path = tmp_path / "ragged.csv"
    path.write_text("\n".join([",".join(HEADER), good, line, good]) + "\n", encoding="utf-8")

    with pytest.raises(ParseError, match="Ragged row"):
        load_storm_table(str(path))


def test_undecodable_bytes_raise_parse_error(tmp_path) -> None:
    path = tmp_path / "latin.csv"
    path.write_bytes((",".join(HEADER) + "\n").encode() + b"1,5/2/1995 0:00:00,TORN\xe9ADO,1,10,25,K,0,,\xff\n")

    with pytest.raises(ParseError):
        load_storm_table(str(path))


def test_prune_projects_to_fixed_order(raw) -> None:
    shuffled = raw[list(reversed(raw.columns))]

    pruned = prune_columns(shuffled)

    assert list(pruned.columns) == REQUIRED_COLUMNS
    assert len(pruned) == len(raw)
    assert pruned["EVTYPE"].tolist() == raw["EVTYPE"].tolist()
    # input untouched
    assert "REMARKS" in shuffled.columns


def test_prune_reports_every_missing_column(raw) -> None:
    renamed = raw.drop(columns=["CROPDMGEXP"]).rename(columns={"EVTYPE": "evtype"})

    with pytest.raises(SchemaError) as exc:
        prune_columns(renamed)

    assert exc.value.missing == ["EVTYPE", "CROPDMGEXP"]
    assert "EVTYPE" in str(exc.value)
