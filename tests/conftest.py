"""Shared fixtures: the sample table as a frame and as files on disk."""

from __future__ import annotations

import bz2

import pandas as pd
import pytest

from tests.factories import make_raw, make_typed


@pytest.fixture
def raw() -> pd.DataFrame:
    return make_raw()


@pytest.fixture
def typed(raw) -> pd.DataFrame:
    return make_typed(raw)


@pytest.fixture
def storm_csv(tmp_path, raw) -> str:
    path = tmp_path / "storm.csv"
    raw.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def storm_bz2(tmp_path, raw) -> str:
    path = tmp_path / "storm.csv.bz2"
    with bz2.open(path, "wt", encoding="utf-8", newline="") as f:
        raw.to_csv(f, index=False)
    return str(path)
