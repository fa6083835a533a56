"""Tests for chart selection and rendering (matplotlib Agg backend)."""

from __future__ import annotations

import os

import pytest

from sire.config import OutlierThresholds
from sire.models import AggregatedEventStats
from sire.pipeline import run_pipeline
from sire.report import (
    generate_docx_report,
    plot_damage_dots,
    plot_impact_scatter,
    render_charts,
    select_outliers,
    year_counts,
)
from tests.factories import WINDOW_1995

pytest.importorskip("matplotlib")


def _stats(label, injuries, fatalities, prop=0.0, crop=0.0):
    return AggregatedEventStats(label, 1, injuries, fatalities, prop, crop)


def test_select_outliers_uses_either_threshold() -> None:
    stats = [
        _stats("TORNADO", 91000, 5600),
        _stats("EXCESSIVE HEAT", 6500, 1900),
        _stats("FLASH FLOOD", 1700, 970),
        _stats("ICE STORM", 2600, 90),
        _stats("HAIL", 1300, 15),
        _stats("EDGE", 2500, 350),
    ]

    labels = [s.event_type for s in select_outliers(stats, OutlierThresholds())]

    assert labels == ["TORNADO", "EXCESSIVE HEAT", "FLASH FLOOD", "ICE STORM"]


def test_custom_thresholds() -> None:
    stats = [_stats("A", 10, 1), _stats("B", 1, 10)]

    assert [s.event_type for s in select_outliers(stats, OutlierThresholds(fatalities=5, injuries=100))] == ["B"]


def test_year_counts_skip_undated_records(storm_csv) -> None:
    result = run_pipeline(storm_csv, WINDOW_1995)

    assert sorted(year_counts(result.records)) == [1950, 1995, 1998, 2000, 2001]


def test_render_charts_writes_pngs(storm_csv, tmp_path) -> None:
    result = run_pipeline(storm_csv, WINDOW_1995)

    charts = render_charts(result, str(tmp_path / "charts"))

    names = [os.path.basename(path) for _, path, _ in charts]
    assert names == ["events_per_year.png", "impact_scatter.png", "damage_dots.png"]
    for _, path, why in charts:
        assert os.path.getsize(path) > 0
        assert why


def test_charts_skip_empty_input(tmp_path) -> None:
    assert plot_impact_scatter([], str(tmp_path / "a.png")) is None
    assert plot_damage_dots([_stats("CALM", 0, 0)], str(tmp_path / "b.png")) is None
    assert not os.path.exists(tmp_path / "a.png")


def test_generate_docx_report(storm_bz2, tmp_path) -> None:
    pytest.importorskip("docx")
    result = run_pipeline(storm_bz2, WINDOW_1995)
    out = tmp_path / "out" / "report.docx"

    path = generate_docx_report(result, str(out))

    assert path == str(out)
    assert out.stat().st_size > 0
    assert (tmp_path / "out" / "report_charts" / "damage_dots.png").exists()

    from docx import Document
    text = "\n".join(p.text for p in Document(str(out)).paragraphs)
    assert "storm.csv.bz2" in text
    assert "1995-01-01" in text
