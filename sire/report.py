"""
SIRE report renderer
--------------------
Turns a `PipelineResult` into charts (PNG) and a DOCX report.

The renderer does no numeric work of its own: it bins, places axes and
labels, and draws what the pipeline already computed.

Charts:
- histogram of events per year (all validated records),
- fatalities vs injuries per event type, with outliers labelled,
- dot/bubble plot of property damage per event type, bubble area = crop damage.

Report dependencies are imported lazily so the pipeline runs without them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import os
import math

from .aggregate import top_event_types
from .config import OutlierThresholds
from .models import AggregatedEventStats, StormRecord
from .pipeline import PipelineResult


# -----------------------------
# Configuration / citation types
# -----------------------------

@dataclass
class DatasetCitation:
    """Minimal dataset citation metadata for the DOCX report."""
    database_name: str = "Storm Events Database"
    institutional_author: str = "NOAA National Centers for Environmental Information"
    location: str = "Asheville, NC, USA"
    website: str = "https://www.ncdc.noaa.gov/stormevents/"
    file_name: Optional[str] = None
    file_note: Optional[str] = "Bulk export, 1950 to November 2011."


@dataclass
class ReportConfig:
    """High-level knobs to control how the report is written."""
    title: str = "Storm Impact Report"
    subtitle: str = "Human and economic impact of severe weather by event type"
    citation: DatasetCitation = field(default_factory=DatasetCitation)

    # How many rows to show in ranked tables
    table_rows: int = 10


def _import_pyplot():
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError as e:
        raise ImportError(
            "Missing dependency: matplotlib.\n"
            "Install it with: python -m pip install matplotlib"
        ) from e
    return plt


# -----------------------------
# Chart selection helpers
# -----------------------------

def select_outliers(stats: Sequence[AggregatedEventStats], thresholds: OutlierThresholds) -> List[AggregatedEventStats]:
    """Event types that get a text label in the impact scatter."""
    return [s for s in stats if s.fatalities > thresholds.fatalities or s.injuries > thresholds.injuries]


def year_counts(records: Sequence[StormRecord]) -> List[int]:
    """Years of every record with a parsed date (histogram input)."""
    return [r.occurrence_date.year for r in records if r.occurrence_date is not None]


# -----------------------------
# Charts
# -----------------------------

def plot_year_histogram(records: Sequence[StormRecord], out_path: str) -> Optional[str]:
    """Number of recorded events per year. Returns None when no record has a date."""
    years = year_counts(records)
    if not years:
        return None
    plt = _import_pyplot()
    lo, hi = min(years), max(years)
    plt.figure(figsize=(9, 4.5))
    # one bin per calendar year
    plt.hist(years, bins=range(lo, hi + 2), edgecolor="black", linewidth=0.5)
    plt.title("Recorded storm events per year")
    plt.xlabel("Year of occurrence")
    plt.ylabel("Events")
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close()
    return out_path


def plot_impact_scatter(
    stats: Sequence[AggregatedEventStats],
    out_path: str,
    thresholds: OutlierThresholds = OutlierThresholds(),
) -> Optional[str]:
    """Fatalities vs injuries, one point per event type; outliers annotated."""
    if not stats:
        return None
    plt = _import_pyplot()
    plt.figure(figsize=(9, 6))
    plt.scatter([s.injuries for s in stats], [s.fatalities for s in stats], alpha=0.6)
    for s in select_outliers(stats, thresholds):
        plt.annotate(s.event_type, (s.injuries, s.fatalities),
                     textcoords="offset points", xytext=(5, 5), fontsize=8)
    plt.axhline(thresholds.fatalities, color="grey", linestyle=":", linewidth=0.8)
    plt.axvline(thresholds.injuries, color="grey", linestyle=":", linewidth=0.8)
    plt.title("Fatalities vs injuries by event type")
    plt.xlabel("Injuries")
    plt.ylabel("Fatalities")
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close()
    return out_path


def plot_damage_dots(stats: Sequence[AggregatedEventStats], out_path: str, top_n: int = 15) -> Optional[str]:
    """Dot plot of property damage for the `top_n` costliest event types.

    Bubble area is proportional to crop damage, so event types that mostly
    hurt agriculture (drought, frost) stand out despite low property damage.
    """
    top = top_event_types(list(stats), top_n, "damage")
    top = [s for s in top if s.total_damage > 0]
    if not top:
        return None
    plt = _import_pyplot()

    # costliest at the top
    top = top[::-1]
    ys = list(range(len(top)))
    max_crop = max(s.crop_damage for s in top)
    sizes = [20 + 480 * (s.crop_damage / max_crop) if max_crop > 0 else 40 for s in top]

    plt.figure(figsize=(9, 0.4 * len(top) + 2))
    plt.hlines(ys, 0, [s.property_damage / 1e9 for s in top], color="lightgrey", linewidth=1)
    plt.scatter([s.property_damage / 1e9 for s in top], ys, s=sizes, alpha=0.7, edgecolor="black", linewidth=0.5)
    plt.yticks(ys, [s.event_type for s in top])
    plt.title("Property damage by event type (bubble area: crop damage)")
    plt.xlabel("Property damage (billion US$)")
    plt.tight_layout()
    plt.savefig(out_path, dpi=150)
    plt.close()
    return out_path


def render_charts(result: PipelineResult, out_dir: str) -> List[Tuple[str, str, str]]:
    """Render every chart into `out_dir`.

    Returns:
        list of (title, file_path, why_this_chart); charts with no data are skipped.
    """
    os.makedirs(out_dir, exist_ok=True)
    cfg = result.config
    charts: List[Tuple[str, str, str]] = []

    path = plot_year_histogram(result.records, os.path.join(out_dir, "events_per_year.png"))
    if path:
        charts.append((
            "Recorded storm events per year",
            path,
            "Recording coverage grows sharply over time; this motivates aggregating over a recent window only.",
        ))

    path = plot_impact_scatter(result.stats, os.path.join(out_dir, "impact_scatter.png"), cfg.outlier_thresholds)
    if path:
        charts.append((
            "Fatalities vs injuries by event type",
            path,
            "A scatter shows both human-impact measures at once; labelled points exceed "
            f"{cfg.outlier_thresholds.fatalities:g} fatalities or {cfg.outlier_thresholds.injuries:g} injuries.",
        ))

    path = plot_damage_dots(result.stats, os.path.join(out_dir, "damage_dots.png"), cfg.top_n)
    if path:
        charts.append((
            "Property damage by event type",
            path,
            "A dot plot ranks categories by cost; bubble area adds crop damage without a second axis.",
        ))
    return charts


# -----------------------------
# DOCX report
# -----------------------------

def _money(v: float) -> str:
    if not math.isfinite(v):
        return ""
    return f"{v:,.0f}"


def generate_docx_report(result: PipelineResult, out_path: str, *, config: Optional[ReportConfig] = None) -> str:
    """Generate a DOCX report (charts + tables) for a PipelineResult."""
    config = config or ReportConfig()

    try:
        from docx import Document
        from docx.shared import Pt, Inches
        from docx.enum.text import WD_ALIGN_PARAGRAPH
    except ImportError as e:
        raise ImportError(
            "Missing dependency: python-docx.\n"
            "Install it with: python -m pip install python-docx"
        ) from e

    file_name = config.citation.file_name
    if file_name is None and result.dataset_path:
        file_name = os.path.basename(result.dataset_path)

    out_dir = os.path.dirname(os.path.abspath(out_path))
    stem = os.path.splitext(os.path.basename(out_path))[0]
    charts = render_charts(result, os.path.join(out_dir, f"{stem}_charts"))

    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    def _center_title(text: str, size: int, bold: bool = False, italic: bool = False) -> None:
        p = doc.add_paragraph()
        r = p.add_run(text)
        r.bold = bold
        r.italic = italic
        r.font.size = Pt(size)
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    def _kv(key: str, value: str) -> None:
        p = doc.add_paragraph()
        r = p.add_run(f"{key}: ")
        r.bold = True
        p.add_run(value)

    _center_title(config.title, 22, bold=True)
    _center_title(config.subtitle, 12, italic=True)

    doc.add_paragraph("")
    audit = result.audit
    window = result.window_start.strftime("%Y-%m-%d") if result.window_start else "all dated records"
    _kv("Dataset", config.citation.database_name)
    if file_name:
        _kv("Data file", file_name)
    if config.citation.file_note:
        _kv("File note", config.citation.file_note)
    _kv("Aggregation window", f"events on or after {window}")
    _kv("Event types in window", str(len(result.stats)))

    # Row accounting
    doc.add_heading("Data processing", level=1)
    doc.add_paragraph(
        "Rows whose damage exponent is not one of '', K, M or B (any case) are dropped. "
        "Dates that cannot be parsed are treated as missing and fall outside the window."
    )
    t = doc.add_table(rows=1, cols=2)
    t.rows[0].cells[0].text = "Step"
    t.rows[0].cells[1].text = "Rows"
    for k, v in [
        ("Loaded", audit.rows_loaded),
        ("Dropped (invalid exponent)", audit.rows_dropped_by_exponent),
        ("After exponent filter", audit.rows_validated),
        ("Unparseable dates", audit.unparsed_dates),
        ("In aggregation window", audit.rows_in_window),
    ]:
        row = t.add_row().cells
        row[0].text = k
        row[1].text = f"{v:,}"

    # Visualizations
    doc.add_heading("Visualizations", level=1)
    for title, path, why in charts:
        doc.add_paragraph(title)
        doc.add_picture(path, width=Inches(6.5))
        doc.add_paragraph("Why this graph is suitable: " + why)

    # Ranked tables
    doc.add_heading("Most harmful event types", level=1)
    for label, fld in [("fatalities", "fatalities"), ("injuries", "injuries"), ("total economic damage", "damage")]:
        top = top_event_types(result.stats, config.table_rows, fld)
        if not top:
            continue
        doc.add_paragraph(f"Top {len(top)} event types by {label}")
        tt = doc.add_table(rows=1, cols=6)
        h = tt.rows[0].cells
        h[0].text = "Event type"
        h[1].text = "Events"
        h[2].text = "Fatalities"
        h[3].text = "Injuries"
        h[4].text = "Property damage (US$)"
        h[5].text = "Crop damage (US$)"
        for s in top:
            r = tt.add_row().cells
            r[0].text = s.event_type
            r[1].text = f"{s.events:,}"
            r[2].text = f"{s.fatalities:,.0f}"
            r[3].text = f"{s.injuries:,.0f}"
            r[4].text = _money(s.property_damage)
            r[5].text = _money(s.crop_damage)
        doc.add_paragraph("")

    doc.add_heading("Notes", level=1)
    doc.add_paragraph(
        "Event types are grouped by their exact label in the source data; "
        "synonyms such as 'TSTM WIND' and 'THUNDERSTORM WIND' are counted separately "
        "unless an alias table was configured."
    )

    # Reproducibility footer
    doc.add_heading("Reproducibility footer", level=1)
    from . import __version__ as sire_version
    from datetime import datetime as _dt
    doc.add_paragraph(f"SIRE version: {sire_version}")
    doc.add_paragraph(f"Report generated at: {_dt.now().isoformat(timespec='seconds')}")
    cit = config.citation
    doc.add_paragraph(f"{cit.institutional_author}. {cit.database_name}. {cit.location}. {cit.website}.")

    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    doc.save(out_path)
    return out_path
