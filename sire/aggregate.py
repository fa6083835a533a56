"""
Time-window aggregation
=======================

The last numeric stage of the pipeline:

1) restrict rows to the recency window (OccurrenceDate >= window start)
2) group by EVTYPE
3) sum injuries, fatalities, property and crop damage per group

Early decades of the storm database record few event types, so totals are
computed over a trailing window only. Missing damages count as 0 in the
sums; a row with no damage figure still contributes its injuries and
fatalities.
"""

from __future__ import annotations
from datetime import datetime
from typing import Callable, List, Optional
import heapq
import logging
import pandas as pd

from . import schema
from .config import WINDOW_YEARS
from .models import AggregatedEventStats

logger = logging.getLogger(__name__)


def resolve_window_start(df: pd.DataFrame, configured: Optional[datetime]) -> Optional[datetime]:
    """Return the configured start, or latest OccurrenceDate minus WINDOW_YEARS.

    Returns None only when no configured start exists and no date parsed.
    """
    if configured is not None:
        return configured
    latest = df[schema.OCCURRENCE_DATE].max()
    if pd.isna(latest):
        return None
    start = (latest - pd.DateOffset(years=WINDOW_YEARS)).to_pydatetime()
    logger.info("Derived window start %s from latest record %s", start.date(), latest.date())
    return start


def filter_window(df: pd.DataFrame, start: Optional[datetime]) -> pd.DataFrame:
    """Keep rows with OccurrenceDate >= start. Rows without a date never qualify."""
    dates = df[schema.OCCURRENCE_DATE]
    mask = dates.notna()
    if start is not None:
        mask &= dates >= pd.Timestamp(start)
    out = df[mask].copy()
    logger.info(
        "Window filter (start=%s): kept %s of %s rows",
        start.date() if start is not None else "any", f"{len(out):,}", f"{len(df):,}",
    )
    return out


def aggregate_by_event_type(df: pd.DataFrame) -> pd.DataFrame:
    """Sum the four impact measures per event type.

    Returns:
        DataFrame with columns EVTYPE, events, INJURIES, FATALITIES,
        PropertyDamage, CropDamage; one row per label present in `df`,
        sorted by label.
    """
    grouped = df.groupby(schema.EVTYPE, observed=True, sort=True)
    sums = grouped[schema.MEASURES].sum(min_count=0)
    sums.insert(0, schema.EVENTS, grouped.size())
    out = sums.reset_index()
    out[schema.EVTYPE] = out[schema.EVTYPE].astype(str)
    out = out.sort_values(schema.EVTYPE, kind="mergesort").reset_index(drop=True)
    logger.info("Aggregated %s rows into %d event types", f"{len(df):,}", len(out))
    return out


# ---------------- Ranking ----------------

def _field_key(field: str) -> Callable[[AggregatedEventStats], float]:
    f = field.lower().strip()
    if f in ("injuries",):
        return lambda s: s.injuries
    if f in ("fatalities", "deaths"):
        return lambda s: s.fatalities
    if f in ("property", "property_damage"):
        return lambda s: s.property_damage
    if f in ("crop", "crop_damage"):
        return lambda s: s.crop_damage
    if f in ("damage", "total_damage"):
        return lambda s: s.total_damage
    if f in ("events", "count"):
        return lambda s: float(s.events)
    raise ValueError("field must be: injuries, fatalities, property, crop, damage, events")


def top_event_types(stats: List[AggregatedEventStats], k: int, field: str) -> List[AggregatedEventStats]:
    """Top-k event types by `field`, largest first (ties broken by label)."""
    key = _field_key(field)
    if k <= 0:
        return []
    heap: List[tuple] = []
    for i, s in enumerate(stats):
        # negative index keeps the earlier (alphabetical) label on ties
        item = (key(s), -i)
        if len(heap) < k:
            heapq.heappush(heap, item)
        elif item > heap[0]:
            heapq.heapreplace(heap, item)
    heap.sort(reverse=True)
    return [stats[-neg_i] for _, neg_i in heap]
