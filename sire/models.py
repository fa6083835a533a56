"""
Data model (StormRecord, AggregatedEventStats)
==============================================

The cleaning stages work on pandas DataFrames. Before rendering, the final
tables are converted into immutable records (`frozen=True`) so that:
- nothing downstream can modify the analysed data, and
- the renderer depends on plain Python objects rather than column names.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import pandas as pd

from . import schema


@dataclass(frozen=True)
class StormRecord:
    """One storm event row that survived exponent validation."""
    occurrence_date: Optional[datetime]
    event_type: str
    injuries: Optional[float]
    fatalities: Optional[float]
    property_damage_mantissa: Optional[float]
    property_damage_suffix: str
    crop_damage_mantissa: Optional[float]
    crop_damage_suffix: str
    # US$, mantissa * multiplier(suffix); None when the mantissa is missing
    property_damage: Optional[float]
    crop_damage: Optional[float]


@dataclass(frozen=True)
class AggregatedEventStats:
    """Impact totals for one event type inside the recency window."""
    event_type: str
    events: int
    injuries: float
    fatalities: float
    property_damage: float
    crop_damage: float

    @property
    def total_damage(self) -> float:
        return self.property_damage + self.crop_damage


def _to_float(x) -> Optional[float]:
    """Convert a cell to float, returning None if missing/invalid."""
    if x is None or pd.isna(x): return None
    try: return float(x)
    except (TypeError, ValueError): return None


def _to_datetime(x) -> Optional[datetime]:
    if x is None or pd.isna(x): return None
    return pd.Timestamp(x).to_pydatetime()


def _to_str(x) -> str:
    if x is None or pd.isna(x): return ""
    return str(x)


def records_from_frame(df: pd.DataFrame) -> List[StormRecord]:
    """Build StormRecords from a normalized, scaled frame.

    Columns are zipped instead of using iterrows(), which is far too slow for
    the ~900k rows of the full export.
    """
    cols = [
        schema.OCCURRENCE_DATE, schema.EVTYPE, schema.INJURIES, schema.FATALITIES,
        schema.PROPDMG, schema.PROPDMGEXP, schema.CROPDMG, schema.CROPDMGEXP,
        schema.PROPERTY_DAMAGE, schema.CROP_DAMAGE,
    ]
    out: List[StormRecord] = []
    for date, evtype, inj, fat, pm, ps, cm, cs, pdmg, cdmg in zip(*(df[c].tolist() for c in cols)):
        out.append(StormRecord(
            occurrence_date=_to_datetime(date),
            event_type=_to_str(evtype),
            injuries=_to_float(inj),
            fatalities=_to_float(fat),
            property_damage_mantissa=_to_float(pm),
            property_damage_suffix=_to_str(ps),
            crop_damage_mantissa=_to_float(cm),
            crop_damage_suffix=_to_str(cs),
            property_damage=_to_float(pdmg),
            crop_damage=_to_float(cdmg),
        ))
    return out


def stats_from_frame(df: pd.DataFrame) -> List[AggregatedEventStats]:
    """Build AggregatedEventStats from the output of aggregate_by_event_type."""
    return [
        AggregatedEventStats(
            event_type=str(row[schema.EVTYPE]),
            events=int(row[schema.EVENTS]),
            injuries=float(row[schema.INJURIES]),
            fatalities=float(row[schema.FATALITIES]),
            property_damage=float(row[schema.PROPERTY_DAMAGE]),
            crop_damage=float(row[schema.CROP_DAMAGE]),
        )
        for row in df.to_dict("records")
    ]
