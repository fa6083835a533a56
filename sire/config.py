"""
Pipeline configuration
======================

All knobs live in one dataclass so a run is fully described by
(input path, PipelineConfig). Defaults reproduce the reference analysis.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, FrozenSet, Optional

# Latest BGN_DATE in the NOAA export is 11/30/2011; the window covers 20 years.
DEFAULT_WINDOW_START = datetime(1991, 11, 30)
WINDOW_YEARS = 20

DEFAULT_ALLOWED_SUFFIXES: FrozenSet[str] = frozenset({"", "K", "k", "M", "m", "B", "b"})


@dataclass(frozen=True)
class OutlierThresholds:
    """Points above either threshold get a text label in the scatter chart."""
    fatalities: float = 350
    injuries: float = 2500


@dataclass(frozen=True)
class PipelineConfig:
    """Options recognised by the pipeline and the report renderer."""
    # None means "derive from the data": latest occurrence minus WINDOW_YEARS
    window_start: Optional[datetime] = DEFAULT_WINDOW_START
    allowed_suffixes: FrozenSet[str] = DEFAULT_ALLOWED_SUFFIXES
    outlier_thresholds: OutlierThresholds = field(default_factory=OutlierThresholds)

    # Optional {raw EVTYPE: canonical label}; empty means exact-label grouping
    event_type_aliases: Optional[Dict[str, str]] = None

    # How many event types to show in ranked charts / tables
    top_n: int = 15
