"""
Pipeline (composition of the stages)
====================================

    load -> prune -> validate exponents -> scale damages -> normalize types
         -> window filter -> aggregate

Every stage is a pure function from one DataFrame to a new one, so each can
be tested on its own. `run_stages` works on an already loaded table;
`run_pipeline` adds the file read. Both return a `PipelineResult`, which is
all the report renderer needs.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime
from typing import List, Optional
import logging
import pandas as pd

from .aggregate import aggregate_by_event_type, filter_window, resolve_window_start
from .cleaning import apply_damage_scaling, normalize_types, validate_exponents
from .config import PipelineConfig
from .loader import load_storm_table, prune_columns
from .models import AggregatedEventStats, StormRecord, records_from_frame, stats_from_frame
from . import schema

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditCounts:
    """Row counts at each filtering step (for the report and the log)."""
    rows_loaded: int
    rows_dropped_by_exponent: int
    rows_validated: int
    unparsed_dates: int
    rows_in_window: int


@dataclass(frozen=True)
class PipelineResult:
    """Everything produced by one run."""
    records: List[StormRecord]
    stats: List[AggregatedEventStats]
    window_start: Optional[datetime]
    audit: AuditCounts
    config: PipelineConfig
    dataset_path: Optional[str] = None


def run_stages(raw: pd.DataFrame, config: Optional[PipelineConfig] = None) -> PipelineResult:
    """Run every stage after loading on an all-text table."""
    config = config or PipelineConfig()

    pruned = prune_columns(raw)
    validated = validate_exponents(pruned, config.allowed_suffixes)
    scaled = apply_damage_scaling(validated.frame)
    typed = normalize_types(scaled, config.event_type_aliases)

    window_start = resolve_window_start(typed, config.window_start)
    windowed = filter_window(typed, window_start)
    aggregated = aggregate_by_event_type(windowed)

    audit = AuditCounts(
        rows_loaded=len(raw),
        rows_dropped_by_exponent=validated.dropped,
        rows_validated=len(validated.frame),
        unparsed_dates=int(typed[schema.OCCURRENCE_DATE].isna().sum()),
        rows_in_window=len(windowed),
    )
    return PipelineResult(
        records=records_from_frame(typed),
        stats=stats_from_frame(aggregated),
        window_start=window_start,
        audit=audit,
        config=config,
    )


def run_pipeline(path: str, config: Optional[PipelineConfig] = None) -> PipelineResult:
    """Load `path` and run all stages. Any SireError aborts the run."""
    raw = load_storm_table(path)
    result = run_stages(raw, config)
    logger.info(
        "Pipeline done: %s rows loaded, %s dropped by exponent filter, %s in window, %d event types",
        f"{result.audit.rows_loaded:,}", f"{result.audit.rows_dropped_by_exponent:,}",
        f"{result.audit.rows_in_window:,}", len(result.stats),
    )
    return replace(result, dataset_path=path)
