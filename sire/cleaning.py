"""
Cleaning stages
===============

Pure DataFrame -> DataFrame steps between loading and aggregation:

1) validate_exponents  -> drop rows whose damage suffix is not a known code
2) apply_damage_scaling -> (mantissa, suffix) pairs become dollar amounts
3) normalize_types      -> parse BGN_DATE, make EVTYPE categorical, counts numeric

Each step returns a new frame and never edits its input. Noisy rows are
dropped or nulled here instead of failing the run.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, FrozenSet, Optional
import logging
import math
import pandas as pd

from . import schema
from .config import DEFAULT_ALLOWED_SUFFIXES
from .errors import DomainError

logger = logging.getLogger(__name__)

# K/M/B in either case; "" (no exponent) is handled before the lookup.
MULTIPLIERS: Dict[str, float] = {
    "K": 1e3, "k": 1e3,
    "M": 1e6, "m": 1e6,
    "B": 1e9, "b": 1e9,
}

DATE_FORMAT = "%m/%d/%Y %H:%M:%S"


# ---------------- Exponent Validator ----------------

@dataclass(frozen=True)
class ValidationResult:
    """Rows that passed the exponent check, plus how many were dropped."""
    frame: pd.DataFrame
    dropped: int


def validate_exponents(df: pd.DataFrame, allowed: FrozenSet[str] = DEFAULT_ALLOWED_SUFFIXES) -> ValidationResult:
    """Keep rows where both PROPDMGEXP and CROPDMGEXP are in `allowed`.

    Membership is exact string equality; anything else drops the whole row.
    """
    allowed_list = list(allowed)
    mask = df[schema.PROPDMGEXP].isin(allowed_list) & df[schema.CROPDMGEXP].isin(allowed_list)
    kept = df[mask].copy()
    dropped = len(df) - len(kept)

    logger.info("Exponent filter: kept %s of %s rows (dropped %s)", f"{len(kept):,}", f"{len(df):,}", f"{dropped:,}")
    if dropped and logger.isEnabledFor(logging.DEBUG):
        bad = pd.concat([
            df.loc[~df[schema.PROPDMGEXP].isin(allowed_list), schema.PROPDMGEXP],
            df.loc[~df[schema.CROPDMGEXP].isin(allowed_list), schema.CROPDMGEXP],
        ])
        logger.debug("Rejected exponent codes: %s", bad.value_counts().to_dict())
    return ValidationResult(frame=kept, dropped=dropped)


# ---------------- Damage Scaler ----------------

def _missing(x) -> bool:
    if x is None:
        return True
    return isinstance(x, float) and math.isnan(x)


def scale(mantissa: Optional[float], suffix: Optional[str]) -> Optional[float]:
    """Convert a (mantissa, suffix) pair into dollars.

    - missing mantissa -> returned unchanged (whatever the suffix)
    - missing/empty suffix -> mantissa unchanged
    - K/M/B (any case) -> mantissa * 1e3/1e6/1e9
    - anything else -> DomainError
    """
    if _missing(mantissa):
        return mantissa
    if suffix is None or suffix == "" or (isinstance(suffix, float) and math.isnan(suffix)):
        return mantissa
    try:
        multiplier = MULTIPLIERS[suffix]
    except KeyError:
        raise DomainError(f"Unknown exponent suffix {suffix!r} for mantissa {mantissa!r}") from None
    return mantissa * multiplier


def apply_damage_scaling(df: pd.DataFrame) -> pd.DataFrame:
    """Add PropertyDamage and CropDamage columns (US$).

    PROPDMG/CROPDMG become numeric; text that is not a number becomes missing,
    and a missing mantissa gives a missing damage, not zero.
    """
    out = df.copy()
    for mantissa_col, suffix_col, derived_col in schema.DAMAGE_PAIRS:
        mantissa = pd.to_numeric(out[mantissa_col], errors="coerce")
        out[mantissa_col] = mantissa
        out[derived_col] = pd.Series(
            [scale(m, s) for m, s in zip(mantissa.tolist(), out[suffix_col].tolist())],
            index=out.index,
            dtype="float64",
        )
        n_missing = int(out[derived_col].isna().sum())
        if n_missing:
            logger.info("%s: %s rows without a usable mantissa", derived_col, f"{n_missing:,}")
    return out


# ---------------- Type Normalizer ----------------

def parse_date(text) -> Optional[datetime]:
    """Parse "5/2/1995 0:00:00"-style text; None when it cannot be parsed."""
    if not isinstance(text, str):
        return None
    try:
        return datetime.strptime(text.strip(), DATE_FORMAT)
    except ValueError:
        return None


def normalize_types(df: pd.DataFrame, aliases: Optional[Dict[str, str]] = None) -> pd.DataFrame:
    """Add OccurrenceDate, categorise EVTYPE and make the counts numeric.

    Args:
        aliases: optional {raw label: canonical label}. Without it, event
            types are grouped by exact label ("TSTM WIND" and
            "THUNDERSTORM WIND" stay distinct).
    """
    out = df.copy()

    # out-of-range years (outside datetime64[ns]) become NaT as well
    out[schema.OCCURRENCE_DATE] = pd.to_datetime(out[schema.BGN_DATE].map(parse_date), errors="coerce")
    n_bad = int(out[schema.OCCURRENCE_DATE].isna().sum())
    if n_bad:
        logger.warning("%s: %s values could not be parsed as dates", schema.BGN_DATE, f"{n_bad:,}")

    labels = out[schema.EVTYPE].astype(str)
    if aliases:
        labels = labels.map(lambda s: aliases.get(s, s))
    out[schema.EVTYPE] = labels.astype("category")

    for col in (schema.INJURIES, schema.FATALITIES):
        out[col] = pd.to_numeric(out[col], errors="coerce")
    return out
