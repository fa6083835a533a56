"""
Column names
============

Raw columns come from the NOAA storm database header and must match exactly
(case-sensitive). Derived columns are added by the cleaning stages.
"""

BGN_DATE = "BGN_DATE"
EVTYPE = "EVTYPE"
FATALITIES = "FATALITIES"
INJURIES = "INJURIES"
PROPDMG = "PROPDMG"
PROPDMGEXP = "PROPDMGEXP"
CROPDMG = "CROPDMG"
CROPDMGEXP = "CROPDMGEXP"

# Order matters: the pruner projects to exactly this sequence.
REQUIRED_COLUMNS = [
    BGN_DATE,
    EVTYPE,
    FATALITIES,
    INJURIES,
    PROPDMG,
    PROPDMGEXP,
    CROPDMG,
    CROPDMGEXP,
]

# Derived
OCCURRENCE_DATE = "OccurrenceDate"
PROPERTY_DAMAGE = "PropertyDamage"
CROP_DAMAGE = "CropDamage"

# (mantissa, suffix, derived) for both damage categories
DAMAGE_PAIRS = [
    (PROPDMG, PROPDMGEXP, PROPERTY_DAMAGE),
    (CROPDMG, CROPDMGEXP, CROP_DAMAGE),
]

# Measures summed per event type
MEASURES = [INJURIES, FATALITIES, PROPERTY_DAMAGE, CROP_DAMAGE]
EVENTS = "events"
