"""
SIRE package
============

Storm Impact Report Engine: an offline analysis of the NOAA storm events
export, summarising human and economic impact by event type.

- The CLI entry point is in `sire/cli.py`.
- The stage composition is in `sire/pipeline.py`.
- Dataset loading is in `sire/loader.py`; cleaning in `sire/cleaning.py`;
  windowed aggregation in `sire/aggregate.py`.
- Charts and the DOCX report are in `sire/report.py`.
"""

__version__ = '0.1.0'
