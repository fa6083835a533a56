"""
SIRE Command Line Interface (CLI)
=================================

One-shot run over a storm events export:

    python -m sire.cli "repdata_data_StormData.csv.bz2" --out storm_report.docx

Loads the file, runs every cleaning and aggregation stage, then writes the
charts and the DOCX report. The dataset file is never modified. Any
structural error aborts before a chart is produced.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from .errors import SireError
from .pipeline import run_pipeline
from .report import generate_docx_report


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the SIRE CLI.

    1) Load + clean + aggregate
    2) Render the report
    """
    ap = argparse.ArgumentParser(prog="sire", description="Storm impact report from a NOAA storm events export")
    ap.add_argument("path", help="Path to the storm events CSV (optionally .bz2/.gz/.xz/.zip)")
    ap.add_argument("--out", default="storm_report.docx", help="Where to write the DOCX report")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug details (rejected exponent codes)")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Loading dataset...")
    try:
        result = run_pipeline(args.path)
    except SireError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Kept {result.audit.rows_validated:,} of {result.audit.rows_loaded:,} rows; "
          f"{len(result.stats)} event types in window.")
    out = generate_docx_report(result, args.out)
    print(f"Report written to {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
