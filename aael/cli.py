"""Command that prints TDX evidence for all-zero report data."""

from __future__ import annotations

import argparse
import asyncio
import sys

from aael.attester import AttesterError
from aael.tdx import CCEL_PATH, DEFAULT_EVENTLOG_PATH, TdxAttester
from aael.tsm_report import TSM_REPORT_PATH

_REPORT_DATA_SIZE = 48


def main(argv: list[str] | None = None) -> int:
    """Fetch evidence and print it, or print the error to stderr."""
    parser = argparse.ArgumentParser(
        prog="aael", description="Print TDX evidence for all-zero report data."
    )
    parser.add_argument("--tsm-root", default=TSM_REPORT_PATH)
    parser.add_argument("--ccel-path", default=CCEL_PATH)
    parser.add_argument("--eventlog-path", default=DEFAULT_EVENTLOG_PATH)
    args = parser.parse_args(argv)

    attester = TdxAttester(args.tsm_root, args.ccel_path, args.eventlog_path)
    try:
        evidence = asyncio.run(attester.get_evidence(bytes(_REPORT_DATA_SIZE)))
    except AttesterError as err:
        print(f"get evidence error: {err}", file=sys.stderr)
        return 0
    print(f"evidence: {evidence}")
    return 0


if __name__ == "__main__":
    sys.exit(main())