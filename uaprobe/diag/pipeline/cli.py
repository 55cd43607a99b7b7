"""CLI entry point: ua-diag

Classify a corpus of user-agent strings, report parse quality and throughput,
and print every result as YAML test cases, JSON lines or tab-separated CSV.

Input files hold one payload per line, optionally prefixed with an occurrence
count and a tab (``1234<TAB>Mozilla/5.0 ...``). Blank lines, ``#`` comments
and indented lines are ignored.

Examples
--------
# One string, YAML test case to stdout
ua-diag --ua "Mozilla/5.0 (X11; Linux x86_64) Gecko/20100101 Firefox/120.0"

# Whole file as CSV, statistics on stderr
ua-diag --in agents.txt --csv > results.tsv

# Only the records that are not fully matched, as JSON lines
ua-diag --in agents.txt --json --bad

# Show which tree paths the ruleset looked at
ua-diag --in agents.txt --matched-flatten
"""

from __future__ import annotations

import argparse
import logging
import sys

# Absolute imports so this file works both as `ua-diag` (installed entry point)
# and as `python -m uaprobe.diag.pipeline.cli` (direct module invocation).
from uaprobe.diag import __version__
from uaprobe.diag._logsetup import configure_logging
from uaprobe.diag.config import make_run_config
from uaprobe.diag.errors import DecodeError, EngineError, UsageError
from uaprobe.diag.pipeline.pipeline import DiagnosticPipeline

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="ua-diag",
        description="Batch diagnostics for user-agent classification",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    source = p.add_mutually_exclusive_group()
    source.add_argument(
        "--ua", dest="payload", default=None, help="A single user-agent string"
    )
    source.add_argument(
        "--in", dest="in_file", default=None, help="Location of input file"
    )

    fmt = p.add_mutually_exclusive_group()
    fmt.add_argument(
        "--yaml", action="store_true", help="Output in YAML test case format (default)"
    )
    fmt.add_argument(
        "--csv", action="store_true", help="Output in tab-separated CSV format"
    )
    fmt.add_argument("--json", action="store_true", help="Output in JSON lines format")

    p.add_argument(
        "--bad", action="store_true", help="Output only cases that have a problem"
    )
    p.add_argument(
        "--debug", action="store_true", help="Enable debug logging and rule tracing"
    )
    p.add_argument(
        "--full-flatten",
        action="store_true",
        help="Print every parse-tree path of each string",
    )
    p.add_argument(
        "--matched-flatten",
        action="store_true",
        help="Print the path/value pairs the ruleset consulted for each string",
    )
    p.add_argument(
        "--rules", default=None, help="YAML ruleset (default: bundled rules)"
    )
    p.add_argument(
        "--progress", action="store_true", help="Show a progress bar on stderr"
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        config = make_run_config(
            payload=args.payload,
            in_file=args.in_file,
            yaml_format=args.yaml,
            csv_format=args.csv,
            json_format=args.json,
            bad_only=args.bad,
            debug=args.debug,
            full_flatten=args.full_flatten,
            matched_flatten=args.matched_flatten,
            rules_path=args.rules,
            progress_bar=args.progress,
        )
    except UsageError as exc:
        logger.error("ua-diag %s", __version__)
        logger.error("Errors: %s", exc)
        parser.print_usage(sys.stderr)
        return 1

    try:
        pipeline = DiagnosticPipeline.from_config(config)
        pipeline.run(config)
    except EngineError as exc:
        logger.error("Engine error: %s", exc)
        return 1
    except DecodeError as exc:
        logger.error("Decode error: %s", exc)
        return 1
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
