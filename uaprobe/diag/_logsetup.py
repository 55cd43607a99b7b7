"""Logging configuration for the command-line entry points."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(debug: bool = False, stream=None) -> None:
    """Route all diagnostics to *stream* (stderr by default).

    Records are written to stdout by the pipeline, so keeping log output on
    a separate stream means the two never interleave.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=stream or sys.stderr,
        force=True,
    )
    logging.getLogger("uaprobe").setLevel(level)
