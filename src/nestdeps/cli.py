"""Command-line interface for nestdeps."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from nestdeps.pipeline import run

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="nestdeps",
        description="NestJS module dependency analyzer — JSON or Graphviz output.",
    )
    parser.add_argument(
        "-p",
        "--path",
        type=Path,
        default=Path.cwd(),
        help="Project path (default: current directory)",
    )
    parser.add_argument(
        "-f",
        "--format",
        default="json",
        dest="fmt",
        help="Output format: json or dot (default: json)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output file path (default: print to stdout)",
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Project display name (default: auto-detect from package.json)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    logging.getLogger("nestdeps").setLevel(logging.DEBUG if args.verbose else logging.INFO)

    try:
        text = run(args.path, fmt=args.fmt, output=args.output, name=args.name)
    except OSError as e:
        logger.error("Analysis failed: %s", e)
        sys.exit(1)

    if args.output is None:
        print(text)
