"""
apitypings DUMP.json [--out FILE] [--check]

Writes the generated TypeScript to stdout (or --out). With --check nothing
is written; the exit status says whether --out is up to date.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from apitypings import config
from apitypings.errors import TypingsError
from apitypings.generator import generate_from_file

logger = logging.getLogger("apitypings")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="apitypings",
        description="Generate TypeScript declarations from a Go package symbol dump.",
    )
    parser.add_argument("dump", help="JSON symbol dump of exactly one Go package")
    parser.add_argument("--out", dest="out", default=None, help="Write to file instead of stdout")
    parser.add_argument(
        "--check",
        action="store_true",
        help="Exit 1 if --out is missing or differs from the generated output.",
    )
    parser.add_argument("--banner", dest="banner", default=None, help="Override the generated-file banner")
    parser.add_argument("--log-level", dest="log_level", default=config.LOG_LEVEL)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.check and not args.out:
        logger.error("--check requires --out")
        return 2

    try:
        types = generate_from_file(args.dump, banner=args.banner)
    except TypingsError as e:
        logger.error("%s", e)
        return 1

    document = types.to_string() + "\n"

    if args.check:
        out = Path(args.out)
        current = out.read_text(encoding="utf-8") if out.exists() else None
        if current != document:
            logger.error("%s is stale, regenerate it from %s", out, args.dump)
            return 1
        logger.info("%s is up to date", out)
        return 0

    if args.out:
        Path(args.out).parent.mkdir(parents=True, exist_ok=True)
        Path(args.out).write_text(document, encoding="utf-8")
        logger.info("wrote %s", args.out)
    else:
        sys.stdout.write(document)
    return 0


if __name__ == "__main__":
    sys.exit(main())
