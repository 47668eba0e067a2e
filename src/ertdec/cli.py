from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import List, Optional

from .api import decode_codes
from .config import DecoderConfig, load_config

logger = logging.getLogger(__name__)


def _setup_logging(verbose: int) -> None:
    level = logging.WARNING
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s | %(levelname)-7s | %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Decode ERT SCM+/IDM bit rows into JSON records")
    parser.add_argument("inputs", nargs="*", help="Files of bit-row codes ('-' or none for stdin)")
    parser.add_argument("--config", default=None, help="Path to JSON decoder config")
    parser.add_argument("--format", action="append", dest="formats", default=None, help="Enable only this format (repeatable)")
    parser.add_argument("--no-crc", action="store_true", help="Report frames even when checksums disagree")
    parser.add_argument("--all", action="store_true", help="Also print non-success outcomes")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    args = parser.parse_args(argv)

    cfg = DecoderConfig() if args.config is None else load_config(args.config)
    if args.formats:
        try:
            cfg = replace(cfg, formats=tuple(args.formats))
        except ValueError as exc:
            parser.error(str(exc))
    if args.no_crc:
        cfg = replace(cfg, verify_crc=False)
    if args.verbose:
        cfg = replace(cfg, verbose=max(cfg.verbose, args.verbose))
    _setup_logging(cfg.verbose)

    inputs = args.inputs or ["-"]
    decoded = 0
    for name in inputs:
        if name == "-":
            results = decode_codes(sys.stdin, cfg)
        else:
            with open(name, "r", encoding="utf-8") as f:
                results = decode_codes(f, cfg)
        for r in results:
            if r.outcome.ok:
                decoded += 1
                print(json.dumps(dict(r.outcome.record)))
            elif args.all:
                print(json.dumps({"line": r.line_no, "model": r.outcome.model, "status": r.outcome.status.value}))
    logger.info("decoded %d record(s)", decoded)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
