#!/usr/bin/env python3
"""Extract rows from large JSON or CSV files with constant RAM and write them as CSV."""

import argparse, csv, logging, pathlib, sys, time
from typing import List, Optional

from . import csv_stream, json_stream
from .config import ExtractionOptions, log_level
from .errors import RowStreamError

logger = logging.getLogger(__name__)


def _split(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [v.strip() for v in value.split(',')]


def process_json(path: pathlib.Path, options: ExtractionOptions, out) -> int:
    """Stream ``path`` through the mapping and write one CSV line per record."""
    start = time.time()
    writer = csv.writer(out, csv_stream.default_dialect())
    writer.writerow(options.output_headers)
    recs = json_stream.parse(path, lambda h: None, lambda node, h, line: line,
                             writer.writerow, **options.parse_args())
    logger.info("Done %s records in %.2fs", recs, time.time() - start)
    return recs


def process_csv(path: pathlib.Path, out, headers=None, header_lines=1, defaults=(),
                dialect=None) -> int:
    """Re-emit a CSV file after header substitution and default filling."""
    start = time.time()
    writer = csv.writer(out, csv_stream.default_dialect())
    seen = []

    def validate(h):
        seen.extend(h)
        writer.writerow(h)

    recs = csv_stream.parse(path, validate, lambda h, line: line, writer.writerow,
                            substitute_headers=headers, default_values=defaults or (),
                            header_line_count=header_lines, dialect=dialect)
    logger.info("Done %s records (%s columns) in %.2fs", recs, len(seen), time.time() - start)
    return recs


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="rowstream", description=__doc__)
    ap.add_argument("--log-level", default=None, help="override ROWSTREAM_LOG_LEVEL")
    sub = ap.add_subparsers(dest="command", required=True)

    js = sub.add_parser("json", help="extract rows from a JSON document")
    js.add_argument("file", type=pathlib.Path)
    js.add_argument("--mapping", type=pathlib.Path, required=True,
                    help="JSON file with basePath, fields, headers and defaults")
    js.add_argument("--strict-fields", action="store_true",
                    help="fail when a field pointer selects an object or array")
    js.add_argument("--output", type=pathlib.Path)

    cs = sub.add_parser("csv", help="re-emit a CSV document with substituted headers/defaults")
    cs.add_argument("file", type=pathlib.Path)
    cs.add_argument("--headers", help="comma separated substitute headers")
    cs.add_argument("--header-lines", type=int, default=csv_stream.DEFAULT_HEADER_COUNT)
    cs.add_argument("--defaults", help="comma separated default values, one per column")
    cs.add_argument("--delimiter", default=",")
    cs.add_argument("--quote-char", default='"')
    cs.add_argument("--escape-char", default=None)
    cs.add_argument("--output", type=pathlib.Path)
    return ap


def run(args) -> int:
    out = open(args.output, 'w', encoding='utf-8', newline='') if args.output else sys.stdout
    try:
        if args.command == "json":
            options = ExtractionOptions.load(
                args.mapping, composite_policy='error' if args.strict_fields else None)
            process_json(args.file, options, out)
        else:
            dialect = csv_stream.make_dialect(args.delimiter, args.quote_char or None,
                                              args.escape_char)
            process_csv(args.file, out, headers=_split(args.headers),
                        header_lines=args.header_lines, defaults=_split(args.defaults),
                        dialect=dialect)
    finally:
        if out is not sys.stdout:
            out.close()
    return 0


def cli(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper() if args.log_level else log_level(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        return run(args)
    except RowStreamError as e:
        logger.error("extraction failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(cli())
