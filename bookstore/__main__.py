"""
Command-line entry point.

    python -m bookstore [--data-dir DIR] [--verbose] < commands.txt

Reads commands from stdin and writes results to stdout. Defaults come from
BOOKSTORE_DATA_DIR / BOOKSTORE_VERBOSE; flags override them. Input bytes that
are not valid UTF-8 are kept as surrogate escapes, as in the record files.
"""

from __future__ import annotations
import argparse
import io
import sys
from typing import List, Optional

from .config import StoreConfig
from .core import PersistenceFailed
from .engine import create_default_engine
from .store import FILE_ENCODING, FILE_ERRORS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bookstore",
        description="Bookstore accounts, catalog and finance command interpreter.",
    )
    parser.add_argument("--data-dir", default=None, help="directory holding the record files")
    parser.add_argument("--verbose", action="store_true", default=None,
                        help="print one diagnostic line per command to stderr")
    return parser


def _tolerate_invalid_utf8(stream) -> None:
    if isinstance(stream, io.TextIOWrapper):
        stream.reconfigure(encoding=FILE_ENCODING, errors=FILE_ERRORS)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = StoreConfig.from_env().with_overrides(data_dir=args.data_dir, verbose=args.verbose)
    except ValueError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return 2
    _tolerate_invalid_utf8(sys.stdin)
    _tolerate_invalid_utf8(sys.stdout)
    try:
        engine = create_default_engine(config)
        engine.run(sys.stdin, sys.stdout)
    except PersistenceFailed as e:
        print(f"fatal: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
