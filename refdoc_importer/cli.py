#!/usr/bin/env python3
"""
Import parsed API documentation into the content store.

Usage:
    refdoc-import docs.json                     # Import into Couchbase
    refdoc-import docs.json --skip-sleep        # No pauses between batches
    refdoc-import docs.json --import-internal   # Include @internal entities
    refdoc-import docs.json --store memory      # Dry run against an in-memory store

Input is the documentation parser's JSON: a list of files, or an object
with a "files" list. Each file has a path, a file docblock, functions
and classes (classes carry their methods).

Exit codes:
    0  all entities imported or updated
    1  some entities or files failed (see the error list)
    2  input could not be read, or the store could not be reached
"""

import argparse
import json
import sys
from pathlib import Path

from couchbase.exceptions import CouchbaseException
from loguru import logger
from pydantic import ValidationError

from .config import ImporterConfig
from .importer import Reconciler
from .logging_setup import configure_logging
from .models import load_source_files
from .storage import InMemoryContentStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refdoc-import",
        description="Import parsed API documentation into the content store",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "path",
        type=Path,
        help="JSON file produced by the documentation parser"
    )
    parser.add_argument(
        "--skip-sleep",
        action="store_true",
        help="Skip the pause after every batch of imported items"
    )
    parser.add_argument(
        "--import-internal",
        action="store_true",
        help="Import functions and classes marked @internal"
    )
    parser.add_argument(
        "--store",
        choices=["couchbase", "memory"],
        default="couchbase",
        help="Content store backend (default: couchbase)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Console log level (default: LOG_LEVEL or INFO)"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="Directory for rotating log files"
    )
    return parser


def make_store(kind: str, config: ImporterConfig):
    if kind == "memory":
        return InMemoryContentStore()

    # Imported here so a memory dry run never opens a connection
    from .storage.couchbase_client import CouchbaseContentStore
    return CouchbaseContentStore(config)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    config = ImporterConfig()

    configure_logging(args.log_level or config.log_level, args.log_dir or config.log_dir)

    try:
        data = json.loads(args.path.read_text(encoding="utf-8"))
        files = load_source_files(data)
    except (OSError, json.JSONDecodeError, ValidationError, ValueError) as e:
        logger.error(f"Cannot read {args.path}: {e}")
        return 2

    try:
        store = make_store(args.store, config)
    except CouchbaseException as e:
        logger.error(f"Cannot open the {args.store} store: {e}")
        return 2

    try:
        reconciler = Reconciler(store, config)
        stats = reconciler.import_files(files, skip_sleep=args.skip_sleep, import_internal=args.import_internal)
    finally:
        store.close()

    print(
        f"Files: {stats.files} | Imported: {stats.imported} | Updated: {stats.updated} | "
        f"Skipped: {stats.skipped} | Failed: {stats.failed}"
    )

    if reconciler.errors:
        print(f"\n{len(reconciler.errors)} error(s):", file=sys.stderr)
        for line in reconciler.errors:
            print(line, file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
