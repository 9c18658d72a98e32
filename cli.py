#!/usr/bin/env python3
import argparse
import asyncio
import json
import os
import sys

from filtermerge.merge import run_once
from filtermerge.utils import enable_file_log, get_logger

logger = get_logger("filtermerge.cli")


def _load_items(path: str):
    if path == "-":
        items = json.load(sys.stdin)
    else:
        with open(path, "r", encoding="utf-8") as f:
            items = json.load(f)
    if not isinstance(items, list):
        raise ValueError(f"Items file must hold a JSON list: {path}")
    return items


def main(argv=None):
    parser = argparse.ArgumentParser(description="Merge the rankings of several item filters")
    parser.add_argument("--config", required=True, help="Path to YAML config (directory entries + merge params)")
    parser.add_argument("--items", required=True, help="Path to JSON list of items, or - for stdin")
    parser.add_argument("--input", dest="input", default="", help="User input passed through to every child filter")
    parser.add_argument("--unique", dest="unique", action="store_true", help="Collapse items with the same identity")
    parser.add_argument("--no-unique", dest="unique", action="store_false", help="Keep duplicates from different children")
    parser.add_argument("--output", help="Write merged items here instead of stdout")
    parser.set_defaults(unique=None)
    args = parser.parse_args(argv)

    enable_file_log(os.getenv("LOG_DIR", "logs"))

    items = _load_items(args.items)
    try:
        merged = asyncio.run(run_once(args.config, items, unique=args.unique, input=args.input))
    except Exception as e:
        logger.error("merge failed: %s", e)
        raise

    payload = json.dumps(merged, ensure_ascii=False, indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(payload + "\n")
        logger.info("output written path=%s items=%d", args.output, len(merged))
    else:
        sys.stdout.write(payload + "\n")


if __name__ == "__main__":
    main()
