#!/usr/bin/env python3
"""
CLI script to run the clean pipeline.

Reads HTML files, decodes them with the charset they declare, cleans them
and prints (or saves) the results as JSON.

Options come from a JSON file (--options) and are then overridden by the
individual flags. HTML_CLEANER_LOG_LEVEL (from the environment or a .env
file) sets the log verbosity.
"""

import argparse
import json
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from html_cleaner.cleaner import Cleaner
from html_cleaner.exceptions import HTMLCleanerError, ParseError


def build_overrides(args) -> dict:
    """Collect the option overrides given on the command line."""
    overrides = {}
    if args.beautify:
        overrides["compress_whitespace"] = False
    if args.keep_comments:
        overrides["remove_comments"] = False
    if args.allow is not None:
        overrides["allow_attributes"] = args.allow
    if args.deny is not None:
        overrides["deny_attributes"] = args.deny
    return overrides


def main():
    parser = argparse.ArgumentParser(description="Clean HTML files")
    parser.add_argument("files", nargs="+", help="HTML files to process")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--options", help="JSON file with CleanOptions fields")
    parser.add_argument("--beautify", "-b", action="store_true", help="Indent output instead of compressing it")
    parser.add_argument("--keep-comments", action="store_true", help="Do not remove comments")
    parser.add_argument("--allow", nargs="*", help="Attribute patterns to keep (e.g. id href 'data-*')")
    parser.add_argument("--deny", nargs="*", help="Attribute patterns to drop")
    args = parser.parse_args()

    options = {}
    if args.options:
        options = json.loads(Path(args.options).read_text(encoding="utf-8"))
    options.update(build_overrides(args))

    cleaner = Cleaner(options=options, log_level=os.getenv("HTML_CLEANER_LOG_LEVEL"))

    results = []

    for filepath in args.files:
        path = Path(filepath)
        print(f"Cleaning: {path.name}")

        try:
            html = cleaner.clean_file(path)
            results.append({
                "file": path.name,
                "status": "success",
                "html": html
            })
            print(f"  ✓ {len(html)} chars")

        except ParseError as e:
            results.append({"file": path.name, "status": "error", **e.to_response()})
            print(f"  ✗ Parse error: {e.message}")

        except (HTMLCleanerError, OSError) as e:
            results.append({
                "file": path.name,
                "status": "error",
                "error": str(e)
            })
            print(f"  ✗ Error: {e}")

    # ensure_ascii=False keeps the cleaned text readable
    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nSaved to: {args.output}")
    else:
        print("\n" + output)


if __name__ == "__main__":
    main()
