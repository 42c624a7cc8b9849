"""Command line front end: a small sed-like stream editor.

Usage:
    # Replace a literal
    echo 'xx foo yy' | recap -e foo --replace bar

    # Replace a regex, case-insensitively
    recap -e '[0-9]+' --regex --ignore-case --replace '#' notes.txt

    # Print every match, one per line
    recap -e 'TODO' --find src/main.txt

    # Run a YAML edit script
    recap -f edits.yaml < input.txt
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from recap._config import ConfigParseError
from recap._patterns import Literal, Regex
from recap._registry import load_script_yaml
from recap._script import Rule, Script
from recap._separator import RecapError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recap",
        description="Find and replace patterns in text",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("-e", "--expression", help="Pattern to match (literal unless --regex)")
    source.add_argument("-f", "--script", type=Path, help="YAML edit script")
    parser.add_argument("--replace", metavar="TEXT", help="Replacement for --expression")
    parser.add_argument("--find", action="store_true", help="Print matches instead of editing")
    parser.add_argument("--regex", action="store_true", help="Treat --expression as an RE2 regex")
    parser.add_argument("-i", "--ignore-case", action="store_true", help="Case-insensitive match")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    parser.add_argument("file", nargs="?", type=Path, help="Input file (default: stdin)")
    return parser


def _build_script(args: argparse.Namespace) -> Script:
    if args.script is not None:
        return load_script_yaml(args.script)
    if args.regex:
        pattern = Regex(args.expression, ignore_case=args.ignore_case)
    else:
        pattern = Literal(args.expression, ignore_case=args.ignore_case)
    return Script(rules=(Rule(pattern=pattern, replacement=args.replace),))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.expression is not None and args.replace is None and not args.find:
        parser.error("--expression needs --replace or --find")
    if args.find and args.replace is not None:
        parser.error("--replace cannot be combined with --find")
    if args.script is not None and args.replace is not None:
        parser.error("--replace cannot be combined with --script")

    try:
        script = _build_script(args)
        if args.file is None:
            text = sys.stdin.read()
        else:
            text = args.file.read_text(encoding="utf-8")
    except (ConfigParseError, RecapError, OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"recap: {e}\n")
        return 2
    logger.debug("read %d characters from %s", len(text), args.file or "<stdin>")

    if args.find:
        for found in script.find(text):
            sys.stdout.write(f"{found}\n")
    else:
        sys.stdout.write(script.apply(text))
    return 0
