#!/usr/bin/env python3
"""Command-line utility to check blacklist rules and classify requests.

Usage:
    python -m hostfilter.blacklist [--no-regex] check <rule>...
    python -m hostfilter.blacklist classify <host> [<path>] --rule <rule>...
    python -m hostfilter.blacklist classify --requests <requests.jsonl> --rule <rule>...

Exit codes:
    0 - All rules valid (or all requests allowed in classify mode)
    1 - Some rule invalid (or some request blocked in classify mode)
    2 - File not found, invalid rule for classify, or bad arguments
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from .. import logging as hostfilter_logging
from .matcher import BlacklistMatcher, split_url
from .source import MemoryRuleSource
from .types import BLACKLIST_PROXY, BLACKLIST_TYPES, CheckOptions, ErrorCode
from .validator import validate_rules

logger = logging.getLogger(__name__)

ALLOW_REGEX = os.environ.get("HOSTFILTER_ALLOW_REGEX", "1").lower() not in ("0", "false")


def build_source(
    rules: list[str], category: str, options: CheckOptions | None = None
) -> tuple[MemoryRuleSource, list[tuple[int, str, ErrorCode]]]:
    """Build a rule source from rule strings.

    Returns (source, errors); invalid rules are left out of the source.
    """
    source = MemoryRuleSource()
    errors = []
    for index, rule in enumerate(rules, start=1):
        error = source.add_rule(category, rule, options)
        if error != ErrorCode.OK:
            errors.append((index, rule, error))
    return source, errors


def request_target(request: dict) -> tuple[str, str] | None:
    """Extract (host, path) from a request record.

    Returns None if the record has no usable host or a field has the wrong type.
    A missing or null path defaults to "/".
    """
    url = request.get("url")
    if url:
        if not isinstance(url, str):
            return None
        try:
            return split_url(url)
        except ValueError:
            return None
    host = request.get("host")
    if not host or not isinstance(host, str):
        return None
    path = request.get("path")
    if path is None:
        path = "/"
    elif not isinstance(path, str):
        return None
    return host.lower(), path


def classify_requests(
    matcher: BlacklistMatcher, category: str, requests: list[dict]
) -> dict:
    """Classify requests against the matcher.

    Returns dict with 'allowed' and 'blocked' lists of ((host, path), count)
    tuples, identical requests counted once, and an 'invalid' list of
    (request, 1) tuples for records without a usable host.
    """
    counts: dict[tuple[str, str], int] = {}
    invalid = []

    for request in requests:
        target = request_target(request)
        if target is None:
            invalid.append((request, 1))
            continue
        counts[target] = counts.get(target, 0) + 1

    allowed = []
    blocked = []
    for (host, path), count in counts.items():
        verdict = matcher.verdict(category, host, path)
        hostfilter_logging.log_decision(category=category, host=host, path=path, verdict=verdict)
        if verdict == "block":
            blocked.append(((host, path), count))
        else:
            allowed.append(((host, path), count))

    return {"allowed": allowed, "blocked": blocked, "invalid": invalid}


def format_target(target: tuple[str, str]) -> str:
    """Format a (host, path) target for human-readable output."""
    host, path = target
    if not path.startswith("/"):
        path = "/" + path
    return f"{host}{path}"


def print_classification(results: dict, verbose: bool = False) -> int:
    """Print classification results in human-readable format.

    Returns exit code (0 if all allowed, 1 if any blocked).
    """
    blocked = results["blocked"]
    allowed = results["allowed"]
    invalid = results.get("invalid", [])

    if blocked:
        print("BLOCKED requests:")
        print("-" * 60)
        for target, count in sorted(blocked, key=lambda x: format_target(x[0])):
            count_str = f" (x{count})" if count > 1 else ""
            print(f"  {format_target(target)}{count_str}")
        print()

    if verbose and allowed:
        print("ALLOWED requests:")
        print("-" * 60)
        for target, count in sorted(allowed, key=lambda x: format_target(x[0])):
            count_str = f" (x{count})" if count > 1 else ""
            print(f"  {format_target(target)}{count_str}")
        print()

    if invalid:
        print("SKIPPED requests (no usable host):")
        print("-" * 60)
        for request, _ in invalid:
            print(f"  {json.dumps(request)}")
        print()

    summary_parts = [f"{len(allowed)} allowed", f"{len(blocked)} blocked"]
    if invalid:
        summary_parts.append(f"{len(invalid)} skipped")
    print(f"Summary: {', '.join(summary_parts)}")

    return 1 if blocked else 0


def load_requests(path: Path) -> list[dict]:
    """Load requests from a JSONL file."""
    requests = []
    with open(path) as f:
        for line_num, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as e:
                print(f"Warning: Invalid JSON on line {line_num}: {e}", file=sys.stderr)
                continue
            if not isinstance(record, dict):
                print(f"Warning: Line {line_num} is not a JSON object", file=sys.stderr)
                continue
            requests.append(record)
    return requests


def print_rule_errors(errors: list[tuple[int, str, ErrorCode]]) -> None:
    for index, rule, error in errors:
        print(f"  rule {index}: {rule}")
        print(f"    ^ {error.name}: {error.description}")


def run_check(args: argparse.Namespace, options: CheckOptions) -> int:
    errors = validate_rules(args.rules, options)
    if errors:
        print_rule_errors(errors)

    if not args.quiet:
        valid = len(args.rules) - len(errors)
        if errors:
            print(f"\nValidation failed: {len(errors)} error(s), {valid} valid rule(s)")
        else:
            print(f"\nValidation passed: {valid} rule(s)")

    return 1 if errors else 0


def run_classify(args: argparse.Namespace, options: CheckOptions) -> int:
    source, errors = build_source(args.rule or [], args.category, options)
    if errors:
        print("Invalid rules:", file=sys.stderr)
        for index, rule, error in errors:
            print(f"  rule {index}: {rule} ({error.name})", file=sys.stderr)
        return 2

    if args.requests:
        if not args.requests.exists():
            print(f"Error: Requests file not found: {args.requests}", file=sys.stderr)
            return 2
        requests = load_requests(args.requests)
        if not requests:
            print("No requests found in file.", file=sys.stderr)
            return 0
    elif args.host:
        requests = [{"host": args.host, "path": args.path}]
    else:
        print("Error: Give a HOST or --requests", file=sys.stderr)
        return 2

    logger.info("Classifying %d request(s) against %d rule(s)", len(requests), source.size())
    matcher = BlacklistMatcher(source)
    results = classify_requests(matcher, args.category, requests)
    return print_classification(results, verbose=args.verbose)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check host/path blacklist rules and classify requests against them.",
        epilog="Exit codes: 0=valid/all-allowed, 1=invalid/some-blocked, 2=input error",
    )
    parser.add_argument(
        "--no-regex",
        action="store_true",
        help="Reject host regular expressions (only literal and wildcard hosts)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate rule strings")
    check.add_argument("rules", nargs="+", metavar="RULE", help="Rule as host or host/path")
    check.add_argument(
        "-q", "--quiet", action="store_true", help="Only output errors, no summary"
    )

    classify = subparsers.add_parser("classify", help="Classify requests against rules")
    classify.add_argument("host", nargs="?", help="Request host")
    classify.add_argument("path", nargs="?", default="/", help="Request path (default: /)")
    classify.add_argument(
        "--rule",
        action="append",
        metavar="RULE",
        required=True,
        help="Blacklist rule as host or host/path (repeatable)",
    )
    classify.add_argument(
        "--category",
        default=BLACKLIST_PROXY,
        help=f"Rule category (default: {BLACKLIST_PROXY}; known: {', '.join(BLACKLIST_TYPES)})",
    )
    classify.add_argument(
        "--requests",
        type=Path,
        metavar="REQUESTS.jsonl",
        help='Classify JSONL records ({"host": .., "path": ..} or {"url": ..})',
    )
    classify.add_argument(
        "-v", "--verbose", action="store_true", help="Show allowed requests too"
    )
    return parser


def main(argv: list[str] | None = None):
    args = build_parser().parse_args(argv)
    options = CheckOptions(allow_regex=ALLOW_REGEX and not args.no_regex)

    hostfilter_logging.init_logging()
    try:
        if args.command == "check":
            exit_code = run_check(args, options)
        else:
            exit_code = run_classify(args, options)
    finally:
        hostfilter_logging.close_logging()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
