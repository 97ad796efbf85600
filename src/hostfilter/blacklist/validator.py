"""Rule validator - checks host/path rule strings before they are accepted.

Host syntax for non-regex rules is defined by a PEG grammar (parsimonious).
A rule that passes the grammar is then checked for wildcard placement.
"""

import logging
import re
from collections.abc import Iterable

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar

from .types import DEFAULT_OPTIONS, DEFAULT_PATH, MATCH_ALL_PATH, CheckOptions, ErrorCode

logger = logging.getLogger(__name__)

# =============================================================================
# PEG Grammar for literal / wildcard hosts
# =============================================================================

HOST_GRAMMAR = Grammar(r"""
host            = label ("." label)*
label           = wildcard / name
wildcard        = "*"
name            = ~"[A-Za-z0-9_-]+"
""")


def is_valid_regex(expression: str) -> bool:
    """Check whether an expression compiles as a regular expression."""
    try:
        re.compile(expression)
    except (re.error, OverflowError, RecursionError):
        return False
    return True


def is_valid_host_syntax(host: str) -> bool:
    """Check a host against the literal/wildcard label grammar."""
    try:
        HOST_GRAMMAR.parse(host)
    except ParseError:
        return False
    return True


def split_rule(rule: str) -> tuple[str, str]:
    """Split a rule on its first "/" into (host, path).

    A rule without "/" matches every path.
    """
    host, sep, path = rule.partition("/")
    if not sep:
        return rule, DEFAULT_PATH
    return host, path


def _check_host_syntax(host: str, allow_regex: bool) -> ErrorCode:
    """Validate a host in literal/wildcard form."""
    i = host.find("*")

    if not is_valid_host_syntax(host):
        # A leading wildcard glued to the rest of its label
        if i == 0 and len(host) > 1 and host[1] != ".":
            return ErrorCode.SUBDOMAIN_XOR_WILDCARD
        if allow_regex:
            # Neither a usable regex nor a plain host
            return ErrorCode.HOST_REGEX
        return ErrorCode.HOST_WRONG_CHARS

    # Only whole labels at the start or end may be wildcards
    if host and i > -1:
        if not (i == 0 or i == len(host) - 1):
            return ErrorCode.WILDCARD_BEGIN_OR_END

        if i == len(host) - 1 and len(host) > 1 and host[i - 1] != ".":
            return ErrorCode.SUBDOMAIN_XOR_WILDCARD

    if host.find("*", i + 1) > -1:
        return ErrorCode.TWO_WILDCARDS_IN_HOST

    return ErrorCode.OK


def check_error(rule: str, options: CheckOptions | None = None) -> ErrorCode:
    """Check a rule string and return the first error found, or ErrorCode.OK.

    Args:
        rule: "host" or "host/path".
        options: Validation options (defaults allow host regexes).
    """
    options = options or DEFAULT_OPTIONS
    host, path = split_rule(rule)

    if not options.allow_regex or not is_valid_regex(host):
        error = _check_host_syntax(host, options.allow_regex)
        if error != ErrorCode.OK:
            return error

    if path != MATCH_ALL_PATH and not is_valid_regex(path):
        return ErrorCode.PATH_REGEX

    return ErrorCode.OK


def validate_rules(
    rules: Iterable[str], options: CheckOptions | None = None
) -> list[tuple[int, str, ErrorCode]]:
    """Validate several rules.

    Returns list of (index, rule, error) for rejected rules, index is 1-based.
    """
    errors = []
    for index, rule in enumerate(rules, start=1):
        error = check_error(rule, options)
        if error != ErrorCode.OK:
            logger.debug("Rejected rule %d %r: %s", index, rule, error.name)
            errors.append((index, rule, error))
    return errors
