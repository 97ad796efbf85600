"""Request matching engine - decides whether a host/path is blacklisted."""

import functools
import logging
import re
from collections.abc import Iterator, Sequence
from urllib.parse import urlparse

from .types import MATCH_ALL_PATH, RuleMap, RuleSource

logger = logging.getLogger(__name__)


@functools.lru_cache(maxsize=4096)
def _compile(pattern: str) -> re.Pattern | None:
    """Compile a stored pattern, None if it is not a valid regex."""
    try:
        return re.compile(pattern)
    except (re.error, OverflowError, RecursionError) as e:
        logger.debug("Skipping invalid stored pattern %r: %s", pattern, e)
        return None


def full_match(pattern: str, subject: str) -> bool:
    """Match a regex against the whole subject. Invalid patterns never match."""
    compiled = _compile(pattern)
    return compiled is not None and compiled.fullmatch(subject) is not None


def normalize_path(path: str) -> str:
    """Strip exactly one leading "/"."""
    return path[1:] if path.startswith("/") else path


def split_url(url: str) -> tuple[str, str]:
    """Split a URL into (host, path). The host is lower-cased, the query kept with the path."""
    parsed = urlparse(url)
    if not parsed.hostname:
        raise ValueError(f"URL has no host: {url!r}")
    path = parsed.path
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return parsed.hostname, path


def match_path_patterns(patterns: Sequence[str], path: str) -> bool:
    """Check a normalized path against the path patterns of one host key.

    "*" matches any path, anything else is a full-match regex.
    """
    for pattern in patterns:
        if pattern == MATCH_ALL_PATH or full_match(pattern, path):
            return True
    return False


def structured_keys(host: str) -> Iterator[str]:
    """Yield structured-map keys to try for a host, in precedence order.

    For "a.b.c":
        a.b.c                      exact host
        a.*, a, a.b.*, a.b         prefixes, left to right
        *.c, c, *.b.c, b.c         suffixes, right to left

    Bare prefixes and suffixes are tested as exact keys too, so a rule for
    "example.com" also covers "www.example.com".
    """
    yield host

    index = host.find(".", 1)
    while index != -1:
        yield host[: index + 1] + "*"
        yield host[:index]
        index = host.find(".", index + 1)

    index = host.rfind(".")
    while index != -1:
        yield "*" + host[index:]
        yield host[index + 1 :]
        index = host.rfind(".", 0, index)


def match_freeform(freeform: RuleMap, host: str, path: str) -> bool:
    """Match host/path against host-regex rules.

    Stops at the first path regex that matches under a matching host regex.
    """
    for host_pattern, path_patterns in freeform.items():
        if not full_match(host_pattern, host):
            continue
        for path_pattern in path_patterns:
            if full_match(path_pattern, path):
                return True
    return False


def is_listed(source: RuleSource, category: str, host: str, path: str) -> bool:
    """Check whether host/path is blacklisted in a category.

    Raises:
        ValueError: host or path is None.
    """
    if host is None:
        raise ValueError("host is required")
    if path is None:
        raise ValueError("path is required")

    path = normalize_path(path)

    structured = source.get_structured_rules(category)
    for key in structured_keys(host):
        patterns = structured.get(key)
        if patterns is not None and match_path_patterns(patterns, path):
            return True

    return match_freeform(source.get_freeform_rules(category), host, path)


class BlacklistMatcher:
    """Matches requests against the rules of a RuleSource."""

    def __init__(self, source: RuleSource):
        self.source = source

    def is_listed(self, category: str, host: str, path: str) -> bool:
        """Check whether host/path is blacklisted in a category."""
        return is_listed(self.source, category, host, path)

    def is_listed_url(self, category: str, url: str) -> bool:
        """Check a full URL."""
        host, path = split_url(url)
        return self.is_listed(category, host, path)

    def verdict(self, category: str, host: str, path: str) -> str:
        """Get verdict for a request: 'block' or 'allow'."""
        return "block" if self.is_listed(category, host, path) else "allow"
