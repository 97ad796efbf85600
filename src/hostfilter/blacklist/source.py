"""In-memory rule source.

Partitions rules into the structured map (literal hosts and hosts with a
single leading or trailing wildcard label) and the freeform map (host
regular expressions), per category.
"""

import logging
import re

from .matcher import normalize_path
from .types import CheckOptions, ErrorCode, RuleMap
from .validator import check_error, split_rule

logger = logging.getLogger(__name__)

# Hosts that can be looked up by key instead of by regex
_PLAIN_HOST_RE = re.compile(r"[a-z0-9.-]*")
_LEADING_WILDCARD_RE = re.compile(r"\*\.[a-z0-9.-]*")
_TRAILING_WILDCARD_RE = re.compile(r"[a-z0-9.-]*\.\*")


def is_matchable(host: str) -> bool:
    """Check whether a host goes into the structured map.

    True for plain hosts (www.example.com), a leading "*." (*.example.com)
    or a trailing ".*" (www.example.*).
    """
    return bool(
        _PLAIN_HOST_RE.fullmatch(host)
        or _LEADING_WILDCARD_RE.fullmatch(host)
        or _TRAILING_WILDCARD_RE.fullmatch(host)
    )


class MemoryRuleSource:
    """RuleSource backed by dicts, one structured and one freeform map per category."""

    def __init__(self):
        self._structured: dict[str, dict[str, list[str]]] = {}
        self._freeform: dict[str, dict[str, list[str]]] = {}

    def get_structured_rules(self, category: str) -> RuleMap:
        return self._structured.get(category, {})

    def get_freeform_rules(self, category: str) -> RuleMap:
        return self._freeform.get(category, {})

    def _locate(self, category: str, host: str) -> tuple[dict[str, dict[str, list[str]]], str]:
        """Return (category maps, key) where a host is stored."""
        host = host.lower()
        if is_matchable(host):
            return self._structured, host
        # "*foo" does not compile as a regex
        if host.startswith("*"):
            host = "." + host
        return self._freeform, host

    def add(self, category: str, host: str, path: str) -> None:
        """Add a host/path rule without validating it."""
        if host is None:
            raise ValueError("host is required")
        if path is None:
            raise ValueError("path is required")
        maps, key = self._locate(category, host)
        maps.setdefault(category, {}).setdefault(key, []).append(normalize_path(path))

    def add_rule(self, category: str, rule: str, options: CheckOptions | None = None) -> ErrorCode:
        """Validate a "host/path" rule and add it if valid.

        Returns the validation result; rejected rules are not added.
        """
        error = check_error(rule, options)
        if error != ErrorCode.OK:
            logger.warning("Rejected %s rule %r: %s", category, rule, error.description)
            return error
        host, path = split_rule(rule)
        self.add(category, host, path)
        return error

    def remove(self, category: str, host: str, path: str) -> bool:
        """Remove one host/path rule. Returns True if it was present."""
        maps, key = self._locate(category, host)
        paths = maps.get(category, {}).get(key)
        path = normalize_path(path)
        if not paths or path not in paths:
            return False
        paths.remove(path)
        if not paths:
            del maps[category][key]
        return True

    def remove_all(self, category: str, host: str) -> int:
        """Remove every rule for a host. Returns the number of removed paths."""
        maps, key = self._locate(category, host)
        paths = maps.get(category, {}).pop(key, None)
        return len(paths) if paths else 0

    def contains(self, category: str, host: str, path: str) -> bool:
        """Check whether exactly this host/path rule is stored."""
        maps, key = self._locate(category, host)
        return normalize_path(path) in maps.get(category, {}).get(key, [])

    def size(self, category: str | None = None) -> int:
        """Count stored host/path rules, for one category or all of them."""
        total = 0
        for maps in (self._structured, self._freeform):
            for name, rules in maps.items():
                if category is None or name == category:
                    total += sum(len(paths) for paths in rules.values())
        return total

    def categories(self) -> list[str]:
        """Categories that hold at least one host key."""
        names = set(self._structured) | set(self._freeform)
        return sorted(
            name for name in names
            if self._structured.get(name) or self._freeform.get(name)
        )

    def clear(self) -> None:
        """Remove all rules in all categories."""
        self._structured.clear()
        self._freeform.clear()
