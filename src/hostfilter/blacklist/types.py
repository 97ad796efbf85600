"""Blacklist rule types, error codes and the rule source interface."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Protocol

# Host key (literal, single-wildcard or regex) -> ordered path patterns
RuleMap = Mapping[str, Sequence[str]]

# Well-known blacklist categories
BLACKLIST_PROXY = "proxy"
BLACKLIST_CRAWLER = "crawler"
BLACKLIST_DHT = "dht"
BLACKLIST_SEARCH = "search"
BLACKLIST_SURFTIPS = "surftips"
BLACKLIST_NEWS = "news"

BLACKLIST_TYPES = (
    BLACKLIST_PROXY,
    BLACKLIST_CRAWLER,
    BLACKLIST_DHT,
    BLACKLIST_SEARCH,
    BLACKLIST_SURFTIPS,
    BLACKLIST_NEWS,
)

# Path pattern that matches every path
MATCH_ALL_PATH = "*"

# Path used when a rule has no "/" part
DEFAULT_PATH = ".*"


class ErrorCode(IntEnum):
    """Result of checking a rule. OK (0) means the rule is acceptable."""

    OK = 0
    TWO_WILDCARDS_IN_HOST = 1
    SUBDOMAIN_XOR_WILDCARD = 2
    PATH_REGEX = 3
    WILDCARD_BEGIN_OR_END = 4
    HOST_WRONG_CHARS = 5
    HOST_REGEX = 7

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ErrorCode.OK: "rule is valid",
    ErrorCode.TWO_WILDCARDS_IN_HOST: "host contains more than one wildcard",
    ErrorCode.SUBDOMAIN_XOR_WILDCARD: "a wildcard must replace a whole host label",
    ErrorCode.PATH_REGEX: "path is not a valid regular expression",
    ErrorCode.WILDCARD_BEGIN_OR_END: "a wildcard is only allowed at the beginning or end of the host",
    ErrorCode.HOST_WRONG_CHARS: "host contains characters outside [A-Za-z0-9_-.*]",
    ErrorCode.HOST_REGEX: "host is not a valid regular expression",
}


@dataclass
class CheckOptions:
    """Options for rule validation.

    Attributes:
        allow_regex: Accept free-form host regular expressions as hosts.
    """

    allow_regex: bool = True

    @classmethod
    def from_properties(cls, properties: Mapping[str, str] | None) -> "CheckOptions":
        """Create CheckOptions from string properties (e.g. {"allowRegex": "false"})."""
        if properties is None:
            return cls()
        value = properties.get("allowRegex", "true")
        return cls(allow_regex=str(value).lower() == "true")


# The options used when a caller passes none
DEFAULT_OPTIONS = CheckOptions()


class RuleSource(Protocol):
    """Read-only provider of the rule maps for a category.

    Returned mappings must not be mutated while a lookup is in flight.
    Unknown categories yield empty mappings.
    """

    def get_structured_rules(self, category: str) -> RuleMap:
        """Literal and single-wildcard host keys to path patterns."""
        ...

    def get_freeform_rules(self, category: str) -> RuleMap:
        """Host regular expressions to path regular expressions."""
        ...
