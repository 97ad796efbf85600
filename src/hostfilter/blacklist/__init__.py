"""Host/path blacklist matching and rule validation."""

from .matcher import BlacklistMatcher, is_listed, structured_keys
from .source import MemoryRuleSource, is_matchable
from .types import (
    BLACKLIST_CRAWLER,
    BLACKLIST_DHT,
    BLACKLIST_NEWS,
    BLACKLIST_PROXY,
    BLACKLIST_SEARCH,
    BLACKLIST_SURFTIPS,
    BLACKLIST_TYPES,
    CheckOptions,
    ErrorCode,
    RuleMap,
    RuleSource,
)
from .validator import check_error, is_valid_regex, split_rule, validate_rules

__all__ = [
    # Types
    "ErrorCode",
    "CheckOptions",
    "RuleMap",
    "RuleSource",
    "BLACKLIST_TYPES",
    "BLACKLIST_PROXY",
    "BLACKLIST_CRAWLER",
    "BLACKLIST_DHT",
    "BLACKLIST_SEARCH",
    "BLACKLIST_SURFTIPS",
    "BLACKLIST_NEWS",
    # Validator
    "check_error",
    "is_valid_regex",
    "split_rule",
    "validate_rules",
    # Matcher
    "BlacklistMatcher",
    "is_listed",
    "structured_keys",
    # Rule source
    "MemoryRuleSource",
    "is_matchable",
]
