"""Tests for rule validation: host grammar, wildcard placement and regexes."""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hostfilter.blacklist import CheckOptions, ErrorCode, check_error, split_rule, validate_rules
from hostfilter.blacklist.validator import is_valid_host_syntax, is_valid_regex

NO_REGEX = CheckOptions(allow_regex=False)

# Nested deeper than the re parser can recurse
DEEP_NESTING = "(" * 5000 + ")" * 5000


class TestSplitRule:
    def test_host_only_defaults_to_match_all(self):
        assert split_rule("example.com") == ("example.com", ".*")

    def test_splits_on_first_slash(self):
        assert split_rule("example.com/a/b") == ("example.com", "a/b")

    def test_empty_path(self):
        assert split_rule("example.com/") == ("example.com", "")

    def test_empty_host(self):
        assert split_rule("/x") == ("", "x")


class TestHostGrammar:
    @pytest.mark.parametrize(
        "host",
        ["example.com", "*", "*.example.com", "www.example.*", "a.*.b", "under_score-dash.com", "A1"],
    )
    def test_valid(self, host):
        assert is_valid_host_syntax(host)

    @pytest.mark.parametrize(
        "host",
        ["", ".", "a..b", "example.com.", "*a.com", "a.**", "ex@mple.com", "exa mple.com", "a/b"],
    )
    def test_invalid(self, host):
        assert not is_valid_host_syntax(host)


class TestIsValidRegex:
    def test_valid(self):
        assert is_valid_regex("a+")
        assert is_valid_regex("")
        assert is_valid_regex(r"(www\.)?example\.com")

    def test_invalid(self):
        assert not is_valid_regex("(")
        assert not is_valid_regex("[unclosed")
        assert not is_valid_regex("*a")

    def test_too_deeply_nested(self):
        assert not is_valid_regex(DEEP_NESTING)


class TestCheckError:
    """Each error code, in the order the checks run."""

    def test_valid_literal_host_without_regex(self):
        assert check_error("valid.host.com/.*", NO_REGEX) == ErrorCode.OK

    def test_valid_host_only(self):
        assert check_error("example.com") == ErrorCode.OK
        assert check_error("example.com", NO_REGEX) == ErrorCode.OK

    def test_wildcard_hosts(self):
        assert check_error("*.example.com") == ErrorCode.OK
        assert check_error("*.example.com", NO_REGEX) == ErrorCode.OK
        assert check_error("www.example.*", NO_REGEX) == ErrorCode.OK
        assert check_error("*", NO_REGEX) == ErrorCode.OK

    def test_leading_wildcard_glued_to_label(self):
        assert check_error("*a.com") == ErrorCode.SUBDOMAIN_XOR_WILDCARD
        assert check_error("*a.com", NO_REGEX) == ErrorCode.SUBDOMAIN_XOR_WILDCARD
        assert check_error("*example.com/path") == ErrorCode.SUBDOMAIN_XOR_WILDCARD

    def test_wildcard_in_middle_label(self):
        assert check_error("a.*.com", NO_REGEX) == ErrorCode.WILDCARD_BEGIN_OR_END

    def test_two_wildcards(self):
        assert check_error("*.example.*") == ErrorCode.TWO_WILDCARDS_IN_HOST
        assert check_error("*.example.*", NO_REGEX) == ErrorCode.TWO_WILDCARDS_IN_HOST

    def test_doubled_wildcard_label_is_a_character_error(self):
        """The label grammar runs before the wildcard count."""
        assert check_error("a.**", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS

    def test_wrong_chars(self):
        assert check_error("ex@mple.com", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS
        assert check_error("exa mple.com", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS
        assert check_error("www.example*", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS
        assert check_error("", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS

    def test_broken_host_regex(self):
        assert check_error("(bad", CheckOptions(allow_regex=True)) == ErrorCode.HOST_REGEX
        assert check_error("(bad", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS

    def test_path_regex(self):
        assert check_error("host/[unclosed") == ErrorCode.PATH_REGEX
        assert check_error("example.com/**") == ErrorCode.PATH_REGEX
        assert check_error("example.com/(", NO_REGEX) == ErrorCode.PATH_REGEX

    def test_too_deeply_nested_regex(self):
        assert check_error("example.com/" + DEEP_NESTING) == ErrorCode.PATH_REGEX
        assert check_error(DEEP_NESTING) == ErrorCode.HOST_REGEX
        assert check_error(DEEP_NESTING, NO_REGEX) == ErrorCode.HOST_WRONG_CHARS

    def test_path_star_and_empty(self):
        assert check_error("example.com/*") == ErrorCode.OK
        assert check_error("example.com/") == ErrorCode.OK

    def test_regex_host_skips_literal_checks(self):
        assert check_error("a.*.com") == ErrorCode.OK
        assert check_error("ex@mple.com") == ErrorCode.OK
        assert check_error(r"[a-z]+\.example\.com/.*") == ErrorCode.OK
        assert check_error(r"[a-z]+\.example\.com/.*", NO_REGEX) == ErrorCode.HOST_WRONG_CHARS

    def test_empty_host_is_a_valid_regex(self):
        assert check_error("") == ErrorCode.OK

    def test_first_error_wins(self):
        assert check_error("*a.com/[bad") == ErrorCode.SUBDOMAIN_XOR_WILDCARD
        assert check_error("a.*.com/[bad", NO_REGEX) == ErrorCode.WILDCARD_BEGIN_OR_END

    def test_default_options(self):
        assert check_error("ex@mple.com", None) == ErrorCode.OK


class TestCheckOptions:
    def test_defaults(self):
        assert CheckOptions().allow_regex is True
        assert CheckOptions.from_properties(None).allow_regex is True
        assert CheckOptions.from_properties({}).allow_regex is True

    def test_from_properties(self):
        assert CheckOptions.from_properties({"allowRegex": "FALSE"}).allow_regex is False
        assert CheckOptions.from_properties({"allowRegex": "True"}).allow_regex is True
        assert CheckOptions.from_properties({"allowRegex": "no"}).allow_regex is False


class TestErrorCode:
    def test_ok_is_zero(self):
        assert ErrorCode.OK == 0
        assert not ErrorCode.OK

    def test_every_code_has_a_description(self):
        for code in ErrorCode:
            assert code.description


class TestValidateRules:
    def test_reports_rejected_rules_with_index(self):
        errors = validate_rules(["a.com", "*a.com", "b.org/[x"])
        assert errors == [
            (2, "*a.com", ErrorCode.SUBDOMAIN_XOR_WILDCARD),
            (3, "b.org/[x", ErrorCode.PATH_REGEX),
        ]

    def test_all_valid(self):
        assert validate_rules(["a.com", "*.b.org/x"], NO_REGEX) == []
