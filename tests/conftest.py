"""Shared test fixtures and rule sources."""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest


class StaticRuleSource:
    """RuleSource returning fixed maps for one category, recording lookups."""

    def __init__(self, structured=None, freeform=None, category="proxy"):
        self.category = category
        self.structured = structured or {}
        self.freeform = freeform or {}
        self.freeform_lookups = 0

    def get_structured_rules(self, category):
        return self.structured if category == self.category else {}

    def get_freeform_rules(self, category):
        self.freeform_lookups += 1
        return self.freeform if category == self.category else {}


@pytest.fixture(autouse=True)
def reset_hostfilter_logger():
    """Undo init_logging() so caplog sees records in later tests."""
    yield
    logger = logging.getLogger("hostfilter")
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
