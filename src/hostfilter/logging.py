"""Logging configuration and classification decision logging."""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Configuration from environment
LOG_FILE = os.environ.get("HOSTFILTER_LOG_FILE")
DECISIONS_FILE = os.environ.get("HOSTFILTER_DECISIONS_FILE")
VERBOSE = os.environ.get("VERBOSE", "0") == "1"

# Module-level state (initialized by init_logging)
logger: logging.Logger = None
_decisions_file = None


def init_logging() -> logging.Logger:
    """Initialize logging. Returns the main logger."""
    global logger, _decisions_file

    # Operational logger (human-readable); library modules log below it
    logger = logging.getLogger("hostfilter")
    logger.setLevel(logging.DEBUG if VERBOSE else logging.INFO)
    logger.propagate = False
    logger.handlers.clear()
    if LOG_FILE:
        handler = logging.FileHandler(LOG_FILE)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(asctime)s %(name)s %(levelname)s %(message)s'))
    logger.addHandler(handler)

    # Decision records (JSONL format, line-buffered)
    if DECISIONS_FILE and _decisions_file is None:
        _decisions_file = open(DECISIONS_FILE, "a", buffering=1)

    return logger


def close_logging():
    """Close logging resources."""
    global _decisions_file
    if _decisions_file:
        _decisions_file.close()
        _decisions_file = None


def log_decision(**kwargs) -> None:
    """Log a classification decision as JSONL (verdict at end for readability)."""
    if not _decisions_file:
        return
    verdict = kwargs.pop("verdict", None)
    event = {"ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds")}
    event.update(kwargs)
    if verdict is not None:
        event["verdict"] = verdict
    _decisions_file.write(json.dumps(event, separators=(",", ":")) + "\n")
