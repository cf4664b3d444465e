"""
Advent Calendar — Configuration
Loads config.json (participants, period, caps) over in-code defaults.

config.json is not committed: it holds participant names and emails.
See config.example.json for the shape.
"""

import json
import os
from datetime import date, datetime

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(SCRIPT_DIR)
CONFIG_FILE = os.path.join(PROJECT_ROOT, "config.json")
OUTPUT_DIR = os.path.join(PROJECT_ROOT, "output")

# ============================================================
# DEFAULTS
# ============================================================

DEFAULT_YEAR = 2025
DEFAULT_MONTH = 12
# Days after this day-of-month are never paired (Dec 24 for the advent run)
DEFAULT_CUTOFF_DAY = 24

# Max jokers of each weekly type per week
DEFAULT_CAP = 4
# Full-month attempts for the kindness coverage search
DEFAULT_MAX_ATTEMPTS = 40
# Shuffle attempts before the derangement builder stops trying to avoid
# yesterday's pairs by chance
DEFAULT_MAX_DERANGEMENT_TRIES = 1000

DEFAULTS = {
    "year": DEFAULT_YEAR,
    "month": DEFAULT_MONTH,
    "cutoff_day": DEFAULT_CUTOFF_DAY,
    "default_cap": DEFAULT_CAP,
    "week_caps": {},
    "max_attempts": DEFAULT_MAX_ATTEMPTS,
    "max_derangement_tries": DEFAULT_MAX_DERANGEMENT_TRIES,
    "seeds": [],
    "participants": [],
    "output_dir": OUTPUT_DIR,
}


def load_config(path=None):
    """Load config.json on top of DEFAULTS.

    A missing file is not an error; the defaults are returned as-is.
    Malformed JSON propagates.
    """
    path = path or CONFIG_FILE
    config = dict(DEFAULTS)
    config["week_caps"] = {}
    if os.path.exists(path):
        with open(path, 'r', encoding="utf-8") as f:
            config.update(json.load(f))
    config["week_caps"] = parse_week_caps(config.get("week_caps") or {})
    return config


def parse_iso_date(value):
    """Parse 'YYYY-MM-DD' (or pass a date through)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Malformed date '{value}' (expected YYYY-MM-DD)") from None


def parse_week_caps(raw):
    """Turn {"2025-12-22": 2} into {date(2025, 12, 22): 2}.

    Keys must be Mondays (the week bucket key); caps must be >= 0.
    """
    caps = {}
    for key, value in raw.items():
        week_start = parse_iso_date(key)
        if week_start.weekday() != 0:
            raise ValueError(f"Week cap key {week_start.isoformat()} is not a Monday")
        cap = int(value)
        if cap < 0:
            raise ValueError(f"Week cap for {week_start.isoformat()} is negative ({cap})")
        caps[week_start] = cap
    return caps


def cap_for_week(week_start, default_cap, week_caps=None):
    """Per-type cap for the week starting on week_start."""
    if week_caps and week_start in week_caps:
        return week_caps[week_start]
    return default_cap
