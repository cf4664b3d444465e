from __future__ import annotations

from datetime import date

from advent.engine import generate_month
from advent.jokers import JokerType
from advent.random_source import seeded_random
from advent.validate import format_results, run_checks, summarize

from tests.utils import make_participants, record

MONDAY = date(2025, 12, 1)
TUESDAY = date(2025, 12, 2)
PARTICIPANTS = [{"id": "a", "name": "A"}, {"id": "b", "name": "B"}, {"id": "c", "name": "C"}]


def _status(results, number):
    for status, check, _details in results:
        if check.startswith(f"Check {number}:"):
            return status
    raise KeyError(number)


def test_generated_month_has_no_failures() -> None:
    participants = make_participants(6)
    records, _ = generate_month(participants, 2025, 12, 24, seeded_random(12), max_attempts=5)
    results = run_checks(records, participants)
    assert summarize(results)[2] == 0
    assert len(results) == 8


def test_self_pairing_fails() -> None:
    records = [record(MONDAY, "a", "a"), record(MONDAY, "b", "c"), record(MONDAY, "c", "b")]
    results = run_checks(records, PARTICIPANTS)
    assert _status(results, 1) == "FAIL"
    assert _status(results, 2) == "PASS"


def test_incomplete_day_fails() -> None:
    records = [record(MONDAY, "a", "b"), record(MONDAY, "b", "a")]
    assert _status(run_checks(records, PARTICIPANTS), 2) == "FAIL"


def test_consecutive_repeat_warns() -> None:
    day1 = [record(MONDAY, "a", "b"), record(MONDAY, "b", "c"), record(MONDAY, "c", "a")]
    day2 = [record(TUESDAY, "a", "b"), record(TUESDAY, "b", "c"), record(TUESDAY, "c", "a")]
    assert _status(run_checks(day1 + day2, PARTICIPANTS), 3) == "WARN"


def test_duplicate_joker_and_cap_fail() -> None:
    records = [
        record(MONDAY, "a", "b", JokerType.VOL), record(MONDAY, "b", "c"), record(MONDAY, "c", "a"),
        record(TUESDAY, "a", "c"), record(TUESDAY, "b", "a"), record(TUESDAY, "c", "b", JokerType.VOL),
    ]
    results = run_checks(records, PARTICIPANTS, default_cap=1)
    assert _status(results, 4) == "FAIL"
    assert _status(results, 5) == "FAIL"

    results = run_checks(records, PARTICIPANTS, default_cap=1, week_caps={MONDAY: 2})
    assert _status(results, 5) == "PASS"


def test_collective_joker_on_weekday_fails() -> None:
    records = [record(MONDAY, "a", "b", JokerType.COMMUN), record(MONDAY, "b", "c"), record(MONDAY, "c", "a")]
    assert _status(run_checks(records, PARTICIPANTS), 6) == "FAIL"


def test_coverage_gaps_warn() -> None:
    records = [record(MONDAY, "a", "b", JokerType.GENTILLESSE), record(MONDAY, "b", "c"), record(MONDAY, "c", "a")]
    results = run_checks(records, PARTICIPANTS)
    assert _status(results, 7) == "WARN"
    assert _status(results, 8) == "WARN"
    text = format_results(results)
    assert "[WARN] Check 8: Kindness coverage" in text
    assert "warnings" in text
