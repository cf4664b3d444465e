"""
Advent Calendar — Assignment Engine
Daily giver -> receiver pairings for the working days of a month, with jokers
layered on per week and two month-wide coverage passes.

Pipeline:
  1. daily derangements, chained so yesterday's pairs are avoided
  2. weekly joker allocation (coverage step, then capacity fill)
  3. any-joker coverage across the month
  4. kindness coverage across the month
Steps 2-4 are re-run up to max_attempts times on fresh copies of the
pairings; the attempt leaving the fewest kindness gaps wins, and a perfect
attempt ends the search early.
"""

from collections import defaultdict

from advent.config import (
    DEFAULT_CAP, DEFAULT_CUTOFF_DAY, DEFAULT_MAX_ATTEMPTS, DEFAULT_MAX_DERANGEMENT_TRIES,
    parse_iso_date, parse_week_caps,
)
from advent.coverage import ensure_any_joker, ensure_kindness, joker_gaps
from advent.jokers import KINDNESS, WEEK_JOKERS, assign_jokers_for_all_weeks, has_weekly_joker
from advent.pairing import build_daily_pairings, check_participants
from advent.random_source import resolve


# ============================================================
# INPUT CHECKS
# ============================================================

def check_allocation_inputs(default_cap, max_attempts):
    if int(default_cap) < 0:
        raise ValueError(f"Default cap must be >= 0, got {default_cap}")
    if int(max_attempts) < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")


def _month_label(records):
    return records[0]["date"].strftime("%Y-%m") if records else ""


# ============================================================
# JOKER SEARCH
# ============================================================

def _run_attempt(pairings, participant_ids, default_cap, week_caps, rand):
    """One full allocation on a fresh copy of pairings."""
    records = [dict(a) for a in pairings]
    month_state, week_flags = assign_jokers_for_all_weeks(records, default_cap, week_caps, rand)
    ensure_any_joker(records, month_state, participant_ids, rand)
    missing = ensure_kindness(records, month_state, participant_ids, rand)
    return {
        "records": records,
        "month_state": month_state,
        "week_flags": week_flags,
        "missing_kindness": missing,
    }


def assign_jokers_to_month(pairings, participant_ids, default_cap=DEFAULT_CAP, week_caps=None,
                           rand=None, max_attempts=DEFAULT_MAX_ATTEMPTS):
    """
    Bounded search over full-month joker allocations.

    pairings is not modified. Weekend records in it pass through untagged.

    Returns:
    - records: best attempt's records, sorted by date
    - flags: NO_WEEKLY_JOKER / NO_JOKER / NO_KINDNESS for goals the best
      attempt left unmet
    - attempts: how many attempts ran
    """
    rand = resolve(rand)
    check_allocation_inputs(default_cap, max_attempts)
    week_caps = parse_week_caps(week_caps or {})

    best = None
    attempts = 0
    for attempts in range(1, int(max_attempts) + 1):
        result = _run_attempt(pairings, participant_ids, default_cap, week_caps, rand)
        if best is None or len(result["missing_kindness"]) < len(best["missing_kindness"]):
            best = result
        if not best["missing_kindness"]:
            break

    records = best["records"]
    records.sort(key=lambda a: a["date"])
    month_state = best["month_state"]
    month_label = _month_label(records)
    flags = []

    # Weekly gaps the month pass later filled in the same week are dropped
    for f in best["week_flags"]:
        state = month_state[parse_iso_date(f["date"])]
        if not has_weekly_joker(state, f["participant"]):
            flags.append(f)

    for pid in joker_gaps(records, participant_ids):
        flags.append({
            "date": month_label,
            "participant": pid,
            "flag_type": "NO_JOKER",
            "message": "Receives no weekly joker all month (no eligible slot left)",
        })

    for pid in best["missing_kindness"]:
        flags.append({
            "date": month_label,
            "participant": pid,
            "flag_type": "NO_KINDNESS",
            "message": f"Never receives {KINDNESS.value} after {attempts} attempts",
        })

    return records, flags, attempts


# ============================================================
# ORCHESTRATOR
# ============================================================

def generate_month(participants, year, month, cutoff_day=DEFAULT_CUTOFF_DAY, rand=None,
                   default_cap=DEFAULT_CAP, week_caps=None, max_attempts=DEFAULT_MAX_ATTEMPTS,
                   max_derangement_tries=DEFAULT_MAX_DERANGEMENT_TRIES):
    """
    Generate a month of assignments with jokers.

    Returns:
    - records: list of {date, giver_id, receiver_id, joker}, sorted by date
    - flags: list of {date, participant, flag_type, message} for every
      best-effort goal that was not met (never raised)

    Raises ValueError for invalid input before doing any work.
    """
    rand = resolve(rand)
    participant_ids = check_participants(participants)
    check_allocation_inputs(default_cap, max_attempts)
    week_caps = parse_week_caps(week_caps or {})

    pairings, flags = build_daily_pairings(
        participants, year, month, cutoff_day, rand, max_derangement_tries)

    records, joker_flags, attempts = assign_jokers_to_month(
        pairings, participant_ids, default_cap, week_caps, rand, max_attempts)
    flags.extend(joker_flags)

    for f in joker_flags:
        if f["flag_type"] == "NO_JOKER":
            print(f"  WARNING: {f['participant']} receives no joker in {f['date']}")
    missing_kindness = [f for f in joker_flags if f["flag_type"] == "NO_KINDNESS"]
    if missing_kindness:
        names = ", ".join(f["participant"] for f in missing_kindness)
        print(f"  WARNING: kindness coverage incomplete after {attempts} attempts "
              f"({len(missing_kindness)} missing: {names})")

    return records, flags


def generate_month_assignments(participants, year, month, cutoff_day=DEFAULT_CUTOFF_DAY,
                               rand=None, **kwargs):
    """Records only: the flat, date-sorted list downstream pages consume."""
    records, _flags = generate_month(participants, year, month, cutoff_day, rand, **kwargs)
    return records


# ============================================================
# STATS
# ============================================================

def build_participant_stats(records, participants, flags=()):
    """Per-participant tallies: days given/received, jokers by type, repeats."""
    stats = {}
    for p in participants:
        stats[p["id"]] = {
            "name": p.get("name") or p["id"],
            "days_given": 0,
            "days_received": 0,
            "jokers_received": defaultdict(int),
            "jokers_given": defaultdict(int),
            "total_jokers_received": 0,
            "kindness_received": 0,
            "repeat_pairs": 0,
            "flags": [],
        }

    for a in records:
        giver = stats.get(a["giver_id"])
        receiver = stats.get(a["receiver_id"])
        if giver is not None:
            giver["days_given"] += 1
        if receiver is not None:
            receiver["days_received"] += 1
        joker = a["joker"]
        if joker is None or joker not in WEEK_JOKERS:
            continue
        if giver is not None:
            giver["jokers_given"][joker.value] += 1
        if receiver is not None:
            receiver["jokers_received"][joker.value] += 1
            receiver["total_jokers_received"] += 1
            if joker == KINDNESS:
                receiver["kindness_received"] += 1

    for f in flags:
        s = stats.get(f.get("participant"))
        if s is None:
            continue
        s["flags"].append(f["flag_type"])
        if f["flag_type"] == "REPEAT_PAIR":
            s["repeat_pairs"] += 1

    for s in stats.values():
        s["jokers_received"] = dict(s["jokers_received"])
        s["jokers_given"] = dict(s["jokers_given"])

    return stats
