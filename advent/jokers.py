"""
Advent Calendar — Weekly Joker Allocation
Assigns joker tags across one Monday-anchored week of pairings:
  - no receiver holds the same joker twice in a week, and no giver either
  - at most `cap` jokers of each type per week
  - every receiver gets at least one weekly joker when capacity allows
  - jokers already on a record are never overwritten
"""

from collections import defaultdict
from datetime import timedelta
from enum import Enum

from advent.config import cap_for_week
from advent.random_source import pick, resolve, shuffle_in_place


class JokerType(Enum):
    VOL = "VOL"
    PARTAGE = "PARTAGE"
    GENTILLESSE = "GENTILLESSE"
    MYSTERE = "MYSTERE"
    COMMUN = "COMMUN"


# Weekly jokers, in fill order. COMMUN is the weekend "collective chocolate"
# and is never handed out by the allocators.
WEEK_JOKERS = [JokerType.VOL, JokerType.PARTAGE, JokerType.GENTILLESSE, JokerType.MYSTERE]

KINDNESS = JokerType.GENTILLESSE

JOKER_LABELS = {
    JokerType.VOL: "JOKER PERE FOUETTARD",
    JokerType.PARTAGE: "JOKER PARTAGE",
    JokerType.GENTILLESSE: "JOKER GENTILLESSE",
    JokerType.MYSTERE: "JOKER MYSTERE",
    JokerType.COMMUN: "CHOCOLAT COLLECTIF",
}

JOKER_DESCRIPTIONS = {
    JokerType.VOL: "Giver keeps the chocolate",
    JokerType.PARTAGE: "Giver and receiver share the chocolate",
    JokerType.GENTILLESSE: "Chocolate comes with a kind note",
    JokerType.MYSTERE: "Chocolate is dropped off in secret",
    JokerType.COMMUN: "Everyone shares the chocolate",
}


# ============================================================
# WEEK BUCKETS
# ============================================================

def week_key(dt):
    """Monday of dt's week."""
    return dt - timedelta(days=dt.weekday())


def is_weekend(dt):
    """Saturday (5) or Sunday (6)."""
    return dt.weekday() >= 5


def group_by_week(records):
    """Split records into {monday: [weekday records]} and weekend records.

    Weeks come out in first-seen order, which is chronological for the
    pairer's output.
    """
    weeks = {}
    weekend = []
    for a in records:
        if is_weekend(a["date"]):
            weekend.append(a)
            continue
        weeks.setdefault(week_key(a["date"]), []).append(a)
    return weeks, weekend


# ============================================================
# WEEK STATE
# ============================================================

def new_week_state(week_start, cap, records=()):
    """Usage counters and per-person tag sets for one week bucket.

    Jokers already present on records are counted in.
    """
    state = {
        "week_start": week_start,
        "cap": cap,
        "usage": {t: 0 for t in JokerType},
        "receiver_tags": defaultdict(set),
        "giver_tags": defaultdict(set),
    }
    for a in records:
        if a["joker"] is None:
            continue
        state["usage"][a["joker"]] += 1
        state["receiver_tags"][a["receiver_id"]].add(a["joker"])
        state["giver_tags"][a["giver_id"]].add(a["joker"])
    return state


def assign_joker(state, record, joker):
    """Put joker on record and record it in the week state."""
    record["joker"] = joker
    state["usage"][joker] += 1
    state["receiver_tags"][record["receiver_id"]].add(joker)
    state["giver_tags"][record["giver_id"]].add(joker)


def unassign_joker(state, record):
    """Undo assign_joker. Returns the joker that was removed."""
    joker = record["joker"]
    record["joker"] = None
    state["usage"][joker] = max(0, state["usage"][joker] - 1)
    state["receiver_tags"][record["receiver_id"]].discard(joker)
    state["giver_tags"][record["giver_id"]].discard(joker)
    return joker


def can_take(state, record, joker):
    """joker is under cap and neither side of record holds it this week."""
    if state["usage"][joker] >= state["cap"]:
        return False
    if joker in state["receiver_tags"][record["receiver_id"]]:
        return False
    if joker in state["giver_tags"][record["giver_id"]]:
        return False
    return True


def eligible_jokers(state, record):
    return [t for t in WEEK_JOKERS if can_take(state, record, t)]


def has_weekly_joker(state, receiver_id):
    held = state["receiver_tags"].get(receiver_id, ())
    return any(t in held for t in WEEK_JOKERS)


# ============================================================
# WEEKLY ALLOCATOR
# ============================================================

def assign_weekly_jokers(records, state, rand=None):
    """
    Fill jokers on one week's records in place.

    Step A (coverage): each receiver without a weekly joker gets one on a
    random free slot of theirs. Step B (fill): each type in WEEK_JOKERS
    order is topped up to the cap on random eligible free records.

    Returns flags: NO_WEEKLY_JOKER for receivers step A could not serve.
    """
    rand = resolve(rand)
    flags = []
    week_label = state["week_start"].isoformat()

    receivers = list(dict.fromkeys(a["receiver_id"] for a in records))
    needing = [rid for rid in receivers if not has_weekly_joker(state, rid)]
    shuffle_in_place(needing, rand)

    # --- Step A: at least one joker per receiver ---
    for rid in needing:
        free_slots = [a for a in records if a["receiver_id"] == rid and a["joker"] is None]
        shuffle_in_place(free_slots, rand)

        served = False
        for slot in free_slots:
            options = eligible_jokers(state, slot)
            if options:
                assign_joker(state, slot, pick(options, rand))
                served = True
                break

        if not served:
            reason = "no free slot" if not free_slots else "no joker type left under cap"
            flags.append({
                "date": week_label,
                "participant": rid,
                "flag_type": "NO_WEEKLY_JOKER",
                "message": f"No weekly joker in week of {week_label} ({reason})",
            })

    # --- Step B: top each type up to the cap ---
    for joker in WEEK_JOKERS:
        while state["usage"][joker] < state["cap"]:
            candidates = [a for a in records if a["joker"] is None and can_take(state, a, joker)]
            if not candidates:
                break
            assign_joker(state, pick(candidates, rand), joker)

    return flags


def assign_jokers_for_all_weeks(records, default_cap, week_caps=None, rand=None):
    """
    Run the weekly allocator on every week bucket of records (in place).

    Weekend records pass through untouched.

    Returns:
    - month_state: {monday: week state}, in week order
    - flags: weekly coverage flags from every week
    """
    rand = resolve(rand)
    weeks, _weekend = group_by_week(records)

    month_state = {}
    flags = []
    for week_start, week_records in weeks.items():
        cap = cap_for_week(week_start, default_cap, week_caps)
        state = new_week_state(week_start, cap, week_records)
        flags.extend(assign_weekly_jokers(week_records, state, rand))
        month_state[week_start] = state

    return month_state, flags
