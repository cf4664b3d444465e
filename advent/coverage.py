"""
Advent Calendar — Month-wide Joker Coverage
Corrective passes run after every week has been allocated:
  - any-joker pass: everyone receives at least one weekly joker in the month
  - kindness pass: everyone receives GENTILLESSE at least once in the month,
    re-tagging one of their other jokers if that is the only way
Both passes respect the per-week caps and the no-repeat-per-person rules.
"""

from advent.jokers import (
    KINDNESS, WEEK_JOKERS, assign_joker, can_take, eligible_jokers, unassign_joker, week_key,
)
from advent.random_source import pick, resolve, shuffle_in_place


def joker_gaps(records, participant_ids):
    """Participants who never receive a weekly joker in records."""
    covered = {a["receiver_id"] for a in records if a["joker"] in WEEK_JOKERS}
    return [pid for pid in participant_ids if pid not in covered]


def kindness_gaps(records, participant_ids):
    """Participants who never receive the kindness joker in records."""
    covered = {a["receiver_id"] for a in records if a["joker"] == KINDNESS}
    return [pid for pid in participant_ids if pid not in covered]


def _week_state(month_state, record):
    # Weekend records have no week state and are never touched
    return month_state.get(week_key(record["date"]))


def ensure_any_joker(records, month_state, participant_ids, rand=None):
    """
    Give every joker-less participant one weekly joker somewhere in the month.

    Candidates are (free receiver slot, joker) pairs that fit that slot's
    week; one is picked at random per gap.

    Returns the participants that could not be served, in participant order.
    """
    rand = resolve(rand)
    gaps = joker_gaps(records, participant_ids)
    if not gaps:
        return []
    shuffle_in_place(gaps, rand)

    unresolved = set()
    for pid in gaps:
        options = []
        for a in records:
            if a["receiver_id"] != pid or a["joker"] is not None:
                continue
            state = _week_state(month_state, a)
            if state is None:
                continue
            for joker in eligible_jokers(state, a):
                options.append((a, joker))

        if not options:
            unresolved.add(pid)
            continue

        slot, joker = pick(options, rand)
        assign_joker(_week_state(month_state, slot), slot, joker)

    return [pid for pid in participant_ids if pid in unresolved]


def ensure_kindness(records, month_state, participant_ids, rand=None):
    """
    Give every participant the kindness joker at least once in the month.

    Free receiver slots are preferred; failing that, one of the participant's
    other weekly jokers is swapped for kindness (the old joker's usage and
    per-person tracking are released first). Either way kindness must be
    under its week's cap and not already held that week by the slot's giver
    or receiver.

    A month where everyone already has kindness is left untouched.

    Returns the participants still missing kindness, in participant order.
    """
    rand = resolve(rand)
    gaps = kindness_gaps(records, participant_ids)
    if not gaps:
        return []
    shuffle_in_place(gaps, rand)

    missing = set()
    for pid in gaps:
        free = []
        retag = []
        for a in records:
            if a["receiver_id"] != pid:
                continue
            state = _week_state(month_state, a)
            if state is None or not can_take(state, a, KINDNESS):
                continue
            if a["joker"] is None:
                free.append(a)
            elif a["joker"] in WEEK_JOKERS:
                retag.append(a)

        pool = free or retag
        if not pool:
            missing.add(pid)
            continue

        slot = pick(pool, rand)
        state = _week_state(month_state, slot)
        if slot["joker"] is not None:
            unassign_joker(state, slot)
        assign_joker(state, slot, KINDNESS)

    return [pid for pid in participant_ids if pid in missing]
