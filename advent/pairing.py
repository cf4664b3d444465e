"""
Advent Calendar — Daily Pairing
Builds one giver -> receiver derangement per working day, chaining days so a
giver does not get the same receiver two working days in a row.
"""

from datetime import date, timedelta

import networkx as nx

from advent.config import DEFAULT_MAX_DERANGEMENT_TRIES
from advent.random_source import resolve, shuffle_in_place


# ============================================================
# INPUT CHECKS
# ============================================================

def check_participants(participants):
    """Fail fast on participant lists the pairer cannot work with.

    A single participant would have to give to themselves every day, so it
    is rejected along with empty lists.
    """
    if not participants:
        raise ValueError("Participant list is empty; pairing needs at least 2 participants")
    ids = [p.get("id") for p in participants]
    if any(not pid for pid in ids):
        raise ValueError("Every participant needs a non-empty 'id'")
    seen = set()
    dupes = []
    for pid in ids:
        if pid in seen and pid not in dupes:
            dupes.append(pid)
        seen.add(pid)
    if dupes:
        raise ValueError(f"Participant ids must be unique; duplicated: {dupes}")
    if len(ids) < 2:
        raise ValueError(f"Pairing needs at least 2 participants, got {len(ids)} ({ids[0]})")
    return ids


# ============================================================
# DERANGEMENTS
# ============================================================

def _simple_derangement(ids, rand):
    """Shuffle, then swap any fixed point with its neighbour.

    One pass is enough for distinct ids: the swap never reintroduces a fixed
    point behind the cursor.
    """
    result = list(ids)
    n = len(result)
    shuffle_in_place(result, rand)
    for i in range(n):
        if result[i] == ids[i]:
            j = i - 1 if i == n - 1 else i + 1
            result[i], result[j] = result[j], result[i]
    return result


def _is_valid(ids, receivers, forbidden):
    for giver, receiver in zip(ids, receivers):
        if receiver == giver or forbidden.get(giver) == receiver:
            return False
    return True


def _matching_derangement(ids, forbidden, rand):
    """Randomized bipartite matching of givers to allowed receivers.

    Returns None when no perfect matching exists (e.g. two participants who
    swapped yesterday).
    """
    G = nx.Graph()
    givers = [("giver", i) for i in range(len(ids))]
    for i in range(len(ids)):
        G.add_node(("giver", i), bipartite=0)
        G.add_node(("receiver", i), bipartite=1)

    for i, giver in enumerate(ids):
        banned = {giver, forbidden.get(giver)}
        for j, receiver in enumerate(ids):
            if receiver in banned:
                continue
            # strictly positive: zero weights can read as missing edges
            G.add_edge(("giver", i), ("receiver", j), weight=1.0 + rand())

    try:
        matching = nx.bipartite.minimum_weight_full_matching(G, top_nodes=givers)
    except (ValueError, nx.NetworkXError):
        matching = nx.bipartite.maximum_matching(G, top_nodes=givers)

    receivers = []
    for node in givers:
        matched = matching.get(node)
        if matched is None:
            return None
        receivers.append(ids[matched[1]])
    return receivers


def derange(ids, forbidden=None, rand=None, max_tries=DEFAULT_MAX_DERANGEMENT_TRIES):
    """Permutation of ids with result[i] != ids[i].

    forbidden maps an id to one extra receiver it should not get (yesterday's
    receiver). That exclusion is best-effort: after max_tries shuffles a
    matching is attempted, and if even that fails the plain derangement is
    returned and yesterday's pair may repeat. Self-pairing is never returned
    for two or more ids; 0 or 1 ids come back unchanged.
    """
    rand = resolve(rand)
    ids = list(ids)
    if len(ids) <= 1:
        return ids
    if not forbidden:
        return _simple_derangement(ids, rand)

    for _ in range(max_tries):
        receivers = list(ids)
        shuffle_in_place(receivers, rand)
        if _is_valid(ids, receivers, forbidden):
            return receivers

    receivers = _matching_derangement(ids, forbidden, rand)
    if receivers is not None:
        return receivers
    return _simple_derangement(ids, rand)


# ============================================================
# CALENDAR
# ============================================================

def working_days(year, month, cutoff_day):
    """Mon-Fri dates of the month, up to and including cutoff_day."""
    if not 1 <= int(month) <= 12:
        raise ValueError(f"Month must be 1-12, got {month}")
    if int(cutoff_day) <= 0:
        raise ValueError(f"Cutoff day must be positive, got {cutoff_day}")

    days = []
    dt = date(int(year), int(month), 1)
    while dt.month == int(month) and dt.day <= int(cutoff_day):
        if dt.weekday() < 5:
            days.append(dt)
        dt += timedelta(days=1)
    return days


# ============================================================
# DAILY PAIRER
# ============================================================

def build_daily_pairings(participants, year, month, cutoff_day, rand=None,
                         max_tries=DEFAULT_MAX_DERANGEMENT_TRIES):
    """
    One record per participant per working day, giver = the participant.

    Returns:
    - records: list of {date, giver_id, receiver_id, joker=None}, one block
      per working day in date order, participant order within a day
    - flags: REPEAT_PAIR entries where yesterday's pair could not be avoided
    """
    rand = resolve(rand)
    ids = check_participants(participants)

    records = []
    flags = []
    previous = None

    for day in working_days(year, month, cutoff_day):
        forbidden = None
        if previous:
            forbidden = {a["giver_id"]: a["receiver_id"] for a in previous}

        receivers = derange(ids, forbidden, rand, max_tries)
        daily = [
            {"date": day, "giver_id": giver, "receiver_id": receiver, "joker": None}
            for giver, receiver in zip(ids, receivers)
        ]

        if forbidden:
            for a in daily:
                if forbidden.get(a["giver_id"]) == a["receiver_id"]:
                    flags.append({
                        "date": day.isoformat(),
                        "participant": a["giver_id"],
                        "flag_type": "REPEAT_PAIR",
                        "message": f"Gives to {a['receiver_id']} two working days in a row "
                                   f"(no alternative pairing exists)",
                    })

        records.extend(daily)
        previous = daily

    return records, flags
