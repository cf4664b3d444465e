"""
Advent Calendar — Automated Validation
Checks a generated month against the calendar rules. Each check yields
("PASS" | "WARN" | "FAIL", name, details). FAIL means a hard rule broke;
WARN means a best-effort goal was not reached.
"""

from collections import defaultdict

from advent.config import DEFAULT_CAP, cap_for_week, parse_week_caps
from advent.coverage import joker_gaps, kindness_gaps
from advent.jokers import JokerType, WEEK_JOKERS, group_by_week


def run_checks(records, participants, default_cap=DEFAULT_CAP, week_caps=None):
    """Run all checks. Returns a list of (status, check, details)."""
    week_caps = parse_week_caps(week_caps or {})
    results = []
    ids = [p["id"] for p in participants]
    id_set = set(ids)

    by_day = defaultdict(list)
    for a in records:
        by_day[a["date"]].append(a)
    days = sorted(by_day)

    # ── Check 1: Nobody gives to themselves ──
    self_pairs = [a for a in records if a["giver_id"] == a["receiver_id"]]
    if self_pairs:
        details = "; ".join(f"{a['date']}:{a['giver_id']}" for a in self_pairs)
        results.append(("FAIL", "Check 1: No self-pairing", f"{len(self_pairs)} self-pairs: {details}"))
    else:
        results.append(("PASS", "Check 1: No self-pairing", "No giver is their own receiver"))

    # ── Check 2: Each participant gives once and receives once per day ──
    bad_days = []
    for day in days:
        givers = [a["giver_id"] for a in by_day[day]]
        receivers = [a["receiver_id"] for a in by_day[day]]
        if sorted(givers) != sorted(ids) or sorted(receivers) != sorted(ids):
            bad_days.append(day.isoformat())
    if bad_days:
        results.append(("FAIL", "Check 2: Daily permutation",
                        f"{len(bad_days)} days are not a full permutation: {', '.join(bad_days)}"))
    else:
        results.append(("PASS", "Check 2: Daily permutation",
                        f"{len(days)} days, each participant gives and receives once per day"))

    # ── Check 3: No giver gets the same receiver two working days running ──
    repeats = []
    for prev_day, day in zip(days, days[1:]):
        prev = {a["giver_id"]: a["receiver_id"] for a in by_day[prev_day]}
        for a in by_day[day]:
            if prev.get(a["giver_id"]) == a["receiver_id"]:
                repeats.append(f"{day.isoformat()}:{a['giver_id']}->{a['receiver_id']}")
    if repeats:
        results.append(("WARN", "Check 3: Consecutive-day repeats", f"{len(repeats)} repeats: {'; '.join(repeats)}"))
    else:
        results.append(("PASS", "Check 3: Consecutive-day repeats", "No pair repeats on consecutive working days"))

    # ── Check 4 + 5: Weekly uniqueness and caps ──
    weeks, weekend = group_by_week(records)
    dupes = []
    over_cap = []
    for week_start, week_records in weeks.items():
        held_as_receiver = defaultdict(list)
        held_as_giver = defaultdict(list)
        counts = defaultdict(int)
        for a in week_records:
            if a["joker"] not in WEEK_JOKERS:
                continue
            held_as_receiver[a["receiver_id"]].append(a["joker"])
            held_as_giver[a["giver_id"]].append(a["joker"])
            counts[a["joker"]] += 1
        for role, held in (("receiver", held_as_receiver), ("giver", held_as_giver)):
            for pid, jokers in held.items():
                if len(jokers) != len(set(jokers)):
                    dupes.append(f"{week_start.isoformat()}:{pid} ({role})")
        cap = cap_for_week(week_start, default_cap, week_caps)
        for joker, n in counts.items():
            if n > cap:
                over_cap.append(f"{week_start.isoformat()}:{joker.value}={n}>{cap}")

    if dupes:
        results.append(("FAIL", "Check 4: Weekly joker uniqueness", f"{len(dupes)} duplicates: {'; '.join(dupes)}"))
    else:
        results.append(("PASS", "Check 4: Weekly joker uniqueness",
                        "Nobody holds the same joker twice in a week"))
    if over_cap:
        results.append(("FAIL", "Check 5: Weekly caps", f"{len(over_cap)} over cap: {'; '.join(over_cap)}"))
    else:
        results.append(("PASS", "Check 5: Weekly caps", f"All {len(weeks)} weeks within cap"))

    # ── Check 6: Jokers only from the weekly set, never on weekends ──
    stray = [a for a in records if a["joker"] == JokerType.COMMUN]
    stray += [a for a in weekend if a["joker"] is not None]
    unknown = [a for a in records if a["giver_id"] not in id_set or a["receiver_id"] not in id_set]
    if stray or unknown:
        results.append(("FAIL", "Check 6: Record shape",
                        f"{len(stray)} stray jokers, {len(unknown)} records with unknown participants"))
    else:
        results.append(("PASS", "Check 6: Record shape", "Only weekly jokers on weekday records"))

    # ── Check 7: Everyone receives a joker in the month ──
    gaps = joker_gaps(records, ids)
    if gaps:
        results.append(("WARN", "Check 7: Joker coverage", f"{len(gaps)} without a joker: {', '.join(gaps)}"))
    else:
        results.append(("PASS", "Check 7: Joker coverage", "Everyone receives at least one joker"))

    # ── Check 8: Everyone receives kindness in the month ──
    gaps = kindness_gaps(records, ids)
    if gaps:
        results.append(("WARN", "Check 8: Kindness coverage", f"{len(gaps)} without kindness: {', '.join(gaps)}"))
    else:
        results.append(("PASS", "Check 8: Kindness coverage", "Everyone receives GENTILLESSE at least once"))

    return results


def summarize(results):
    """(pass_count, warn_count, fail_count)"""
    passes = sum(1 for r in results if r[0] == "PASS")
    warns = sum(1 for r in results if r[0] == "WARN")
    fails = sum(1 for r in results if r[0] == "FAIL")
    return passes, warns, fails


def format_results(results):
    lines = []
    for status, check, details in results:
        lines.append(f"  [{status}] {check}: {details}")
    passes, warns, fails = summarize(results)
    lines.append(f"  {passes} passed, {warns} warnings, {fails} failed")
    return "\n".join(lines)
