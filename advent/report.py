"""
Advent Calendar — Text Reports
Plain-text day table, participant summary and flag summary.
"""

from collections import defaultdict

from advent.jokers import JOKER_LABELS, WEEK_JOKERS, week_key


def day_name(dt):
    """Get short day name."""
    return dt.strftime('%a')


def _name_lookup(participants):
    return {p["id"]: p.get("name") or p["id"] for p in participants}


def format_output_table(records, participants, flags):
    """Format assignments as a text table, one line per record.

    REPEAT_PAIR flags sit on the giver's row for that day. NO_WEEKLY_JOKER
    flags sit on the receiver's first row of that week. Month-wide flags
    only appear in the flag summary.
    """
    names = _name_lookup(participants)

    day_flags_by_giver = defaultdict(list)
    week_flags_by_receiver = defaultdict(list)
    for f in flags:
        if f["flag_type"] == "REPEAT_PAIR":
            day_flags_by_giver[(f["date"], f["participant"])].append(f)
        elif f["flag_type"] == "NO_WEEKLY_JOKER":
            week_flags_by_receiver[(f["date"], f["participant"])].append(f)

    lines = []
    lines.append(f"{'Date':<12} {'Day':<5} {'Giver':<24} {'Receiver':<24} {'Joker':<24} {'Flags'}")
    lines.append("-" * 110)

    last_week = None
    for a in records:
        dt = a["date"]
        if last_week is not None and week_key(dt) != last_week:
            lines.append("")
        last_week = week_key(dt)

        date_str = dt.isoformat()
        joker = JOKER_LABELS[a["joker"]] if a["joker"] is not None else ""
        row_flags = list(day_flags_by_giver.get((date_str, a["giver_id"]), []))
        # pop so the week flag is shown once
        row_flags += week_flags_by_receiver.pop((last_week.isoformat(), a["receiver_id"]), [])
        flag_str = " | ".join(f"[{f['flag_type']}] {f['message']}" for f in row_flags)

        lines.append(f"{date_str:<12} {day_name(dt):<5} {names.get(a['giver_id'], a['giver_id']):<24} "
                     f"{names.get(a['receiver_id'], a['receiver_id']):<24} {joker:<24} {flag_str}")

    return "\n".join(lines)


def format_participant_summary(participant_stats):
    """Format participant statistics summary."""
    lines = []
    lines.append(f"\n{'='*100}")
    lines.append("PARTICIPANT SUMMARY")
    lines.append(f"{'='*100}")
    header = f"{'Participant':<24} {'Days':>5} {'Jokers':>7}"
    for joker in WEEK_JOKERS:
        header += f" {joker.value:>12}"
    header += f" {'Repeats':>8}"
    lines.append(header)
    lines.append("-" * 100)

    for pid in sorted(participant_stats.keys()):
        s = participant_stats[pid]
        line = f"{s['name']:<24} {s['days_given']:>5} {s['total_jokers_received']:>7}"
        for joker in WEEK_JOKERS:
            line += f" {s['jokers_received'].get(joker.value, 0):>12}"
        line += f" {s['repeat_pairs']:>8}"
        if s["kindness_received"] == 0:
            line += "  (no kindness)"
        lines.append(line)

    return "\n".join(lines)


def format_flag_summary(flags):
    """Format flag summary."""
    lines = []
    lines.append(f"\n{'='*80}")
    lines.append("FLAGS")
    lines.append(f"{'='*80}")

    if not flags:
        lines.append("\nNo flags: every goal met.")
        return "\n".join(lines)

    by_type = defaultdict(list)
    for f in flags:
        by_type[f["flag_type"]].append(f)

    for ftype, flist in sorted(by_type.items()):
        lines.append(f"\n{ftype} ({len(flist)} occurrences):")
        for f in flist:
            lines.append(f"  {f['date']} - {f['participant']}: {f['message']}")

    return "\n".join(lines)
