#!/usr/bin/env python3
"""
Runner for the advent calendar engine.

Generates one month variation per seed and writes, for each:
  advent_<tag>.json  — records in the web front end's format
  advent_<tag>.txt   — day table + participant summary + flags
  advent_<tag>.xlsx  — the same as a workbook (unless --no-excel)

Usage:
    python -m advent.run                           # system entropy, config.json
    python -m advent.run --seeds 20251201          # reproducible month
    python -m advent.run --seeds alpha bravo       # compare variations
    python -m advent.run --seeds 20251201 --mulberry   # match the web app's PRNG
"""

import argparse
import json
import os

from advent.config import load_config
from advent.engine import build_participant_stats, generate_month
from advent.excel_io import load_participants_file, save_month_workbook
from advent.random_source import mulberry32, seeded_random, system_random
from advent.report import format_flag_summary, format_output_table, format_participant_summary
from advent.validate import format_results, run_checks, summarize


def _parse_seed(raw):
    """'42' -> 42, 'alpha' -> 'alpha'."""
    text = str(raw).strip()
    try:
        return int(text)
    except ValueError:
        return text


def build_random_source(seed, mulberry=False):
    if seed is None:
        return system_random()
    if mulberry:
        if not isinstance(seed, int):
            raise ValueError(f"--mulberry needs integer seeds, got '{seed}'")
        return mulberry32(seed)
    return seeded_random(seed)


def to_json_records(records):
    """Records as the front end reads them: camelCase ids, joker omitted when absent."""
    out = []
    for a in records:
        item = {
            "date": a["date"].isoformat(),
            "giverId": a["giver_id"],
            "receiverId": a["receiver_id"],
        }
        if a["joker"] is not None:
            item["joker"] = a["joker"].value
        out.append(item)
    return out


def compute_stats(records, flags, participant_stats):
    """Summary numbers for the seed comparison table."""
    jokers = sum(1 for a in records if a["joker"] is not None)
    return {
        "records": len(records),
        "jokers": jokers,
        "repeats": sum(1 for f in flags if f["flag_type"] == "REPEAT_PAIR"),
        "no_joker": sum(1 for f in flags if f["flag_type"] == "NO_JOKER"),
        "no_kindness": sum(1 for f in flags if f["flag_type"] == "NO_KINDNESS"),
        "week_gaps": sum(1 for f in flags if f["flag_type"] == "NO_WEEKLY_JOKER"),
        "min_jokers": min((s["total_jokers_received"] for s in participant_stats.values()), default=0),
        "max_jokers": max((s["total_jokers_received"] for s in participant_stats.values()), default=0),
    }


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Advent calendar pairing + joker generator")
    parser.add_argument("--config", type=str, default=None,
                        help="Path to config.json (default: project root config.json)")
    parser.add_argument("--year", type=int, default=None, help="Year to generate")
    parser.add_argument("--month", type=int, default=None, help="Month to generate (1-12)")
    parser.add_argument("--cutoff-day", type=int, default=None,
                        help="Last day-of-month that gets pairings")
    parser.add_argument("--cap", type=int, default=None,
                        help="Default per-type joker cap per week")
    parser.add_argument("--max-attempts", type=int, default=None,
                        help="Full-month attempts for kindness coverage")
    parser.add_argument("--seeds", type=str, nargs="+", default=None,
                        help="One variation per seed (default: config seeds, else system entropy)")
    parser.add_argument("--mulberry", action="store_true",
                        help="Use the web app's mulberry32 PRNG for integer seeds")
    parser.add_argument("--participants-xlsx", type=str, default=None,
                        help="Read participants from the 'Participants' sheet of this workbook")
    parser.add_argument("--output-dir", type=str, default=None,
                        help="Output directory (default: config output_dir)")
    parser.add_argument("--no-excel", action="store_true", help="Skip the .xlsx output")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    config = load_config(args.config)

    year = args.year or config["year"]
    month = args.month or config["month"]
    cutoff_day = args.cutoff_day if args.cutoff_day is not None else config["cutoff_day"]
    default_cap = args.cap if args.cap is not None else config["default_cap"]
    max_attempts = args.max_attempts or config["max_attempts"]
    week_caps = config["week_caps"]
    output_dir = args.output_dir or config["output_dir"]

    if args.participants_xlsx:
        participants = load_participants_file(args.participants_xlsx)
    else:
        participants = config["participants"]

    raw_seeds = args.seeds or config["seeds"] or [None]
    seeds = [None if s is None else _parse_seed(s) for s in raw_seeds]

    os.makedirs(output_dir, exist_ok=True)

    print(f"{'=' * 70}")
    print(f"ADVENT CALENDAR — {year}-{month:02d} (days 1-{cutoff_day})")
    print(f"{'=' * 70}")
    print(f"  Participants:  {len(participants)}")
    print(f"  Default cap:   {default_cap}")
    if week_caps:
        overrides = ", ".join(f"{d.isoformat()}={c}" for d, c in sorted(week_caps.items()))
        print(f"  Week caps:     {overrides}")

    all_results = []
    for i, seed in enumerate(seeds, 1):
        tag = "random" if seed is None else f"seed{seed}"
        print(f"\n[Variation {i}/{len(seeds)}] {tag}")

        rand = build_random_source(seed, args.mulberry)
        records, flags = generate_month(
            participants, year, month, cutoff_day, rand,
            default_cap=default_cap, week_caps=week_caps, max_attempts=max_attempts,
            max_derangement_tries=config["max_derangement_tries"],
        )
        participant_stats = build_participant_stats(records, participants, flags)
        checks = run_checks(records, participants, default_cap, week_caps)
        print(format_results(checks))

        json_path = os.path.join(output_dir, f"advent_{tag}.json")
        with open(json_path, 'w', encoding="utf-8") as f:
            json.dump(to_json_records(records), f, indent=2, ensure_ascii=False)
        print(f"  Wrote: {json_path}")

        table = format_output_table(records, participants, flags)
        summary = format_participant_summary(participant_stats)
        flag_summary = format_flag_summary(flags)
        txt_path = os.path.join(output_dir, f"advent_{tag}.txt")
        with open(txt_path, 'w', encoding="utf-8") as f:
            f.write(table + "\n" + summary + "\n" + flag_summary + "\n")
        print(f"  Wrote: {txt_path}")

        if not args.no_excel:
            xlsx_path = os.path.join(output_dir, f"advent_{tag}.xlsx")
            save_month_workbook(xlsx_path, records, participants, participant_stats, flags)
            print(f"  Wrote: {xlsx_path}")

        stats = compute_stats(records, flags, participant_stats)
        stats["seed"] = tag
        stats["fails"] = summarize(checks)[2]
        all_results.append(stats)

    if len(all_results) > 1:
        print(f"\n{'=' * 70}")
        print("SEED COMPARISON")
        print(f"{'=' * 70}")
        print(f"{'Seed':<16} {'Jokers':>7} {'Repeats':>8} {'WkGaps':>7} {'NoJoker':>8} {'NoKind':>7} {'Range':>7}")
        for s in all_results:
            rng = f"{s['min_jokers']}-{s['max_jokers']}"
            print(f"{s['seed']:<16} {s['jokers']:>7} {s['repeats']:>8} {s['week_gaps']:>7} "
                  f"{s['no_joker']:>8} {s['no_kindness']:>7} {rng:>7}")

    print(f"\nDone! Output in: {output_dir}")
    return all_results


if __name__ == "__main__":
    main()
