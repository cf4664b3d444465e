"""Helpers shared by the engine tests."""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List

from advent.jokers import WEEK_JOKERS, week_key

NAMES = [
    "Ivan", "Vincent", "Nathalie", "Josephine", "Maxime", "Charlotte", "Anna",
    "Florence", "Sebastien", "Eliot", "Sylvain", "Jean-Paul", "Francois", "Julie",
]


def make_participants(n: int) -> List[Dict[str, str]]:
    return [{"id": NAMES[i].lower(), "name": NAMES[i]} for i in range(n)]


def record(day: date, giver: str, receiver: str, joker=None) -> Dict[str, object]:
    return {"date": day, "giver_id": giver, "receiver_id": receiver, "joker": joker}


def jokers_by_week(records: Iterable[Dict[str, object]]):
    """{monday: {"receiver": {id: [jokers]}, "giver": {...}, "count": {joker: n}}}"""
    weeks = defaultdict(lambda: {
        "receiver": defaultdict(list),
        "giver": defaultdict(list),
        "count": defaultdict(int),
    })
    for a in records:
        if a["joker"] not in WEEK_JOKERS:
            continue
        w = weeks[week_key(a["date"])]
        w["receiver"][a["receiver_id"]].append(a["joker"])
        w["giver"][a["giver_id"]].append(a["joker"])
        w["count"][a["joker"]] += 1
    return weeks
