from __future__ import annotations

from advent.random_source import (
    mulberry32, pick, randrange, resolve, seeded_random, shuffle_in_place, system_random,
)


def test_seeded_random_is_reproducible() -> None:
    a = seeded_random(42)
    b = seeded_random(42)
    assert [a() for _ in range(20)] == [b() for _ in range(20)]


def test_seeded_random_accepts_string_seeds() -> None:
    a = seeded_random("alpha")
    b = seeded_random("bravo")
    assert [a() for _ in range(5)] != [b() for _ in range(5)]


def test_mulberry32_is_reproducible_and_in_range() -> None:
    a = mulberry32(20251201)
    b = mulberry32(20251201)
    values = [a() for _ in range(1000)]
    assert values == [b() for _ in range(1000)]
    assert all(0.0 <= v < 1.0 for v in values)
    assert len(set(values)) > 990


def test_mulberry32_matches_web_app_sequence() -> None:
    # values 1991-2000 of the browser generator seeded with 20251201
    rand = mulberry32(20251201)
    for _ in range(1990):
        rand()
    assert [rand() for _ in range(10)] == [
        0.512123100226745, 0.620489320717752, 0.20462821144610643, 0.9466568971984088,
        0.05656225746497512, 0.2566178773995489, 0.3780717027839273, 0.43521730974316597,
        0.9681769860908389, 0.2579707654658705,
    ]


def test_system_random_in_range() -> None:
    rand = system_random()
    assert all(0.0 <= rand() < 1.0 for _ in range(100))


def test_resolve_keeps_given_source() -> None:
    rand = seeded_random(1)
    assert resolve(rand) is rand
    assert callable(resolve(None))


def test_randrange_clamps_to_last_index() -> None:
    assert randrange(lambda: 0.0, 5) == 0
    assert randrange(lambda: 0.9999999, 5) == 4
    # a misbehaving source returning 1.0 must not index out of range
    assert randrange(lambda: 1.0, 5) == 4


def test_pick_uses_source() -> None:
    items = ["a", "b", "c"]
    assert pick(items, lambda: 0.0) == "a"
    assert pick(items, lambda: 0.5) == "b"
    assert pick(items, lambda: 0.99) == "c"


def test_shuffle_in_place_keeps_elements() -> None:
    items = list(range(20))
    shuffle_in_place(items, seeded_random(3))
    assert sorted(items) == list(range(20))
    assert items != list(range(20))
