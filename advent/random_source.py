"""
Random sources for the assignment engine.

A random source is any zero-argument callable returning a float in [0, 1).
The engine never touches the `random` module state directly: everything it
draws goes through the callable it was handed, so a seeded source makes a
whole run (retries included) reproducible.
"""

import random


def seeded_random(seed):
    """Deterministic source. Seeds may be ints or strings ("alpha", "bravo", ...)."""
    return random.Random(seed).random


def system_random():
    """Non-deterministic source backed by OS entropy."""
    return random.SystemRandom().random


def _imul(a, b):
    return (a * b) & 0xFFFFFFFF


def mulberry32(seed):
    """mulberry32 PRNG, bit-compatible with the calendar web app's seeded
    generator, so a published calendar can be regenerated from its seed."""
    state = seed & 0xFFFFFFFF

    def rand():
        nonlocal state
        state = (state + 0x6D2B79F5) & 0xFFFFFFFF
        r = _imul(state ^ (state >> 15), 1 | state)
        r = (r ^ ((r + _imul(r ^ (r >> 7), 61 | r)) & 0xFFFFFFFF)) & 0xFFFFFFFF
        r = (r ^ (r >> 14)) & 0xFFFFFFFF
        return r / 4294967296

    return rand


def resolve(rand=None):
    """Default to a fresh system source when the caller passes none."""
    return rand if rand is not None else system_random()


def randrange(rand, n):
    """Uniform int in [0, n) drawn from a float source."""
    return min(int(rand() * n), n - 1)


def shuffle_in_place(items, rand):
    """Fisher-Yates shuffle driven by rand."""
    for i in range(len(items) - 1, 0, -1):
        j = randrange(rand, i + 1)
        items[i], items[j] = items[j], items[i]


def pick(items, rand):
    """Uniform choice from a non-empty sequence."""
    return items[randrange(rand, len(items))]
