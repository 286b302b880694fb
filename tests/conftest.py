# tests/conftest.py
"""
Shared helpers for the tnum test-suite.

Soundness laws are checked two ways: exhaustively over every tnum of a
small width (``all_tnums``), and by seeded random sampling at the full
64-bit width (``random_tnum`` / ``sample_members``).
"""

import random
from typing import Iterator, List, Set

import pytest

from tnum_domain import MASK64, Tnum


SMALL_WIDTH = 3


def all_tnums(bits: int = SMALL_WIDTH) -> Iterator[Tnum]:
    """Every well-formed tnum whose known and unknown bits fit in *bits*."""
    for value in range(1 << bits):
        for mask in range(1 << bits):
            if not value & mask:
                yield Tnum(value, mask)


def members(t: Tnum) -> Set[int]:
    return set(t.concretize())


def random_tnum(rng: random.Random) -> Tnum:
    value = rng.getrandbits(64)
    mask = rng.getrandbits(64) & ~value & MASK64
    return Tnum(value, mask)


def sample_members(t: Tnum, rng: random.Random, count: int = 16) -> List[int]:
    """Extreme members plus *count* random ones."""
    out = [t.umin(), t.umax()]
    out += [t.value | (rng.getrandbits(64) & t.mask) for _ in range(count)]
    return out


@pytest.fixture
def rng():
    return random.Random(0x7A0B)
