"""
tnum_domain/registry.py
═══════════════════════

Closed enumeration of the multiplication algorithms.

Each member carries:
  • ident  — the identifier used in result records and on the CLI
  • func   — the implementation, ``(Tnum, Tnum) -> Tnum``
  • sound  — whether the algorithm is a sound over-approximation

Members are callable, so ``MulAlgorithm.NAIVE(a, b)`` multiplies.
Iteration order is reporting order.
"""

from __future__ import annotations

import enum
from typing import Callable, List

from tnum_domain.errors import UnknownAlgorithmError
from tnum_domain.mul import (
    tnum_mul,
    tnum_mul_opt,
    tnum_mul_rec,
    xtnum_mul_high_top,
    xtnum_mul_top,
)
from tnum_domain.tnum import Tnum

MulFunc = Callable[[Tnum, Tnum], Tnum]


class MulAlgorithm(enum.Enum):

    NAIVE = ("tnum_mul", tnum_mul, True)
    OPT = ("tnum_mul_opt", tnum_mul_opt, True)
    # splits at the lowest unknown bit, see xtnum_mul_top
    SPLIT_LOW = ("xtnum_mul_top", xtnum_mul_top, True)
    SPLIT_HIGH = ("xtnum_mul_high_top", xtnum_mul_high_top, True)
    HALVING = ("tnum_mul_rec", tnum_mul_rec, False)

    def __init__(self, ident: str, func: MulFunc, sound: bool) -> None:
        self.ident = ident
        self.func = func
        self.sound = sound

    def __call__(self, a: Tnum, b: Tnum) -> Tnum:
        return self.func(a, b)

    def __str__(self) -> str:
        return self.ident

    @classmethod
    def from_ident(cls, ident: str) -> MulAlgorithm:
        """Look up by record identifier or member name (case-insensitive)."""
        key = ident.strip().lower()
        for member in cls:
            if member.ident == key or member.name.lower() == key:
                return member
        raise UnknownAlgorithmError(ident, cls.idents())

    @classmethod
    def idents(cls) -> List[str]:
        return [member.ident for member in cls]

    @classmethod
    def sound_members(cls) -> List[MulAlgorithm]:
        return [member for member in cls if member.sound]
