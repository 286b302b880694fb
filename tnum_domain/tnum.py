"""
tnum_domain/tnum.py
═══════════════════

The tristate number (tnum) value type and its lattice structure.

A tnum tracks, per bit of a 64-bit register, one of three states:

    - Definitely 0
    - Definitely 1
    - Unknown (could be 0 or 1)

Represented as two bitmasks:
    value:  bits known to be 1
    mask:   bits that are unknown

Invariant:  value & mask == 0   (an unknown bit is stored as 0 in value)

    γ(value, mask) = { v | v & ~mask == value }

    mask == 0         →  the singleton {value}   (a constant)
    mask == ALL_BITS  →  every 64-bit integer    (⊤)

Ordering:
    a ⊑ b  ⟺  γ(a) ⊆ γ(b)  ⟺  tnum_in(b, a)

The domain has finite height (64 bits × 3 states), so widening is
plain join.  There is no representable ⊥: the meet of two tnums that
disagree on a known bit keeps one side's bit rather than producing an
empty set, which is why ``tnum_intersect`` is only precise on
reachable (non-contradictory) pairs.

Reference: Vishwanathan, Shachnai, Narayana, Nagarakatte (2022),
"Sound, Precise, and Fast Abstract Interpretation with Tristate
Numbers", CGO.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Final, Iterator, Mapping

from tnum_domain.errors import ContractViolation, MalformedTnumError, RecordFormatError


# ═══════════════════════════════════════════════════════════════════════════
#  PART 0 — WIDTH CONSTANTS
# ═══════════════════════════════════════════════════════════════════════════

WIDTH: Final[int] = 64
MASK64: Final[int] = (1 << WIDTH) - 1

# concretize() refuses to enumerate more than 2**20 members by default.
_MAX_ENUMERATED_UNKNOWNS: Final[int] = 20


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — THE VALUE TYPE
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, slots=True)
class Tnum:
    """
    Tristate number over 64-bit unsigned integers.

    Both fields are reduced modulo 2**64 at construction, so negative
    Python integers are accepted and read as their two's complement.

    Examples
    --------
    >>> Tnum.const(5)
    Tnum(value=0x5, mask=0x0)
    >>> Tnum.range(4, 7)
    Tnum(value=0x4, mask=0x3)
    >>> Tnum(0b100, 0b011).contains_value(6)
    True
    """
    value: int
    mask: int

    WIDTH: ClassVar[int] = WIDTH

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self.value & MASK64)
        object.__setattr__(self, "mask", self.mask & MASK64)
        if self.value & self.mask:
            raise MalformedTnumError(self.value, self.mask)

    # ---- Constructors ----------------------------------------------------

    @classmethod
    def const(cls, value: int) -> Tnum:
        """Fully known value."""
        return cls(value, 0)

    @classmethod
    def unknown(cls) -> Tnum:
        """⊤: every bit unknown."""
        return cls(0, MASK64)

    @classmethod
    def range(cls, min_: int, max_: int) -> Tnum:
        """
        Tightest tnum containing the closed interval [min_, max_].

        Every bit at or below the highest bit where the bounds differ
        becomes unknown.  When they differ in bit 63 the result is ⊤
        (building ``1 << 64`` would leave the word).
        """
        min_ &= MASK64
        max_ &= MASK64
        bits = (min_ ^ max_).bit_length()
        if bits > WIDTH - 1:
            return cls.unknown()
        delta = (1 << bits) - 1
        return cls(min_ & ~delta, delta)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Tnum:
        """Build from a ``{"value": int, "mask": int}`` record."""
        try:
            value = data["value"]
            mask = data["mask"]
        except (KeyError, TypeError) as exc:
            raise RecordFormatError(f"tnum record needs 'value' and 'mask': {data!r}") from exc
        if not all(isinstance(f, int) and not isinstance(f, bool) for f in (value, mask)):
            raise RecordFormatError(f"tnum fields must be integers: {data!r}")
        if not (0 <= value <= MASK64 and 0 <= mask <= MASK64):
            raise RecordFormatError(f"tnum fields must fit in {WIDTH} bits: {data!r}")
        return cls(value, mask)

    def to_dict(self) -> Dict[str, int]:
        return {"value": self.value, "mask": self.mask}

    # ---- Predicates ------------------------------------------------------

    def is_const(self) -> bool:
        return self.mask == 0

    def is_top(self) -> bool:
        return self.mask == MASK64

    def is_bottom(self) -> bool:
        # No (value, mask) pair satisfying the invariant denotes ∅.
        return False

    def contains_value(self, n: int) -> bool:
        """Is the concrete integer *n* (mod 2**64) a member of γ(self)?"""
        return (n & MASK64 & ~self.mask) == self.value

    def popcount(self) -> int:
        """Number of unknown bits."""
        return self.mask.bit_count()

    def umin(self) -> int:
        return self.value

    def umax(self) -> int:
        return self.value | self.mask

    def concretize(self, max_unknown: int = _MAX_ENUMERATED_UNKNOWNS) -> Iterator[int]:
        """
        Enumerate γ(self).

        Raises ``ContractViolation`` when the tnum has more than
        *max_unknown* unknown bits, since the set has 2**popcount members.
        """
        if self.popcount() > max_unknown:
            raise ContractViolation(
                f"refusing to enumerate 2**{self.popcount()} values",
                hint=f"raise max_unknown above {max_unknown}",
            )
        sub = self.mask
        while True:
            yield self.value | sub
            if sub == 0:
                return
            sub = (sub - 1) & self.mask

    # ---- Lattice operations ----------------------------------------------

    def join(self, other: Tnum) -> Tnum:
        return tnum_join(self, other)

    def meet(self, other: Tnum) -> Tnum:
        return tnum_intersect(self, other)

    def leq(self, other: Tnum) -> bool:
        """self ⊑ other."""
        return tnum_in(other, self)

    def contains(self, other: Tnum) -> bool:
        """γ(other) ⊆ γ(self)."""
        return tnum_in(self, other)

    def widen(self, other: Tnum) -> Tnum:
        return tnum_join(self, other)

    def narrow(self, other: Tnum) -> Tnum:
        return other

    def __repr__(self) -> str:
        return f"Tnum(value=0x{self.value:x}, mask=0x{self.mask:x})"

    def __str__(self) -> str:
        from tnum_domain.render import tnum_sbin
        return tnum_sbin(WIDTH + 1, self)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — LATTICE OPERATORS (free functions)
# ═══════════════════════════════════════════════════════════════════════════

def tnum_const(value: int) -> Tnum:
    return Tnum.const(value)


def tnum_range(min_: int, max_: int) -> Tnum:
    return Tnum.range(min_, max_)


def tnum_join(a: Tnum, b: Tnum) -> Tnum:
    """
    Least upper bound a ⊔ b.

    A bit stays known only if both sides know it and agree on it.
    """
    v = a.value ^ b.value
    m = a.mask | b.mask | v
    return Tnum((a.value | b.value) & ~m, m)


def tnum_intersect(a: Tnum, b: Tnum) -> Tnum:
    """
    Meet a ⊓ b: a bit is unknown only if it is unknown on both sides;
    otherwise whichever side knows it supplies its value.
    """
    v = a.value | b.value
    mu = a.mask & b.mask
    return Tnum(v & ~mu, mu)


def tnum_in(a: Tnum, b: Tnum) -> bool:
    """
    Is γ(b) ⊆ γ(a)?

    1) every bit unknown in *b* must be unknown in *a*;
    2) the bits *a* knows must match *b* on those positions.
    """
    if b.mask & ~a.mask:
        return False
    return a.value == (b.value & ~a.mask)


def tnum_equals(a: Tnum, b: Tnum) -> bool:
    return a.value == b.value and a.mask == b.mask
