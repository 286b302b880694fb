"""
tnum_domain/bitwise.py
══════════════════════

Bitwise, shift, truncation and subregister operators.

Each bitwise operator is computed per bit from the known/unknown status
of both operands:

    AND:  known 1 iff known 1 on both sides;  unknown iff it may be 1
          on both sides and is not known 1
    OR:   known 1 iff known 1 on either side; unknown iff unknown on
          either side and not known 1
    XOR:  unknown iff unknown on either side; otherwise the xor of the
          known bits

Shift amounts are checked at this boundary: a shift of WIDTH or more has
no single meaning across machines, so it is reported as a
``ShiftRangeError`` rather than silently wrapped.
"""

from __future__ import annotations

from typing import Final

from tnum_domain.arith import shift_tnum_left, shift_tnum_right
from tnum_domain.errors import InvalidWidthError, ShiftRangeError
from tnum_domain.tnum import MASK64, WIDTH, Tnum

_SUBREG_BITS: Final[int] = 32
_SUBREG_MASK: Final[int] = (1 << _SUBREG_BITS) - 1


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — AND / OR / XOR
# ═══════════════════════════════════════════════════════════════════════════

def tnum_and(a: Tnum, b: Tnum) -> Tnum:
    alpha = a.value | a.mask
    beta = b.value | b.mask
    v = a.value & b.value
    return Tnum(v, alpha & beta & ~v)


def tnum_or(a: Tnum, b: Tnum) -> Tnum:
    v = a.value | b.value
    mu = a.mask | b.mask
    return Tnum(v, mu & ~v)


def tnum_xor(a: Tnum, b: Tnum) -> Tnum:
    v = a.value ^ b.value
    mu = a.mask | b.mask
    return Tnum(v & ~mu, mu)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — SHIFTS
# ═══════════════════════════════════════════════════════════════════════════

def _check_shift(shift: int, width: int = WIDTH) -> None:
    if not 0 <= shift < width:
        raise ShiftRangeError(shift, width)


def tnum_lshift(a: Tnum, shift: int) -> Tnum:
    _check_shift(shift)
    return shift_tnum_left(a, shift)


def tnum_rshift(a: Tnum, shift: int) -> Tnum:
    _check_shift(shift)
    return shift_tnum_right(a, shift)


def _to_signed(n: int, bits: int) -> int:
    n &= (1 << bits) - 1
    if n >> (bits - 1):
        n -= 1 << bits
    return n


def tnum_arshift(a: Tnum, shift: int, insn_bitness: int = WIDTH) -> Tnum:
    """
    Arithmetic right shift in 32- or 64-bit mode.

    ``value`` and ``mask`` are sign-extended independently: an unknown
    sign bit smears unknowns into the vacated positions, a known-one
    sign bit smears ones.  In 32-bit mode only the low half of each
    field takes part and the result is zero-extended.
    """
    if insn_bitness not in (32, WIDTH):
        raise InvalidWidthError(f"arithmetic shift bitness must be 32 or 64, got {insn_bitness}")
    _check_shift(shift, insn_bitness)
    word = (1 << insn_bitness) - 1
    value = (_to_signed(a.value, insn_bitness) >> shift) & word
    mask = (_to_signed(a.mask, insn_bitness) >> shift) & word
    return Tnum(value, mask)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — TRUNCATION / ALIGNMENT
# ═══════════════════════════════════════════════════════════════════════════

def tnum_cast(a: Tnum, size: int) -> Tnum:
    """Truncate to the low *size* bytes."""
    if size < 0:
        raise InvalidWidthError(f"cast size must be non-negative, got {size}")
    if size * 8 >= WIDTH:
        return a
    keep = (1 << (size * 8)) - 1
    return Tnum(a.value & keep, a.mask & keep)


def tnum_is_aligned(a: Tnum, size: int) -> bool:
    """
    Is every member of γ(a) a multiple of *size*?

    *size* must be a power of two; for anything else the bit test below
    answers a different question and the result is meaningless.
    """
    if size == 0:
        return True
    return ((a.value | a.mask) & (size - 1) & MASK64) == 0


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — 32-BIT SUBREGISTERS
# ═══════════════════════════════════════════════════════════════════════════
#
#  A 64-bit register aliases its low 32 bits as a subregister.  32-bit
#  ALU instructions rewrite the low half; these helpers splice a
#  subregister tnum back into the full register.
# ═══════════════════════════════════════════════════════════════════════════

def tnum_subreg(a: Tnum) -> Tnum:
    return tnum_cast(a, _SUBREG_BITS // 8)


def tnum_clear_subreg(a: Tnum) -> Tnum:
    return tnum_lshift(tnum_rshift(a, _SUBREG_BITS), _SUBREG_BITS)


def tnum_with_subreg(reg: Tnum, subreg: Tnum) -> Tnum:
    return tnum_or(tnum_clear_subreg(reg), tnum_subreg(subreg))


def tnum_const_subreg(a: Tnum, value: int) -> Tnum:
    return tnum_with_subreg(a, Tnum.const(value & _SUBREG_MASK))
