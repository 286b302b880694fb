"""
tnum_domain/arith.py
════════════════════

64-bit modular helpers and the carry-propagation engine for tnum
addition and subtraction.

Python integers are unbounded, so every helper here reduces its result
modulo 2**64.  Overflow is part of the semantics (a verifier models
wrapping machine arithmetic), never an error.
"""

from __future__ import annotations

from tnum_domain.tnum import MASK64, WIDTH, Tnum


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — MODULAR WORD HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def wrap64(n: int) -> int:
    return n & MASK64


def mul64(a: int, b: int) -> int:
    return (a * b) & MASK64


def shl64(n: int, shift: int) -> int:
    """Left shift that is total: shifting by WIDTH or more gives 0."""
    if shift >= WIDTH:
        return 0
    return (n << shift) & MASK64


def shr64(n: int, shift: int) -> int:
    if shift >= WIDTH:
        return 0
    return (n & MASK64) >> shift


def ctz64(n: int) -> int:
    """Count trailing zeros; WIDTH for 0."""
    if n & MASK64 == 0:
        return WIDTH
    return (n & -n).bit_length() - 1


def shift_tnum_left(a: Tnum, shift: int) -> Tnum:
    return Tnum(shl64(a.value, shift), shl64(a.mask, shift))


def shift_tnum_right(a: Tnum, shift: int) -> Tnum:
    return Tnum(shr64(a.value, shift), shr64(a.mask, shift))


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — ADDITION / SUBTRACTION
# ═══════════════════════════════════════════════════════════════════════════
#
#  For addition, add the known parts (sv) and separately the sum with
#  every unknown bit set to one (sigma = sv + sm).  Any bit where the
#  two sums differ may have received a carry that depends on an
#  unknown bit:
#
#      chi = sigma ^ sv
#      mu  = chi | a.mask | b.mask
#
#  Subtraction is the dual: compare the largest possible minuend
#  (dv + a.mask) with the largest possible subtrahend (dv - b.mask).
# ═══════════════════════════════════════════════════════════════════════════

def tnum_add(a: Tnum, b: Tnum) -> Tnum:
    sm = a.mask + b.mask
    sv = wrap64(a.value + b.value)
    sigma = wrap64(sm + sv)
    chi = sigma ^ sv
    mu = chi | a.mask | b.mask
    return Tnum(sv & ~mu, mu)


def tnum_sub(a: Tnum, b: Tnum) -> Tnum:
    dv = wrap64(a.value - b.value)
    alpha = wrap64(dv + a.mask)
    beta = wrap64(dv - b.mask)
    chi = alpha ^ beta
    mu = chi | a.mask | b.mask
    return Tnum(dv & ~mu, mu)
