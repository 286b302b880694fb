"""
tnum_domain/mul.py
══════════════════

Multiplication algorithms for tnums.

Unlike addition there is no single closed-form carry formula: the
product has to account for every combination of unknown bits without
enumerating them (2**k concrete operands for k unknown bits).  Each
algorithm below trades precision against cost differently; every one
except the experimental halving variant is a sound over-approximation:

    ∀ x ∈ γ(a), y ∈ γ(b):   (x · y) mod 2**64  ∈  γ(mul(a, b))

    ┌──────────────────────┬──────────────────────────────────────────┐
    │  tnum_mul            │  shift-and-add over the bits of a        │
    │  tnum_mul_opt        │  power-of-two shortcut, sparser operand  │
    │                      │  as multiplier                           │
    │  xtnum_mul_top       │  peel the lowest unknown bit, recurse    │
    │  xtnum_mul_high_top  │  peel the highest set bit, recurse       │
    │  tnum_mul_rec        │  halving (EXPERIMENTAL, unsound)         │
    └──────────────────────┴──────────────────────────────────────────┘

Recursive algorithms carry an explicit fuel counter equal to the number
of bits they still have to peel.  Running out of fuel with unknown bits
left raises ``FuelExhaustedError``.
"""

from __future__ import annotations

from typing import Final, Optional, Tuple

from tnum_domain.arith import (
    ctz64,
    mul64,
    shift_tnum_left,
    shift_tnum_right,
    shl64,
    tnum_add,
)
from tnum_domain.errors import FuelExhaustedError
from tnum_domain.tnum import MASK64, WIDTH, Tnum, tnum_join

_ZERO: Final[Tnum] = Tnum(0, 0)
_ONE: Final[Tnum] = Tnum(1, 0)


def _is_power_of_two(n: int) -> bool:
    return n != 0 and n & (n - 1) == 0


# ═══════════════════════════════════════════════════════════════════════════
#  PART 1 — NAIVE SHIFT-AND-ADD
# ═══════════════════════════════════════════════════════════════════════════

def tnum_mul(a: Tnum, b: Tnum) -> Tnum:
    """
    Multiply by scanning the bits of *a* from the least significant end.

    The product of the known parts is computed exactly once (acc_v).
    Each partial product only contributes its uncertainty to acc_m:

        bit of a is known 1  →  b.mask           (b's unknown bits)
        bit of a is unknown  →  b.value | b.mask (all of b may appear)
        bit of a is known 0  →  nothing

    The loop shifts *a* right every step, so it runs at most WIDTH times.
    """
    acc_v = mul64(a.value, b.value)
    acc_m = _ZERO
    while a.value or a.mask:
        if a.value & 1:
            acc_m = tnum_add(acc_m, Tnum(0, b.mask))
        elif a.mask & 1:
            acc_m = tnum_add(acc_m, Tnum(0, b.value | b.mask))
        a = shift_tnum_right(a, 1)
        b = shift_tnum_left(b, 1)
    return tnum_add(Tnum(acc_v, 0), acc_m)


def tnum_mul_opt(a: Tnum, b: Tnum) -> Tnum:
    """
    ``tnum_mul`` with a constant fast path.

    A known power-of-two factor is an exact left shift.  With any other
    known factor the operand with fewer candidate one-bits drives the
    shift-and-add loop.  When neither operand is known this is plain
    ``tnum_mul(a, b)``.

    Other constants never scale the mask directly; that is not a sound
    propagation rule.
    """
    if a.is_const() and _is_power_of_two(a.value):
        return shift_tnum_left(b, ctz64(a.value))
    if b.is_const() and _is_power_of_two(b.value):
        return shift_tnum_left(a, ctz64(b.value))
    if not (a.is_const() or b.is_const()):
        return tnum_mul(a, b)
    if a.umax().bit_count() <= b.umax().bit_count():
        return tnum_mul(a, b)
    return tnum_mul(b, a)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 2 — BIT-SPLIT FROM THE LOW END
# ═══════════════════════════════════════════════════════════════════════════
#
#  Write y around its lowest unknown bit μ at position i:
#
#      y = y₁·2^(i+1) + μ·2^i + y₂          (y₂ fully known, < 2^i)
#
#  so that
#
#      x·y = (x·y₁)·2^(i+1) + x·y₂ + μ·(x·2^i)
#
#  The first term recurses on an operand with one unknown bit fewer,
#  the second is a constant times a tnum, and μ ∈ {0, 1} gives two
#  candidate sums that are joined.
# ═══════════════════════════════════════════════════════════════════════════

def split_at_mu(x: Tnum) -> Tuple[Tnum, int, Tnum]:
    """
    Split *x* at its lowest unknown bit.

    Returns ``(upper, i, tail)`` where ``i`` is the position of that bit,
    ``upper`` holds the bits above it and ``tail`` the fully known bits
    below it.  *x* must have at least one unknown bit.
    """
    i = ctz64(x.mask)
    upper = shift_tnum_right(x, i + 1)
    low = (1 << i) - 1
    tail = Tnum(x.value & low, x.mask & low)
    return upper, i, tail


def tnum_mul_const(c: int, x: Tnum, fuel: Optional[int] = None) -> Tnum:
    """
    Multiply the known scalar *c* by the tnum *x*.

    *fuel* is the number of unknown bits the recursion may peel off; it
    defaults to the unknown-bit count of *x*, which is exactly enough.
    """
    if fuel is None:
        fuel = x.popcount()
    return _mul_const(c & MASK64, x, fuel)


def _mul_const(c: int, x: Tnum, fuel: int) -> Tnum:
    if x.mask == 0:
        return Tnum(mul64(c, x.value), 0)
    if fuel <= 0:
        raise FuelExhaustedError(
            f"constant multiplication ran out of fuel with {x.popcount()} unknown bit(s) left"
        )
    upper, i, tail = split_at_mu(x)
    p = _mul_const(c, upper, fuel - 1)
    mc = Tnum(mul64(c, tail.value), 0)
    mu0 = tnum_add(shift_tnum_left(p, i + 1), mc)
    mu1 = tnum_add(mu0, Tnum(shl64(c, i), 0))
    return tnum_join(mu0, mu1)


def _xtnum_mul(x: Tnum, i: int, y: Tnum, j: int, fuel: int) -> Tnum:
    # x has i unknown bits, y has j, i <= j, fuel == i + j
    if x.mask == 0 and y.mask == 0:
        return Tnum(mul64(x.value, y.value), 0)
    if fuel <= 0:
        raise FuelExhaustedError(
            f"split multiplication ran out of fuel with {i + j} unknown bit(s) left"
        )
    upper, pos, tail = split_at_mu(y)
    if i == j:
        p = _xtnum_mul(upper, j - 1, x, i, fuel - 1)
    else:
        p = _xtnum_mul(x, i, upper, j - 1, fuel - 1)
    mc = _mul_const(tail.value, x, i)
    mu0 = tnum_add(shift_tnum_left(p, pos + 1), mc)
    mu1 = tnum_add(mu0, shift_tnum_left(x, pos))
    return tnum_join(mu0, mu1)


def xtnum_mul_top(x: Tnum, y: Tnum) -> Tnum:
    """
    Bit-split multiplication, peeling unknown bits from the operand that
    has more of them.

    Each step splits at the operand's *lowest* unknown bit, not at the
    highest one.  Splitting higher up leaves unknown bits in the tail,
    which the constant multiplication below treats as known and so drops
    members of the product.  With the lowest bit the tail is always fully
    known and one unit of fuel is spent per unknown bit.

    >>> xtnum_mul_top(Tnum.const(15), Tnum(0, 31))
    Tnum(value=0x0, mask=0xfff)
    """
    i = x.popcount()
    j = y.popcount()
    if i <= j:
        return _xtnum_mul(x, i, y, j, i + j)
    return _xtnum_mul(y, j, x, i, i + j)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 3 — BIT-SPLIT FROM THE HIGH END
# ═══════════════════════════════════════════════════════════════════════════
#
#  Clear the most significant set bit b of y (known one or unknown):
#
#      y = y' + β·2^b
#      x·y = x·y' + β·(x·2^b)
#
#  If β is known the two terms are simply added; if it is unknown the
#  outcomes with and without the term are joined.  The recursion keeps
#  the operand with the larger maximum in second position, so the bit
#  cleared next is always the highest one still in play.
# ═══════════════════════════════════════════════════════════════════════════

def _clear_bit(x: Tnum, pos: int) -> Tnum:
    keep = ~(1 << pos)
    return Tnum(x.value & keep, x.mask & keep)


def _xtnum_mul_high(x: Tnum, y: Tnum, fuel: int) -> Tnum:
    if x.mask == 0 and y.mask == 0:
        return Tnum(mul64(x.value, y.value), 0)
    if x == _ZERO or y == _ZERO:
        return _ZERO
    if fuel <= 0:
        raise FuelExhaustedError(
            f"high-bit multiplication ran out of fuel at {x!r} * {y!r}"
        )
    top = y.umax().bit_length() - 1
    unknown_top = (y.mask >> top) & 1
    y_prime = _clear_bit(y, top)
    if y_prime.umax() <= x.umax():
        p = _xtnum_mul_high(y_prime, x, fuel - 1)
    else:
        p = _xtnum_mul_high(x, y_prime, fuel - 1)
    with_bit = tnum_add(p, shift_tnum_left(x, top))
    if unknown_top:
        return tnum_join(with_bit, p)
    return with_bit


def xtnum_mul_high_top(x: Tnum, y: Tnum) -> Tnum:
    """
    Bit-split multiplication from the most significant end.

    Fuel is the number of set bits in ``value | mask`` of both operands;
    every step clears exactly one of them.

    >>> xtnum_mul_high_top(Tnum.const(15), Tnum(0, 31))
    Tnum(value=0x0, mask=0x1ff)
    """
    fuel = x.umax().bit_count() + y.umax().bit_count()
    return _xtnum_mul_high(x, y, fuel)


# ═══════════════════════════════════════════════════════════════════════════
#  PART 4 — HALVING (EXPERIMENTAL)
# ═══════════════════════════════════════════════════════════════════════════

def _decompose(a: Tnum) -> Tuple[Tnum, Tnum]:
    """(upper bits, lowest bit)."""
    return shift_tnum_right(a, 1), Tnum(a.value & 1, a.mask & 1)


def tnum_mul_rec(a: Tnum, b: Tnum) -> Tnum:
    """
    Halving recursive multiplication.  EXPERIMENTAL AND UNSOUND.

    A correct halving step needs all four partial products

        a·b = 4·(a_up·b_up) + 2·(a_up·b_low) + 2·(a_low·b_up) + a_low·b_low

    but the recursive case keeps only ``a_up·b_up`` (unscaled), so the
    result routinely misses concrete products, e.g. 2 · {0, 1}.  It is
    kept for comparison runs and must never serve as a reference.
    """
    return _mul_rec(a, b, WIDTH)


def _mul_rec(a: Tnum, b: Tnum, fuel: int) -> Tnum:
    if a.mask == 0 and b.mask == 0:
        return Tnum(mul64(a.value, b.value), 0)
    if a.mask == MASK64 and b.mask == MASK64:
        return Tnum.unknown()
    if a == _ZERO or b == _ZERO:
        return _ZERO
    if a == _ONE:
        return b
    if b == _ONE:
        return a
    if fuel <= 0:
        raise FuelExhaustedError("halving multiplication exceeded the word width")
    a_up, _a_low = _decompose(a)
    b_up, _b_low = _decompose(b)
    # TODO: add the a_up·b_low, a_low·b_up and a_low·b_low terms
    return _mul_rec(a_up, b_up, fuel - 1)
