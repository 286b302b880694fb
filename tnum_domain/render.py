"""
tnum_domain/render.py
═════════════════════

Fixed-width bit-pattern rendering for debugging.

``tnum_sbin`` follows the verifier's buffer convention: the caller
passes a buffer size, one byte of which is reserved for the string
terminator, and the pattern is written most significant bit first.
A buffer smaller than WIDTH + 1 therefore holds only the *top* bits:

    tnum_sbin(65, Tnum(0b100, 0b011))  →  "000…0001xx"   (64 chars)
    tnum_sbin(5,  Tnum.unknown())      →  "xxxx"         (bits 63..60)
"""

from __future__ import annotations

from typing import Final, List

from tnum_domain.errors import PatternSyntaxError, RenderSizeError
from tnum_domain.tnum import WIDTH, Tnum

_UNKNOWN: Final[str] = "x"


def tnum_sbin(size: int, a: Tnum) -> str:
    """Render the top ``min(size - 1, WIDTH)`` bits of *a*."""
    if size < 1:
        raise RenderSizeError(size)
    end = min(size - 1, WIDTH)
    chars: List[str] = []
    for pos in range(WIDTH - 1, WIDTH - 1 - end, -1):
        bit = 1 << pos
        if a.mask & bit:
            chars.append(_UNKNOWN)
        elif a.value & bit:
            chars.append("1")
        else:
            chars.append("0")
    return "".join(chars)


def tnum_parse_sbin(text: str) -> Tnum:
    """
    Inverse of ``tnum_sbin``: read *text* as the top ``len(text)`` bits
    of a tnum, most significant first.  Bits below the pattern are
    known zero.
    """
    if len(text) > WIDTH:
        raise PatternSyntaxError(f"pattern has {len(text)} characters, at most {WIDTH} allowed")
    value = 0
    mask = 0
    for ch in text:
        value <<= 1
        mask <<= 1
        if ch == _UNKNOWN or ch == "X":
            mask |= 1
        elif ch == "1":
            value |= 1
        elif ch != "0":
            raise PatternSyntaxError(f"unexpected character {ch!r} in pattern {text!r}")
    pad = WIDTH - len(text)
    return Tnum(value << pad, mask << pad)


def tnum_from_pattern(text: str) -> Tnum:
    """
    Read a right-aligned pattern such as ``"1x0"`` (the low three bits),
    the way humans usually write small tnums.
    """
    if len(text) > WIDTH:
        raise PatternSyntaxError(f"pattern has {len(text)} characters, at most {WIDTH} allowed")
    padded = tnum_parse_sbin(text)
    pad = WIDTH - len(text)
    return Tnum(padded.value >> pad, padded.mask >> pad)
