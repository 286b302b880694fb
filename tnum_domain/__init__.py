"""
tnum_domain — Tristate Number Abstract Domain
=============================================

Bit-level abstract domain used by eBPF-style verifiers to track which
bits of a 64-bit register are known and which are not.

Core modules
------------
tnum
    The ``Tnum`` value type, construction and lattice operators.
arith
    Modular word helpers, ``tnum_add`` and ``tnum_sub``.
bitwise
    AND / OR / XOR, shifts, truncation, alignment and subregisters.
mul
    The multiplication algorithm family.
registry
    ``MulAlgorithm``: every multiplication algorithm with its identifier.
render
    Bit-pattern rendering (``tnum_sbin``) and parsing.
errors
    Exception hierarchy.

Quick start
-----------
>>> from tnum_domain import Tnum, tnum_mul, tnum_in
>>> a = Tnum(0b100, 0b011)           # 0b1xx
>>> p = tnum_mul(a, Tnum.const(7))
>>> all(p.contains_value(x * 7) for x in a.concretize())
True
"""

from __future__ import annotations

import logging
from typing import List

from tnum_domain.arith import tnum_add, tnum_sub
from tnum_domain.bitwise import (
    tnum_and,
    tnum_arshift,
    tnum_cast,
    tnum_clear_subreg,
    tnum_const_subreg,
    tnum_is_aligned,
    tnum_lshift,
    tnum_or,
    tnum_rshift,
    tnum_subreg,
    tnum_with_subreg,
    tnum_xor,
)
from tnum_domain.errors import (
    ContractViolation,
    FuelExhaustedError,
    InvalidWidthError,
    MalformedTnumError,
    PatternSyntaxError,
    RecordError,
    RecordFormatError,
    RecordMismatchError,
    RenderSizeError,
    ShiftRangeError,
    TnumError,
    UnknownAlgorithmError,
)
from tnum_domain.mul import (
    split_at_mu,
    tnum_mul,
    tnum_mul_const,
    tnum_mul_opt,
    tnum_mul_rec,
    xtnum_mul_high_top,
    xtnum_mul_top,
)
from tnum_domain.registry import MulAlgorithm
from tnum_domain.render import tnum_from_pattern, tnum_parse_sbin, tnum_sbin
from tnum_domain.tnum import (
    MASK64,
    WIDTH,
    Tnum,
    tnum_const,
    tnum_equals,
    tnum_in,
    tnum_intersect,
    tnum_join,
    tnum_range,
)

__version__ = "0.2.0"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__: List[str] = [
    # value type
    "Tnum", "WIDTH", "MASK64",
    "tnum_const", "tnum_range",
    # lattice
    "tnum_join", "tnum_intersect", "tnum_in", "tnum_equals",
    # arithmetic
    "tnum_add", "tnum_sub",
    # bitwise
    "tnum_and", "tnum_or", "tnum_xor",
    "tnum_lshift", "tnum_rshift", "tnum_arshift",
    "tnum_cast", "tnum_is_aligned",
    "tnum_subreg", "tnum_clear_subreg", "tnum_with_subreg", "tnum_const_subreg",
    # multiplication
    "tnum_mul", "tnum_mul_opt", "tnum_mul_const", "split_at_mu",
    "xtnum_mul_top", "xtnum_mul_high_top", "tnum_mul_rec",
    "MulAlgorithm",
    # rendering
    "tnum_sbin", "tnum_parse_sbin", "tnum_from_pattern",
    # errors
    "TnumError", "ContractViolation", "MalformedTnumError", "ShiftRangeError",
    "InvalidWidthError", "RenderSizeError", "PatternSyntaxError",
    "FuelExhaustedError", "UnknownAlgorithmError",
    "RecordError", "RecordFormatError", "RecordMismatchError",
]
