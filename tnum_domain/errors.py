"""
tnum_domain/errors.py
═════════════════════

Exception hierarchy for the tnum engine and the comparison harness.

    ┌─────────────────────────────────────────────────────────────┐
    │  TnumError (base)                                           │
    │  ├── ContractViolation     — operator precondition broken   │
    │  │   ├── MalformedTnumError   value & mask != 0             │
    │  │   ├── ShiftRangeError      shift outside [0, width)      │
    │  │   ├── InvalidWidthError    bad bitness / byte size       │
    │  │   ├── RenderSizeError      render buffer size < 1        │
    │  │   ├── PatternSyntaxError   bad 'x'/'0'/'1' pattern       │
    │  │   └── FuelExhaustedError   recursion budget ran out      │
    │  ├── UnknownAlgorithmError    no such multiplication method │
    │  └── RecordError                                            │
    │      ├── RecordFormatError    malformed JSON record         │
    │      └── RecordMismatchError  positional merge mismatch     │
    └─────────────────────────────────────────────────────────────┘

The operators themselves are total over well-formed tnums and use
modular arithmetic, so none of these is ever raised for an overflow.
"""

from __future__ import annotations

from typing import Optional, Sequence


class TnumError(Exception):
    """
    Base exception for all tnum errors.

    Carries a short machine-readable ``code`` and an optional ``hint``
    that the CLI prints underneath the message.
    """

    code: str = "tnum-error"

    def __init__(self, message: str, hint: str = "", code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


# ───────────────────────────────────────────────────────────────────────────
# CONTRACT VIOLATIONS
# ───────────────────────────────────────────────────────────────────────────

class ContractViolation(TnumError):
    """An operator was called outside its documented precondition."""
    code = "contract"


class MalformedTnumError(ContractViolation):
    """A (value, mask) pair with a bit set in both fields."""
    code = "malformed-tnum"

    def __init__(self, value: int, mask: int) -> None:
        super().__init__(
            f"value 0x{value:x} and mask 0x{mask:x} overlap in bits 0x{value & mask:x}",
            hint="unknown bits must be zero in the value field",
        )
        self.value = value
        self.mask = mask


class ShiftRangeError(ContractViolation):
    code = "shift-range"

    def __init__(self, shift: int, width: int) -> None:
        super().__init__(f"shift amount {shift} outside [0, {width})")
        self.shift = shift
        self.width = width


class InvalidWidthError(ContractViolation):
    code = "invalid-width"


class RenderSizeError(ContractViolation):
    code = "render-size"

    def __init__(self, size: int) -> None:
        super().__init__(
            f"render buffer size must be at least 1, got {size}",
            hint="a size of 65 renders all 64 bit positions",
        )
        self.size = size


class PatternSyntaxError(ContractViolation):
    code = "pattern-syntax"


class FuelExhaustedError(ContractViolation):
    """
    A recursive multiplication ran out of fuel while unknown bits were
    still left, i.e. the caller passed a budget smaller than the
    operand's unknown-bit count.
    """
    code = "fuel-exhausted"


# ───────────────────────────────────────────────────────────────────────────
# REGISTRY / HARNESS
# ───────────────────────────────────────────────────────────────────────────

class UnknownAlgorithmError(TnumError):
    code = "unknown-algorithm"

    def __init__(self, ident: str, known: Optional[Sequence[str]] = None) -> None:
        hint = f"known methods: {', '.join(known)}" if known else ""
        super().__init__(f"unknown multiplication method {ident!r}", hint=hint)
        self.ident = ident


class RecordError(TnumError):
    code = "record"


class RecordFormatError(RecordError):
    code = "record-format"


class RecordMismatchError(RecordError):
    code = "record-mismatch"
