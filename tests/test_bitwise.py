# tests/test_bitwise.py
"""
Tests for bitwise, shift, truncation and subregister operators.
"""

import operator

import pytest

from tnum_domain import (
    MASK64,
    InvalidWidthError,
    ShiftRangeError,
    Tnum,
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
from tests.conftest import all_tnums, members


class TestLogical:

    @pytest.mark.parametrize("op,concrete", [
        (tnum_and, operator.and_),
        (tnum_or, operator.or_),
        (tnum_xor, operator.xor),
    ])
    def test_exact_on_small_width(self, op, concrete):
        for a in all_tnums():
            for b in all_tnums():
                got = {concrete(x, y) for x in members(a) for y in members(b)}
                # bits are independent, so the result is exact
                assert members(op(a, b)) == got

    def test_and_known_zero_wins(self):
        assert tnum_and(Tnum(0, 0xF), Tnum.const(0)) == Tnum.const(0)

    def test_or_known_one_wins(self):
        assert tnum_or(Tnum(0, 0xF), Tnum.const(0xF)) == Tnum.const(0xF)

    def test_xor(self):
        assert tnum_xor(Tnum(0b100, 0b001), Tnum.const(0b110)) == Tnum(0b010, 0b001)


class TestShifts:

    def test_lshift_const(self):
        assert tnum_lshift(Tnum.const(1), 3) == Tnum.const(8)

    def test_lshift_drops_high_bits(self):
        assert tnum_lshift(Tnum(1 << 63, 1 << 62), 1) == Tnum(0, 1 << 63)

    def test_rshift(self):
        assert tnum_rshift(Tnum(0b1000, 0b0110), 1) == Tnum(0b100, 0b011)

    @pytest.mark.parametrize("shift", [-1, 64, 100])
    def test_shift_out_of_range(self, shift):
        with pytest.raises(ShiftRangeError) as info:
            tnum_lshift(Tnum.const(1), shift)
        assert info.value.width == 64
        with pytest.raises(ShiftRangeError):
            tnum_rshift(Tnum.const(1), shift)

    def test_arshift_known_sign(self):
        t = Tnum.const(1 << 63)
        assert tnum_arshift(t, 4) == Tnum.const(0xF8 << 56)

    def test_arshift_unknown_sign(self):
        assert tnum_arshift(Tnum(0, 1 << 63), 1) == Tnum(0, 0b11 << 62)

    def test_arshift_positive(self):
        assert tnum_arshift(Tnum(0x40, 0x3), 2) == Tnum(0x10, 0)

    def test_arshift_32(self):
        assert tnum_arshift(Tnum.const(0x8000_0000), 4, 32) == Tnum.const(0xF800_0000)
        # upper half does not take part
        assert tnum_arshift(Tnum.const(0x1_0000_0010), 4, 32) == Tnum.const(1)

    def test_arshift_32_rejects_wide_shift(self):
        with pytest.raises(ShiftRangeError):
            tnum_arshift(Tnum.const(1), 32, 32)

    def test_arshift_bad_bitness(self):
        with pytest.raises(InvalidWidthError):
            tnum_arshift(Tnum.const(1), 1, 16)

    def test_arshift_sound_sampled(self, rng):
        for _ in range(100):
            value = rng.getrandbits(64)
            t = Tnum(value, rng.getrandbits(64) & ~value)
            shift = rng.randrange(64)
            out = tnum_arshift(t, shift)
            for x in (t.umin(), t.umax(), t.value | (rng.getrandbits(64) & t.mask)):
                signed = x - (1 << 64) if x >> 63 else x
                assert out.contains_value(signed >> shift)


class TestCastAndAlignment:

    def test_cast_truncates(self):
        assert tnum_cast(Tnum(0x1234, 0xFF_0000), 1) == Tnum.const(0x34)
        assert tnum_cast(Tnum(0x1234, 0xFF_0000), 3) == Tnum(0x1234, 0xFF_0000)

    def test_cast_full_width_is_identity(self):
        t = Tnum(MASK64 ^ 1, 1)
        assert tnum_cast(t, 8) == t
        assert tnum_cast(t, 16) == t

    def test_cast_negative_size(self):
        with pytest.raises(InvalidWidthError):
            tnum_cast(Tnum.const(1), -1)

    def test_aligned(self):
        assert tnum_is_aligned(Tnum(8, 0x30), 8)
        assert not tnum_is_aligned(Tnum(8, 1), 2)
        assert tnum_is_aligned(Tnum(0, MASK64), 1)
        assert tnum_is_aligned(Tnum.const(3), 0)


class TestSubreg:

    REG = Tnum(0x1_0000_0001, 0x2_0000_0000)

    def test_subreg(self):
        assert tnum_subreg(self.REG) == Tnum.const(1)

    def test_clear_subreg(self):
        assert tnum_clear_subreg(self.REG) == Tnum(0x1_0000_0000, 0x2_0000_0000)

    def test_with_subreg(self):
        assert tnum_with_subreg(self.REG, Tnum(5, 2)) == Tnum(0x1_0000_0005, 0x2_0000_0002)

    def test_with_subreg_ignores_upper_half_of_subreg(self):
        assert tnum_with_subreg(self.REG, Tnum.const(0xFF_0000_0007)) == Tnum(0x1_0000_0007, 0x2_0000_0000)

    def test_const_subreg(self):
        assert tnum_const_subreg(self.REG, 0x7_DEAD_BEEF) == Tnum(0x1_DEAD_BEEF, 0x2_0000_0000)
