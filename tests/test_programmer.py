"""Tests for programmer mode: base conversion and word-wrapped bitwise ops."""
from __future__ import annotations

import pytest

from bounds import BYTE, DWORD, QWORD, Word
from errors import InvalidBaseError, InvalidDigitError
from models import NumberBase
from programmer import ProgrammerEngine, is_valid_digit, radix_of


class TestRadix:

    @pytest.mark.parametrize(
        "base, expected",
        [
            (NumberBase.BINARY, 2),
            ("octal", 8),
            ("decimal", 10),
            (16, 16),
        ],
    )
    def test_resolves(self, base, expected):
        assert radix_of(base) == expected

    @pytest.mark.parametrize("base", [3, 36, "base64", True])
    def test_rejects_unsupported(self, base):
        with pytest.raises(InvalidBaseError):
            radix_of(base)

    def test_valid_digits(self):
        assert is_valid_digit("F", NumberBase.HEXADECIMAL)
        assert is_valid_digit("7", 8)
        assert not is_valid_digit("8", 8)
        assert not is_valid_digit("2", NumberBase.BINARY)
        assert not is_valid_digit("11", 2)


class TestConvertBase:

    def test_decimal_to_others(self, programmer):
        assert programmer.convert_base("255", "decimal", "hexadecimal") == "FF"
        assert programmer.convert_base("255", "decimal", "binary") == "11111111"
        assert programmer.convert_base("255", "decimal", "octal") == "377"

    def test_hex_is_case_insensitive(self, programmer):
        assert programmer.convert_base("ff", 16, 10) == "255"

    def test_negative_keeps_sign(self, programmer):
        assert programmer.convert_base("-5", 10, 2) == "-101"

    def test_surrounding_whitespace_ignored(self, programmer):
        assert programmer.convert_base(" 42 ", 10, 16) == "2A"

    @pytest.mark.parametrize(
        "value, base",
        [("12", 2), ("9", 8), ("G", 16), ("0x1F", 16), ("", 10), ("-", 10), ("1.5", 10)],
    )
    def test_rejects_bad_digits(self, programmer, value, base):
        with pytest.raises(InvalidDigitError):
            programmer.convert_base(value, base, 10)

    def test_rejects_bad_target_base(self, programmer):
        with pytest.raises(InvalidBaseError):
            programmer.convert_base("10", 10, 12)

    def test_invalid_digit_error_carries_context(self, programmer):
        with pytest.raises(InvalidDigitError) as exc_info:
            programmer.parse("102", NumberBase.BINARY)
        assert exc_info.value.value == "102"
        assert exc_info.value.base == 2


class TestBitwise:

    def test_and_or_xor(self, programmer):
        assert programmer.bitwise_and(12, 10) == 8
        assert programmer.bitwise_or(12, 10) == 14
        assert programmer.bitwise_xor(15, 15) == 0

    def test_not_is_signed(self, programmer):
        assert programmer.bitwise_not(0) == -1
        assert programmer.bitwise_not(-1) == 0

    def test_left_shift_wraps_into_sign_bit(self, programmer):
        assert programmer.left_shift(1, 31) == -(2 ** 31)

    def test_shift_positions_modulo_word(self, programmer):
        assert programmer.left_shift(1, 32) == 1
        assert programmer.left_shift(1, 33) == 2

    def test_right_shift_propagates_sign(self, programmer):
        assert programmer.right_shift(-8, 1) == -4
        assert programmer.right_shift(16, 2) == 4

    def test_rotate_left_carries_top_bit_around(self, programmer):
        assert programmer.rotate_left(0x80000000, 1) == 1

    def test_rotate_right_carries_low_bit_around(self, programmer):
        assert programmer.rotate_right(1, 1) == 0x80000000

    def test_rotate_with_explicit_width(self, programmer):
        assert programmer.rotate_left(0b1001, 1, 4) == 0b0011
        assert programmer.rotate_right(0b1001, 1, 4) == 0b1100

    def test_rotate_rejects_zero_width(self, programmer):
        with pytest.raises(ValueError):
            programmer.rotate_left(1, 1, 0)

    def test_twos_complement(self, programmer):
        assert programmer.twos_complement(5) == -5
        assert programmer.twos_complement(-(2 ** 31)) == -(2 ** 31)
        assert programmer.twos_complement(1, 8) == -1


class TestBits:

    def test_get_bit(self, programmer):
        assert programmer.get_bit(0b100, 2) == 1
        assert programmer.get_bit(0b100, 1) == 0
        assert programmer.get_bit(-1, 31) == 1

    def test_set_and_clear_bit(self, programmer):
        assert programmer.set_bit(0, 3, 1) == 8
        assert programmer.set_bit(15, 0, 0) == 14

    def test_set_sign_bit(self, programmer):
        assert programmer.set_bit(0, 31, 1) == -(2 ** 31)

    def test_set_bit_rejects_non_binary(self, programmer):
        with pytest.raises(InvalidDigitError):
            programmer.set_bit(0, 1, 2)

    def test_count_set_bits(self, programmer):
        assert programmer.count_set_bits(255) == 8
        assert programmer.count_set_bits(0) == 0

    def test_count_set_bits_of_negative(self, programmer):
        assert programmer.count_set_bits(-1) == 32


class TestWordSizes:

    def test_for_word_size(self):
        engine = ProgrammerEngine.for_word_size(8)
        assert engine.word == BYTE
        assert engine.bitwise_not(0) == -1
        assert engine.left_shift(1, 7) == -128
        assert engine.count_set_bits(-1) == 8

    def test_qword(self):
        engine = ProgrammerEngine.for_word_size(64)
        assert engine.word == QWORD
        assert engine.left_shift(1, 63) == -(2 ** 63)

    def test_unsupported_word_size(self):
        with pytest.raises(ValueError):
            ProgrammerEngine.for_word_size(12)

    def test_default_is_dword(self, programmer):
        assert programmer.word == DWORD


class TestWord:

    def test_range(self):
        assert (DWORD.lo, DWORD.hi) == (-(2 ** 31), 2 ** 31 - 1)
        assert BYTE.mask == 0xFF

    def test_wrap(self):
        assert BYTE.wrap(128) == -128
        assert BYTE.wrap(255) == -1
        assert BYTE.wrap(256) == 0
        assert BYTE.wrap(-129) == 127

    def test_unsigned(self):
        assert BYTE.unsigned(-1) == 255

    def test_contains(self):
        assert BYTE.contains(127)
        assert not BYTE.contains(128)

    def test_rejects_empty_word(self):
        with pytest.raises(ValueError):
            Word(0)
