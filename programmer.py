"""Programmer-mode engine: base conversion and fixed-width bitwise operations.

Every operation is pure.  Results of the bitwise operations are wrapped
into the engine's word (32-bit two's complement unless configured
otherwise), so ``bitwise_not(0) == -1`` and ``left_shift(1, 31)`` is the
most negative 32-bit value, exactly as on a native 32-bit integer.
Shift and bit positions are taken modulo the word size.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from bounds import DWORD, WORD_SIZES, Word
from errors import InvalidBaseError, InvalidDigitError
from models import NumberBase

_SUPPORTED_RADIXES = (2, 8, 10, 16)

_DIGITS = {
    2: re.compile(r"^[01]+$"),
    8: re.compile(r"^[0-7]+$"),
    10: re.compile(r"^[0-9]+$"),
    16: re.compile(r"^[0-9A-Fa-f]+$"),
}

_FORMAT_SPEC = {2: "b", 8: "o", 10: "d", 16: "X"}


def radix_of(base: NumberBase | str | int) -> int:
    """Resolve a base given as enum, name or radix to its radix."""
    if isinstance(base, NumberBase):
        return base.radix
    if isinstance(base, bool):
        raise InvalidBaseError(base)
    if isinstance(base, int):
        if base in _SUPPORTED_RADIXES:
            return base
        raise InvalidBaseError(base)
    try:
        return NumberBase(base).radix
    except ValueError:
        raise InvalidBaseError(base) from None


def is_valid_digit(digit: str, base: NumberBase | str | int) -> bool:
    """True if ``digit`` is a single character of the base's alphabet."""
    return len(digit) == 1 and bool(_DIGITS[radix_of(base)].match(digit))


@dataclass(frozen=True)
class ProgrammerEngine:
    word: Word = DWORD

    @classmethod
    def for_word_size(cls, bits: int) -> ProgrammerEngine:
        try:
            return cls(word=WORD_SIZES[bits])
        except KeyError:
            raise ValueError(f"Unsupported word size: {bits}") from None

    # -- base conversion -----------------------------------------------------

    def parse(self, value: str, base: NumberBase | str | int) -> int:
        """Parse a signed digit string in the given base."""
        radix = radix_of(base)
        text = value.strip()
        sign = 1
        if text.startswith("-"):
            sign, text = -1, text[1:]
        if not _DIGITS[radix].match(text):
            raise InvalidDigitError(value, radix)
        return sign * int(text, radix)

    def format(self, value: int, base: NumberBase | str | int) -> str:
        """Render an integer in the given base, hexadecimal upper-cased."""
        radix = radix_of(base)
        sign = "-" if value < 0 else ""
        return sign + format(abs(value), _FORMAT_SPEC[radix])

    def convert_base(
        self,
        value: str,
        from_base: NumberBase | str | int,
        to_base: NumberBase | str | int,
    ) -> str:
        radix_of(to_base)
        return self.format(self.parse(value, from_base), to_base)

    # -- bitwise -------------------------------------------------------------

    def bitwise_and(self, a: int, b: int) -> int:
        return self.word.wrap(a & b)

    def bitwise_or(self, a: int, b: int) -> int:
        return self.word.wrap(a | b)

    def bitwise_xor(self, a: int, b: int) -> int:
        return self.word.wrap(a ^ b)

    def bitwise_not(self, value: int) -> int:
        return self.word.wrap(~value)

    def left_shift(self, value: int, positions: int) -> int:
        return self.word.wrap(value << (positions % self.word.bits))

    def right_shift(self, value: int, positions: int) -> int:
        """Arithmetic (sign-propagating) right shift."""
        return self.word.wrap(value) >> (positions % self.word.bits)

    def rotate_left(self, value: int, positions: int, bit_width: int | None = None) -> int:
        width = self._width(bit_width)
        mask = (1 << width) - 1
        value &= mask
        positions %= width
        return ((value << positions) | (value >> (width - positions))) & mask

    def rotate_right(self, value: int, positions: int, bit_width: int | None = None) -> int:
        width = self._width(bit_width)
        mask = (1 << width) - 1
        value &= mask
        positions %= width
        return ((value >> positions) | (value << (width - positions))) & mask

    def twos_complement(self, value: int, bit_width: int | None = None) -> int:
        return Word(self._width(bit_width)).wrap(-value)

    # -- single bits ---------------------------------------------------------

    def get_bit(self, value: int, position: int) -> int:
        return (self.word.unsigned(value) >> (position % self.word.bits)) & 1

    def set_bit(self, value: int, position: int, bit: int) -> int:
        if bit not in (0, 1):
            raise InvalidDigitError(str(bit), 2)
        flag = 1 << (position % self.word.bits)
        if bit:
            return self.word.wrap(value | flag)
        return self.word.wrap(value & ~flag)

    def count_set_bits(self, value: int) -> int:
        return bin(self.word.unsigned(value)).count("1")

    # -- internal helpers ----------------------------------------------------

    def _width(self, bit_width: int | None) -> int:
        width = self.word.bits if bit_width is None else bit_width
        if width < 1:
            raise ValueError(f"bit_width must be >= 1, got {width}")
        return width
