"""
Fixed-width integer words for programmer mode.

Python integers are unbounded, so every bitwise result has to be brought
back into the word explicitly.  A ``Word`` knows its width and maps any
raw integer onto the signed two's-complement range or the unsigned bit
pattern of that width.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Word:
    """
    A two's-complement integer word of ``bits`` bits.

    The signed range is [lo, hi]; the unsigned pattern lives in [0, mask].
    """

    bits: int

    def __post_init__(self):
        if self.bits < 1:
            raise ValueError(f"bits ({self.bits}) must be >= 1")

    @property
    def mask(self) -> int:
        return (1 << self.bits) - 1

    @property
    def lo(self) -> int:
        return -(1 << (self.bits - 1))

    @property
    def hi(self) -> int:
        return (1 << (self.bits - 1)) - 1

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def wrap(self, raw: int) -> int:
        """Reduce ``raw`` modulo 2**bits into the signed range."""
        if self.lo <= raw <= self.hi:
            return raw
        return self.lo + (raw - self.lo) % (1 << self.bits)

    def unsigned(self, raw: int) -> int:
        """The bit pattern of ``raw`` as an unsigned value."""
        return raw & self.mask


# ---------------------------------------------------------------------------
# Word size presets
# ---------------------------------------------------------------------------

BYTE = Word(8)
WORD = Word(16)
DWORD = Word(32)
QWORD = Word(64)

WORD_SIZES = {8: BYTE, 16: WORD, 32: DWORD, 64: QWORD}
