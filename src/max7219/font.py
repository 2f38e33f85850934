"""Seven-segment font tables for MAX7219 digits.

Two encodings are kept here:

``FONT``
    Raw segment bitmasks for digits in no-decode mode.  Bit layout matches
    the digit register (datasheet Table 6)::

        bit:   7   6  5  4  3  2  1  0
        seg:  dp   a  b  c  d  e  f  g

           _a_
         f|   |b
          |_g_|
         e|   |c
          |___|  . dp
            d

``CODE_B``
    The chip's built-in BCD font, used for digits in decode mode.  Only the
    low nibble selects the glyph; bit 7 still drives the decimal point.

Both lookups are total: anything not in the table renders as blank.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Mapping, Optional, Set, Union

Symbol = Union[str, int, None]

DECIMAL_POINT = 0x80
BLANK = 0x00
CODE_B_BLANK = 0x0F

SEGMENT_BITS: Mapping[str, int] = MappingProxyType({
    'dp': 7,
    'a': 6,
    'b': 5,
    'c': 4,
    'd': 3,
    'e': 2,
    'f': 1,
    'g': 0,
})

# Segments lit for each character.  '!' and '.' include the decimal point
# in the glyph itself; every other entry leaves bit 7 to the caller.
CHAR_SEGMENTS: Dict[str, Set[str]] = {
    '0': {'a', 'b', 'c', 'd', 'e', 'f'},
    '1': {'b', 'c'},
    '2': {'a', 'b', 'd', 'e', 'g'},
    '3': {'a', 'b', 'c', 'd', 'g'},
    '4': {'b', 'c', 'f', 'g'},
    '5': {'a', 'c', 'd', 'f', 'g'},
    '6': {'a', 'c', 'd', 'e', 'f', 'g'},
    '7': {'a', 'b', 'c'},
    '8': {'a', 'b', 'c', 'd', 'e', 'f', 'g'},
    '9': {'a', 'b', 'c', 'd', 'f', 'g'},
    'a': {'a', 'b', 'c', 'e', 'f', 'g'},
    'b': {'c', 'd', 'e', 'f', 'g'},
    'c': {'d', 'e', 'g'},
    'd': {'b', 'c', 'd', 'e', 'g'},
    'E': {'a', 'd', 'e', 'f', 'g'},
    'e': {'a', 'b', 'd', 'e', 'f', 'g'},
    'f': {'a', 'e', 'f', 'g'},
    'g': {'a', 'b', 'c', 'd', 'f', 'g'},
    'H': {'b', 'c', 'e', 'f', 'g'},
    'h': {'c', 'e', 'f', 'g'},
    'i': {'c'},
    'j': {'b', 'c', 'd', 'e'},
    'k': {'a', 'c', 'e', 'f', 'g'},
    'L': {'d', 'e', 'f'},
    'l': {'d', 'e', 'f'},
    'm': {'a', 'b', 'c', 'e', 'f'},
    'n': {'c', 'e', 'g'},
    'o': {'c', 'd', 'e', 'g'},
    'P': {'a', 'b', 'e', 'f', 'g'},
    'p': {'a', 'b', 'e', 'f', 'g'},
    'q': {'a', 'b', 'c', 'f', 'g'},
    'r': {'e', 'g'},
    's': {'a', 'c', 'd', 'f', 'g'},
    't': {'d', 'e', 'f', 'g'},
    'u': {'c', 'd', 'e'},
    'v': {'c', 'd', 'e'},
    'w': {'c', 'd', 'e'},
    'x': {'b', 'c', 'e', 'f', 'g'},
    'y': {'b', 'c', 'd', 'f', 'g'},
    'z': {'a', 'b', 'd', 'e', 'g'},
    '-': {'g'},
    '_': {'d'},
    '[': {'a', 'd', 'e', 'f'},
    '(': {'a', 'd', 'e', 'f'},
    ']': {'a', 'b', 'c', 'd'},
    ')': {'a', 'b', 'c', 'd'},
    '°': {'a', 'b', 'f', 'g'},
    '!': {'b', 'dp'},
    "'": {'b'},
    '.': {'dp'},
}


def segments_to_byte(segments: Set[str]) -> int:
    """Pack a set of segment names ('a'-'g', 'dp') into a digit byte."""
    byte = 0
    for name in segments:
        byte |= 1 << SEGMENT_BITS[name]
    return byte


FONT: Mapping[str, int] = MappingProxyType({
    ch: segments_to_byte(segs) for ch, segs in CHAR_SEGMENTS.items()
})

CODE_B: Mapping[str, int] = MappingProxyType({
    '0': 0x0, '1': 0x1, '2': 0x2, '3': 0x3,
    '4': 0x4, '5': 0x5, '6': 0x6, '7': 0x7,
    '8': 0x8, '9': 0x9, '-': 0xA, 'E': 0xB,
    'H': 0xC, 'L': 0xD, 'P': 0xE, ' ': CODE_B_BLANK,
})


def _key(symbol: Symbol) -> Optional[str]:
    # Integers are looked up by their decimal form so 7 and '7' agree.
    if symbol is None:
        return None
    if isinstance(symbol, bool):
        return None
    if isinstance(symbol, int):
        return str(symbol)
    if isinstance(symbol, str):
        return symbol
    return None


def lookup(symbol: Symbol) -> int:
    """Return the no-decode segment byte for *symbol*, or ``BLANK``."""
    key = _key(symbol)
    if key is None:
        return BLANK
    return FONT.get(key, BLANK)


def code_b_lookup(symbol: Symbol) -> int:
    """Return the Code B value for *symbol*, or ``CODE_B_BLANK``."""
    key = _key(symbol)
    if key is None:
        return CODE_B_BLANK
    return CODE_B.get(key, CODE_B_BLANK)
