"""MAX7219 register addresses (datasheet Table 2, "Register Address Map")."""

from enum import IntEnum

DIGIT_COUNT = 8


class Register(IntEnum):
    NoOp = 0x00
    Digit0 = 0x01
    Digit1 = 0x02
    Digit2 = 0x03
    Digit3 = 0x04
    Digit4 = 0x05
    Digit5 = 0x06
    Digit6 = 0x07
    Digit7 = 0x08
    DecodeMode = 0x09
    Intensity = 0x0A
    ScanLimit = 0x0B
    Shutdown = 0x0C
    DisplayTest = 0x0F


def digit_register(n: int) -> Register:
    """Return the digit register for position *n* (0-7)."""
    if not isinstance(n, int) or isinstance(n, bool) or not 0 <= n < DIGIT_COUNT:
        raise IndexError(f"Invalid digit number: {n!r} (expected 0-{DIGIT_COUNT - 1})")
    return Register(Register.Digit0 + n)
