"""Frame codec: bit packing and the two-byte (register, data) wire frame."""

from __future__ import annotations

from typing import Sequence, Tuple

from .registers import Register

FRAME_SIZE = 2
BITS_PER_BYTE = 8


def pack_bits(bits: Sequence) -> int:
    """Pack 8 bits into a byte, ``bits[0]`` being the least significant.

    Any truthy/falsy values are accepted, so ``[1, 0, ...]`` and
    ``[True, False, ...]`` are equivalent.

    E.g. ``[1, 1, 0, 1, 0, 1, 0, 1]`` returns ``0xAB`` (``0b10101011``).

    Raises:
        ValueError: If *bits* does not hold exactly 8 entries.
    """
    if len(bits) != BITS_PER_BYTE:
        raise ValueError(
            f"Expected {BITS_PER_BYTE} bits, got {len(bits)}"
        )
    byte = 0
    for i, bit in enumerate(bits):
        if bit:
            byte |= 1 << i
    return byte


def unpack_bits(byte: int) -> Tuple[bool, ...]:
    """Inverse of :func:`pack_bits`."""
    _check_byte(byte, "byte")
    return tuple(bool(byte >> i & 1) for i in range(BITS_PER_BYTE))


def build_frame(register: int, data: int) -> bytes:
    """Build the 2-byte frame the chip latches on one transfer."""
    _check_byte(register, "register")
    _check_byte(data, "data")
    return bytes((int(register), int(data)))


def describe_frame(frame: bytes) -> str:
    """Render a frame for logs, e.g. ``Intensity <- 0x0f``."""
    if len(frame) != FRAME_SIZE:
        return f"<malformed frame {bytes(frame).hex()}>"
    reg, data = frame[0], frame[1]
    try:
        name = Register(reg).name
    except ValueError:
        name = f"0x{reg:02x}"
    return f"{name} <- 0x{data:02x}"


def _check_byte(value: int, what: str) -> None:
    if not isinstance(value, int) or not 0 <= value <= 0xFF:
        raise ValueError(f"Invalid {what} byte: {value!r} (expected 0-255)")
