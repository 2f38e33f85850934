"""
max7219 - MAX7219 seven-segment display driver

Drives one or more MAX7219 LED display controllers over SPI (Linux spidev).

Features:
- Register-level writes (decode mode, intensity, scan limit, shutdown, test)
- Raw segment bytes or font symbols per digit
- Several chips on separate chip selects, one addressed at a time

Usage:
    # As a library
    from max7219 import MAX7219
    disp = MAX7219(0)
    disp.initialize(intensity=8)
    disp.set_digit_symbol(0, '9', dp=True)

    # Command line
    max7219 init
    max7219 show 12.34
"""

from max7219.__version__ import __version__

# Core exports
from max7219.codec import build_frame, pack_bits, unpack_bits
from max7219.controller import MAX7219
from max7219.font import BLANK, CODE_B, DECIMAL_POINT, FONT, code_b_lookup, lookup
from max7219.registers import Register
from max7219.spi_transport import (
    DryRunTransport,
    SpiMessage,
    SpiTransport,
    SpidevTransport,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "MAX7219",
    "Register",
    # Codec
    "build_frame",
    "pack_bits",
    "unpack_bits",
    # Font
    "BLANK",
    "CODE_B",
    "DECIMAL_POINT",
    "FONT",
    "code_b_lookup",
    "lookup",
    # Transport
    "DryRunTransport",
    "SpiMessage",
    "SpiTransport",
    "SpidevTransport",
]
