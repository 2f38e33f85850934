"""
MAX7219 controller: register-level and symbol-level display API.

Datasheet: https://www.analog.com/media/en/technical-documentation/data-sheets/MAX7219-MAX7221.pdf

Example (raw segments)::

    disp = MAX7219(0)
    disp.set_decode_none()
    disp.set_scan_limit(8)
    disp.startup()
    disp.set_digit_segments(0, [0, 0, 1, 1, 0, 1, 1, 1])

Example (symbols)::

    disp = MAX7219(0)
    disp.set_decode_none()
    disp.set_scan_limit(8)
    disp.startup()
    for n, ch in enumerate("PLEH"):
        disp.set_digit_symbol(n, ch)

Every write is a single 2-byte frame (register, data) handed to the
transport.  The registers are write-only; nothing is read back.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

from .codec import BITS_PER_BYTE, build_frame, describe_frame, pack_bits
from .font import DECIMAL_POINT, Symbol, code_b_lookup, lookup
from .registers import DIGIT_COUNT, Register, digit_register
from .spi_transport import (
    DEFAULT_SPEED_HZ,
    NO_OP,
    SpiMessage,
    SpiTransport,
    SpidevTransport,
    TransferCallback,
    TransportFactory,
    open_transport,
)

log = logging.getLogger(__name__)

# Register values
SHUTDOWN_MODE = 0x00
NORMAL_MODE = 0x01
DISPLAY_TEST_OFF = 0x00
DISPLAY_TEST_ON = 0x01

INTENSITY_MIN = 0
INTENSITY_MAX = 15
SCAN_LIMIT_MIN = 1
SCAN_LIMIT_MAX = DIGIT_COUNT

DECODE_NONE: Tuple[bool, ...] = (False,) * DIGIT_COUNT
DECODE_ALL: Tuple[bool, ...] = (True,) * DIGIT_COUNT


def _is_index(value) -> bool:
    # bool is an int subclass; True/False are not positions or levels
    return isinstance(value, int) and not isinstance(value, bool)


def _check_intensity(brightness) -> None:
    if not _is_index(brightness) or not INTENSITY_MIN <= brightness <= INTENSITY_MAX:
        raise ValueError(
            f"Invalid brightness number: {brightness!r} "
            f"(expected {INTENSITY_MIN}-{INTENSITY_MAX})"
        )


def _check_scan_limit(limit) -> None:
    if not _is_index(limit) or not SCAN_LIMIT_MIN <= limit <= SCAN_LIMIT_MAX:
        raise ValueError(
            f"Invalid scan limit number: {limit!r} "
            f"(expected {SCAN_LIMIT_MIN}-{SCAN_LIMIT_MAX})"
        )


class MAX7219:
    """Driver for one or more MAX7219 chips on an SPI bus.

    Only one chip is addressed at a time.  Each chip sits on its own chip
    select (``/dev/spidev{bus}.{device}``); ``set_active_controller()``
    closes the current handle and opens the one for the requested chip.

    Args:
        bus: SPI bus number, e.g. 0 for ``/dev/spidev0.*``.
        device: Chip to start with. Defaults to 0.
        count: Total number of chips. Defaults to 1.
        transport_factory: ``(bus, device) -> SpiTransport``; defaults to
            ``SpidevTransport``.  Tests pass a mock here.
        speed_hz: SPI clock for every frame.

    Raises:
        ValueError: If *count* < 1 or *device* is not in ``[0, count)``.
        OSError / ImportError: Propagated from the transport on open.
    """

    def __init__(
        self,
        bus: int,
        device: int = 0,
        count: Optional[int] = None,
        transport_factory: Optional[TransportFactory] = None,
        speed_hz: int = DEFAULT_SPEED_HZ,
    ):
        if count is None:
            count = 1
        if not _is_index(count) or count < 1:
            raise ValueError(f"Invalid controller count: {count!r}")
        if not _is_index(device) or not 0 <= device < count:
            raise ValueError(
                f"Initial device {device!r} out of range for {count} controller(s)"
            )

        self._bus = bus
        self._active_controller = device
        self._total_controllers = count
        self._speed_hz = speed_hz
        self._factory: TransportFactory = transport_factory or SpidevTransport
        self._decode_modes: Optional[Tuple[bool, ...]] = None
        self._transport: Optional[SpiTransport] = open_transport(
            self._factory, bus, device)
        log.info("MAX7219 on bus %s: controller %d of %d",
                 bus, device, count)

    # -- Properties --------------------------------------------------------

    @property
    def bus(self) -> int:
        return self._bus

    @property
    def total_controllers(self) -> int:
        return self._total_controllers

    @property
    def active_controller(self) -> int:
        return self._active_controller

    @property
    def decode_modes(self) -> Optional[Tuple[bool, ...]]:
        """Last decode vector written, or None if never set."""
        return self._decode_modes

    @property
    def transport(self) -> Optional[SpiTransport]:
        return self._transport

    # -- Addressing --------------------------------------------------------

    def set_active_controller(self, index: int) -> None:
        """Select which chip receives subsequent writes.

        This closes and reopens a bus handle, so don't call it per frame.

        Raises:
            IndexError: If *index* is not in ``[0, total_controllers)``.
                The current handle is left untouched.
        """
        if not _is_index(index) or not 0 <= index < self._total_controllers:
            raise IndexError(
                f"Controller index {index!r} is out of bounds "
                f"(0-{self._total_controllers - 1})"
            )

        old, self._transport = self._transport, None
        if old is not None:
            old.close()
        self._transport = open_transport(self._factory, self._bus, index)
        self._active_controller = index
        log.info("Active controller -> %d", index)

    def get_active_controller(self) -> int:
        """Returns which chip is currently controlled."""
        return self._active_controller

    def close(self) -> None:
        """Release the bus handle. Further writes raise RuntimeError."""
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
            log.info("MAX7219 on bus %s closed", self._bus)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    # -- Operating mode ----------------------------------------------------

    def startup(self, callback: Optional[TransferCallback] = None) -> None:
        """Put the chip in normal operation mode.

        On power-up all control registers are reset, the display is blanked
        and the chip enters shutdown mode.
        """
        self.shift_out(Register.Shutdown, NORMAL_MODE, callback)

    def shutdown(self, callback: Optional[TransferCallback] = None) -> None:
        """Put the chip in shutdown mode.

        The scan oscillator halts and the display blanks; digit and control
        registers keep their contents.
        """
        self.shift_out(Register.Shutdown, SHUTDOWN_MODE, callback)

    def start_display_test(self, callback: Optional[TransferCallback] = None) -> None:
        """Light every LED, overriding (not altering) all other registers."""
        self.shift_out(Register.DisplayTest, DISPLAY_TEST_ON, callback)

    def stop_display_test(self, callback: Optional[TransferCallback] = None) -> None:
        """Return to the previous operation mode."""
        self.shift_out(Register.DisplayTest, DISPLAY_TEST_OFF, callback)

    def set_decode_mode(
        self,
        modes: Sequence,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Set per-digit decode mode.

        In no-decode mode the data bits drive segments directly.  In decode
        mode the chip renders Code B (0-9, -, E, H, L, P, blank).

        Args:
            modes: 8 truthy/falsy entries, one per digit.  E.g. decode for
                digits 0-3 and raw segments for 4-7 is ``[1,1,1,1,0,0,0,0]``.

        Raises:
            ValueError: If *modes* does not have exactly 8 entries.
        """
        if len(modes) != DIGIT_COUNT:
            raise ValueError(
                f"Invalid decode mode array: expected {DIGIT_COUNT} entries, "
                f"got {len(modes)}"
            )
        byte = pack_bits(modes)
        self._decode_modes = tuple(bool(m) for m in modes)
        self.shift_out(Register.DecodeMode, byte, callback)

    def set_decode_none(self, callback: Optional[TransferCallback] = None) -> None:
        self.set_decode_mode(DECODE_NONE, callback)

    def set_decode_all(self, callback: Optional[TransferCallback] = None) -> None:
        self.set_decode_mode(DECODE_ALL, callback)

    # -- Digit content -----------------------------------------------------

    def set_digit_segments(
        self,
        n: int,
        segments: Sequence,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Turn each segment of digit *n* on/off (no-decode mode).

        *segments* is indexed by bit position, so ``segments[7]`` is the
        decimal point and ``segments[6]`` down to ``segments[0]`` are
        segments a-g.  E.g. dp, c, d, e and g on is
        ``[1, 0, 1, 1, 1, 0, 0, 1]``.

        Raises:
            IndexError: If *n* is not 0-7.
            ValueError: If *segments* does not have 8 entries.
        """
        digit_register(n)
        if len(segments) != BITS_PER_BYTE:
            raise ValueError(
                f"Invalid segments array: expected {BITS_PER_BYTE} entries, "
                f"got {len(segments)}"
            )
        self.set_digit_segments_byte(n, pack_bits(segments), callback)

    def set_digit_segments_byte(
        self,
        n: int,
        byte: int,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Same as ``set_digit_segments`` but takes the packed byte."""
        self.shift_out(digit_register(n), byte, callback)

    def set_digit_symbol(
        self,
        n: int,
        symbol: Symbol = None,
        dp: bool = False,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Show *symbol* on digit *n* using the segment font (no-decode mode).

        Unknown symbols, and ``None``, clear the digit.  Integers are shown
        by their decimal form, so ``7`` and ``'7'`` are equivalent.

        Raises:
            IndexError: If *n* is not 0-7.
        """
        register = digit_register(n)
        byte = lookup(symbol) | (DECIMAL_POINT if dp else 0)
        self.shift_out(register, byte, callback)

    def set_digit_code(
        self,
        n: int,
        symbol: Symbol = None,
        dp: bool = False,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Show *symbol* on digit *n* using the chip's Code B font.

        Only meaningful in decode mode.  Unknown symbols render blank.
        """
        register = digit_register(n)
        byte = code_b_lookup(symbol) | (DECIMAL_POINT if dp else 0)
        self.shift_out(register, byte, callback)

    def clear_display(self, callback: Optional[TransferCallback] = None) -> None:
        """Turn off all segments of all digits.

        Digits in decode mode get the Code B blank; the rest get 0x00.
        If no decode mode was set yet, no-decode is written first.
        *callback* fires once, after the last digit.
        """
        if self._decode_modes is None:
            self.set_decode_none()

        last = DIGIT_COUNT - 1
        for i, decoded in enumerate(self._decode_modes):
            cb = callback if i == last else None
            if decoded:
                self.set_digit_code(i, ' ', False, cb)
            else:
                self.set_digit_segments_byte(i, 0x00, cb)

    def set_display_intensity(
        self,
        brightness: int,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Set brightness, 0 (dimmest) to 15 (brightest).

        Raises:
            ValueError: If *brightness* is out of range.
        """
        _check_intensity(brightness)
        self.shift_out(Register.Intensity, brightness, callback)

    def set_scan_limit(
        self,
        limit: int,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Set how many digits are displayed, counting from digit 0.

        E.g. to show digits 0, 1 and 2 only, *limit* is 3.

        Raises:
            ValueError: If *limit* is not 1-8.
        """
        _check_scan_limit(limit)
        self.shift_out(Register.ScanLimit, limit - 1, callback)

    def initialize(
        self,
        scan_limit: int = SCAN_LIMIT_MAX,
        intensity: Optional[int] = None,
        decode_all: bool = False,
    ) -> None:
        """Power-up sequence: scan limit, intensity, decode mode, run, clear.

        Arguments are checked before the first frame is sent.

        Raises:
            ValueError: If *scan_limit* or *intensity* is out of range.
        """
        _check_scan_limit(scan_limit)
        if intensity is not None:
            _check_intensity(intensity)

        self.set_scan_limit(scan_limit)
        if intensity is not None:
            self.set_display_intensity(intensity)
        if decode_all:
            self.set_decode_all()
        else:
            self.set_decode_none()
        self.startup()
        self.clear_display()

    # -- Transfer primitive ------------------------------------------------

    def shift_out(
        self,
        register: int,
        data: int,
        callback: Optional[TransferCallback] = None,
    ) -> None:
        """Send one (register, data) frame to the active chip.

        Raises:
            RuntimeError: If no transport is open.
        """
        if self._transport is None:
            raise RuntimeError("SPI device not initialized")

        frame = build_frame(register, data)
        message = SpiMessage(send=frame, speed_hz=self._speed_hz)
        log.debug("controller %d: %s", self._active_controller, describe_frame(frame))
        self._transport.transfer([message], callback or NO_OP)
