"""
SPI transport layer for MAX7219 chips.

The ``SpiTransport`` ABC abstracts the raw bus I/O so that:
  • Tests can inject a mock transport (no real hardware needed).
  • ``SpidevTransport`` provides real SPI via the Linux spidev driver.
  • ``DryRunTransport`` logs frames instead of sending them.

Each transport is bound to one chip-select line (``/dev/spidevB.D``).
Chips on separate chip selects are addressed by opening a transport per
device; the controller swaps them in ``set_active_controller()``.

Linux dependencies:
  • spidev: ``pip install spidev``  (needs ``dtparam=spi=on`` on a Raspberry Pi,
    or the spidev kernel module loaded)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, List, Sequence

from .codec import FRAME_SIZE, describe_frame

log = logging.getLogger(__name__)

# Optional SPI backend
try:
    import spidev
    SPIDEV_AVAILABLE = True
except ImportError:
    SPIDEV_AVAILABLE = False


# =========================================================================
# Constants
# =========================================================================

# Clock speed used for every register write (the chip accepts up to 10 MHz;
# a slow clock tolerates long jumper wires).
DEFAULT_SPEED_HZ = 20000

# MAX7219 samples DIN on the rising edge with CLK idle low
SPI_MODE = 0

SPIDEV_PATH_FMT = "/dev/spidev{bus}.{device}"

TransferCallback = Callable[[], None]


def NO_OP() -> None:
    """Default completion callback."""


def spidev_path(bus: int, device: int) -> str:
    """Device node for *bus*/*device*, e.g. ``/dev/spidev0.1``."""
    return SPIDEV_PATH_FMT.format(bus=bus, device=device)


# =========================================================================
# Data classes
# =========================================================================

@dataclass
class SpiMessage:
    """One full-duplex exchange on the bus."""
    send: bytes
    receive: bytearray = field(default_factory=lambda: bytearray(FRAME_SIZE))
    speed_hz: int = DEFAULT_SPEED_HZ

    @property
    def byte_length(self) -> int:
        return len(self.send)


# =========================================================================
# Abstract SPI transport
# =========================================================================

class SpiTransport(ABC):
    """Abstract SPI transport bound to one chip select, mockable for testing."""

    def __init__(self, bus: int, device: int):
        self.bus = bus
        self.device = device

    @abstractmethod
    def open(self) -> None:
        """Open the bus handle."""

    @abstractmethod
    def close(self) -> None:
        """Release the bus handle."""

    @abstractmethod
    def transfer(
        self,
        messages: Sequence[SpiMessage],
        callback: TransferCallback = NO_OP,
    ) -> None:
        """Exchange *messages* in order, then invoke *callback*."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the handle is currently open."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.bus}, {self.device})"


# =========================================================================
# Real transport: spidev
# =========================================================================

class SpidevTransport(SpiTransport):
    """Real SPI transport using the Linux spidev driver.

    Each message is sent with ``xfer2`` so chip select stays asserted for
    the whole frame; the chip latches on the rising edge of CS.

    Requires: ``pip install spidev``
    """

    def __init__(self, bus: int, device: int = 0):
        if not SPIDEV_AVAILABLE:
            raise ImportError(
                "spidev is not installed. Install with: pip install spidev\n"
                "Also enable the SPI interface (raspi-config, or "
                "dtparam=spi=on in /boot/config.txt)"
            )
        super().__init__(bus, device)
        self._spi = None

    def open(self) -> None:
        """Open ``/dev/spidevB.D``.

        Raises:
            OSError: If the device node is missing or not accessible.
        """
        if self._spi is not None:
            return
        spi = spidev.SpiDev()
        spi.open(self.bus, self.device)
        spi.mode = SPI_MODE
        spi.max_speed_hz = DEFAULT_SPEED_HZ
        self._spi = spi
        log.debug("Opened %s", spidev_path(self.bus, self.device))

    def close(self) -> None:
        if self._spi is not None:
            self._spi.close()
            self._spi = None
            log.debug("Closed %s", spidev_path(self.bus, self.device))

    def transfer(
        self,
        messages: Sequence[SpiMessage],
        callback: TransferCallback = NO_OP,
    ) -> None:
        if self._spi is None:
            raise RuntimeError("Transport not open")
        for msg in messages:
            rx = self._spi.xfer2(list(msg.send), msg.speed_hz)
            msg.receive[:] = bytes(rx)
        callback()

    @property
    def is_open(self) -> bool:
        return self._spi is not None


# =========================================================================
# Dry-run transport
# =========================================================================

class DryRunTransport(SpiTransport):
    """Transport that logs frames instead of touching hardware.

    Sent frames are kept in ``sent`` for inspection.
    """

    def __init__(self, bus: int, device: int = 0):
        super().__init__(bus, device)
        self._is_open = False
        self.sent: List[bytes] = []

    def open(self) -> None:
        self._is_open = True
        log.info("[dry-run] open %s", spidev_path(self.bus, self.device))

    def close(self) -> None:
        self._is_open = False
        log.info("[dry-run] close %s", spidev_path(self.bus, self.device))

    def transfer(
        self,
        messages: Sequence[SpiMessage],
        callback: TransferCallback = NO_OP,
    ) -> None:
        if not self._is_open:
            raise RuntimeError("Transport not open")
        for msg in messages:
            self.sent.append(bytes(msg.send))
            log.info("[dry-run] %s: %s", spidev_path(self.bus, self.device),
                     describe_frame(msg.send))
        callback()

    @property
    def is_open(self) -> bool:
        return self._is_open


TransportFactory = Callable[[int, int], SpiTransport]


def open_transport(
    factory: TransportFactory,
    bus: int,
    device: int,
) -> SpiTransport:
    """Create a transport with *factory* and open it."""
    transport = factory(bus, device)
    transport.open()
    return transport


def default_factory(dry_run: bool = False) -> TransportFactory:
    """Pick the transport class for the CLI."""
    return DryRunTransport if dry_run else SpidevTransport
