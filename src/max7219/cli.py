#!/usr/bin/env python3
"""
max7219 - Command Line Interface

Entry point for the max7219 package.
"""

import argparse
import logging
import sys
import time
from typing import List, Tuple

from max7219.__version__ import __version__


def _setup_logging(verbose=0):
    """Configure logging from the -v count."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
    else:
        logging.basicConfig(level=logging.WARNING)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="max7219",
        description="Drive MAX7219 seven-segment display controllers over SPI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    max7219 init              Scan all 8 digits, wake up, clear
    max7219 test -s 2         Light every segment for 2 seconds
    max7219 show HELP         Write symbols right-aligned
    max7219 show 12.34        '.' lights the previous digit's decimal point
    max7219 show --decode 42  Same, for digits set up by `init --decode`
    max7219 segments 0 0x7f   Write a raw segment byte to digit 0
    max7219 intensity 15      Full brightness
    max7219 select 1          Address the second chip from now on
    max7219 --dry-run show 42 Log frames instead of sending them
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )
    parser.add_argument("--bus", "-b", type=int, help="SPI bus number (default: saved config)")
    parser.add_argument("--device", "-d", type=int, help="Controller index / chip select")
    parser.add_argument("--count", "-c", type=int, help="Number of controllers on the bus")
    parser.add_argument("--dry-run", action="store_true", help="Log frames instead of sending")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    init_parser = subparsers.add_parser("init", help="Run the power-up sequence")
    init_parser.add_argument("--intensity", "-i", type=int, help="Brightness 0-15")
    init_parser.add_argument("--decode", action="store_true",
                             help="Use the chip's Code B decoding for all digits")

    test_parser = subparsers.add_parser("test", help="Light every segment (display test)")
    test_parser.add_argument("--seconds", "-s", type=float, default=1.0,
                             help="How long to keep the test pattern on")

    show_parser = subparsers.add_parser("show", help="Write symbols to the digits")
    show_parser.add_argument("text", help="Up to 8 symbols, right-aligned")
    show_parser.add_argument("--decode", action="store_true",
                             help="Digits are in decode mode (after `init --decode`)")

    seg_parser = subparsers.add_parser("segments", help="Write a raw segment byte")
    seg_parser.add_argument("digit", type=int, help="Digit 0-7")
    seg_parser.add_argument("byte", type=lambda s: int(s, 0), help="Byte, e.g. 0x7f or 127")

    int_parser = subparsers.add_parser("intensity", help="Set brightness")
    int_parser.add_argument("level", type=int, help="0 (dimmest) to 15 (brightest)")

    subparsers.add_parser("clear", help="Blank all digits")
    subparsers.add_parser("on", help="Leave shutdown mode")
    subparsers.add_parser("off", help="Enter shutdown mode")

    select_parser = subparsers.add_parser("select", help="Select controller to drive")
    select_parser.add_argument("index", type=int, help="Controller index, 0-based")

    subparsers.add_parser("config", help="Show effective settings")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    from max7219.conf import settings
    settings.override(bus=args.bus, device=args.device, count=args.count)

    if args.command == "init":
        return init_display(intensity=args.intensity, decode=args.decode,
                            dry_run=args.dry_run)
    elif args.command == "test":
        return display_test(seconds=args.seconds, dry_run=args.dry_run)
    elif args.command == "show":
        return show_text(args.text, decode=args.decode, dry_run=args.dry_run)
    elif args.command == "segments":
        return write_segments(args.digit, args.byte, dry_run=args.dry_run)
    elif args.command == "intensity":
        return set_intensity(args.level, dry_run=args.dry_run)
    elif args.command == "clear":
        return clear(dry_run=args.dry_run)
    elif args.command == "on":
        return power(True, dry_run=args.dry_run)
    elif args.command == "off":
        return power(False, dry_run=args.dry_run)
    elif args.command == "select":
        return select_controller(args.index)
    elif args.command == "config":
        return show_config()

    return 0


# =========================================================================
# Helpers
# =========================================================================

# Errors reported to the user instead of a traceback
_USER_ERRORS = (ValueError, IndexError, RuntimeError, OSError, ImportError)


def _open_display(dry_run=False):
    """Open the controller described by the effective settings."""
    from max7219.conf import settings
    from max7219.controller import MAX7219
    from max7219.spi_transport import default_factory

    return MAX7219(
        settings.bus,
        settings.device,
        settings.count,
        transport_factory=default_factory(dry_run),
        speed_hz=settings.speed_hz,
    )


def split_text(text: str, width: int = 8) -> List[Tuple[str, bool]]:
    """Split *text* into (symbol, dp) cells, right-aligned to *width*.

    A '.' following a symbol becomes that symbol's decimal point; a
    leading or repeated '.' occupies a cell of its own.

    Returns:
        *width* cells, index 0 being the rightmost digit.
    """
    cells: List[Tuple[str, bool]] = []
    for ch in text:
        if ch == '.' and cells and cells[-1][0] != '.' and not cells[-1][1]:
            cells[-1] = (cells[-1][0], True)
        else:
            cells.append((ch, False))
    if len(cells) > width:
        raise ValueError(f"'{text}' needs {len(cells)} digits, only {width} available")
    cells = [(' ', False)] * (width - len(cells)) + cells
    return list(reversed(cells))


def _run(action, dry_run=False):
    """Open the display, run *action(disp)*, map user errors to exit code 1."""
    try:
        with _open_display(dry_run) as disp:
            action(disp)
        return 0
    except _USER_ERRORS as e:
        print(f"Error: {e}")
        return 1


# =========================================================================
# Commands
# =========================================================================

def init_display(intensity=None, decode=False, dry_run=False):
    """Run the power-up sequence."""
    from max7219.conf import settings

    level = settings.intensity if intensity is None else intensity

    def action(disp):
        disp.initialize(intensity=level, decode_all=decode)
        print(f"Controller {disp.active_controller} initialized "
              f"(intensity {level}, {'decode' if decode else 'no-decode'})")

    return _run(action, dry_run)


def display_test(seconds=1.0, dry_run=False):
    """Light every segment for *seconds*, then restore."""
    def action(disp):
        disp.start_display_test()
        try:
            time.sleep(seconds)
        finally:
            disp.stop_display_test()

    return _run(action, dry_run)


def show_text(text, decode=False, dry_run=False):
    """Write *text* right-aligned, one symbol per digit.

    Digits left in decode mode by `init --decode` need *decode* set, so
    symbols go out as Code B values rather than segment bytes.
    """
    def action(disp):
        write = disp.set_digit_code if decode else disp.set_digit_symbol
        for n, (symbol, dp) in enumerate(split_text(text)):
            write(n, symbol, dp)

    return _run(action, dry_run)


def write_segments(digit, byte, dry_run=False):
    """Write a raw segment byte to one digit."""
    return _run(lambda disp: disp.set_digit_segments_byte(digit, byte), dry_run)


def set_intensity(level, dry_run=False):
    """Set display brightness."""
    return _run(lambda disp: disp.set_display_intensity(level), dry_run)


def clear(dry_run=False):
    """Blank all digits."""
    return _run(lambda disp: disp.clear_display(), dry_run)


def power(on, dry_run=False):
    """Leave (on=True) or enter (on=False) shutdown mode."""
    return _run(lambda disp: disp.startup() if on else disp.shutdown(), dry_run)


def select_controller(index):
    """Persist the controller index used by later commands."""
    from max7219.conf import save_selected_controller, settings

    if not 0 <= index < settings.count:
        print(f"Error: controller {index} out of range (0-{settings.count - 1})")
        return 1
    save_selected_controller(index)
    print(f"Selected controller {index}")
    return 0


def show_config():
    """Print effective settings."""
    from max7219.conf import CONFIG_PATH, settings
    from max7219.spi_transport import spidev_path

    print(f"Config: {CONFIG_PATH}")
    for key, value in settings.as_dict().items():
        print(f"  {key:<10} {value}")
    print(f"  {'node':<10} {spidev_path(settings.bus, settings.device)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
