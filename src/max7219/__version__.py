"""max7219 version information."""

__version__ = "1.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 1.0.0 - Initial release: register map, segment font, controller with
#         decode/intensity/scan-limit/shutdown/display-test, spidev backend
# 1.0.1 - Fix set_active_controller reopening the wrong bus, validate digit
#         index in set_digit_segments_byte
# 1.1.0 - Code B font for decode-mode digits (clear_display now writes the
#         chip's blank code), dry-run transport, `max7219` CLI with saved
#         config (~/.config/max7219/config.json)
