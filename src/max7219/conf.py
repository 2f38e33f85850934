"""Saved defaults for the max7219 command-line tool.

Config is stored at ~/.config/max7219/config.json (XDG-compliant).

Usage:
    from max7219.conf import settings

    settings.bus          # SPI bus number
    settings.device       # chip select of the active controller
    settings.count        # controllers wired to the bus
    settings.intensity    # brightness applied by `max7219 init`
    settings.speed_hz     # SPI clock

    # Low-level config access
    from max7219.conf import load_config, save_config
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from .spi_transport import DEFAULT_SPEED_HZ

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'max7219')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

DEFAULTS: Dict[str, Any] = {
    'bus': 0,
    'device': 0,
    'count': 1,
    'intensity': 8,
    'speed_hz': DEFAULT_SPEED_HZ,
}


# =========================================================================
# Low-level config persistence
# =========================================================================

def load_config() -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    try:
        with open(CONFIG_PATH, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (json.JSONDecodeError, OSError) as e:
        log.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, e)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict):
    """Save user config to disk."""
    os.makedirs(os.path.dirname(CONFIG_PATH), exist_ok=True)
    with open(CONFIG_PATH, 'w') as f:
        json.dump(config, f, indent=2)


def get_setting(key: str) -> Any:
    """Saved value for *key*, falling back to ``DEFAULTS``."""
    value = load_config().get(key)
    if value is None:
        return DEFAULTS.get(key)
    return value


def save_setting(key: str, value: Any):
    """Persist a single setting."""
    config = load_config()
    config[key] = value
    save_config(config)


def _coerce(key: str, value: Any) -> int:
    """Saved *value* as an int, or the default for *key* if it isn't one."""
    if value is None:
        return DEFAULTS[key]
    if isinstance(value, (int, float, str)) and not isinstance(value, bool):
        try:
            return int(value)
        except (ValueError, OverflowError) as e:
            log.warning("Ignoring invalid %r in %s: %s", key, CONFIG_PATH, e)
            return DEFAULTS[key]
    log.warning("Ignoring invalid %r in %s: %r", key, CONFIG_PATH, value)
    return DEFAULTS[key]


# =========================================================================
# Selected controller persistence (CLI `select`)
# =========================================================================

def get_selected_controller() -> int:
    """Controller index chosen with `max7219 select`. Defaults to 0."""
    return _coerce('device', load_config().get('device'))


def save_selected_controller(index: int):
    save_setting('device', index)


# =========================================================================
# Settings singleton
# =========================================================================

class Settings:
    """Effective settings: saved config with command-line overrides on top."""

    def __init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        config = load_config()
        values = {key: _coerce(key, config.get(key)) for key in DEFAULTS}
        self.bus: int = values['bus']
        self.device: int = values['device']
        self.count: int = values['count']
        self.intensity: int = values['intensity']
        self.speed_hz: int = values['speed_hz']

    def override(
        self,
        bus: Optional[int] = None,
        device: Optional[int] = None,
        count: Optional[int] = None,
    ) -> None:
        """Apply command-line values for this run only (not persisted)."""
        if bus is not None:
            self.bus = bus
        if device is not None:
            self.device = device
        if count is not None:
            self.count = count

    def as_dict(self) -> Dict[str, int]:
        return {
            'bus': self.bus,
            'device': self.device,
            'count': self.count,
            'intensity': self.intensity,
            'speed_hz': self.speed_hz,
        }


# Module-level singleton, import and use directly
settings = Settings()
