"""
Breakout player settings.

Stored as one versioned JSON blob and merged over the defaults on load, so
missing or stale fields from older saves never break newer code.
"""

from __future__ import annotations
import json
import logging
from dataclasses import asdict, dataclass, fields

from .intent import DESKTOP_KEY_MODES
from .scores import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "tenebris_breakout_settings_v1"


@dataclass
class Settings:
    music_on: bool = True
    music_vol: float = 0.6
    sfx_on: bool = True
    sfx_vol: float = 0.7
    show_touch_buttons: bool = False
    desktop_keys: str = "ad"


def _valid(name: str, value) -> bool:
    if name in ("music_on", "sfx_on", "show_touch_buttons"):
        return isinstance(value, bool)
    if name in ("music_vol", "sfx_vol"):
        return isinstance(value, (int, float)) and not isinstance(value, bool) and 0.0 <= value <= 1.0
    if name == "desktop_keys":
        return value in DESKTOP_KEY_MODES
    return False


def load_settings(store: KeyValueStore) -> Settings:
    """Defaults overlaid with every valid stored field"""
    settings = Settings()
    raw = store.get(SETTINGS_KEY)
    if raw is None:
        return settings
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning("Discarding malformed settings blob")
        return settings
    if not isinstance(data, dict):
        logger.warning("Discarding malformed settings blob")
        return settings

    for f in fields(Settings):
        if f.name not in data:
            continue
        value = data[f.name]
        if _valid(f.name, value):
            setattr(settings, f.name, float(value) if f.name.endswith("_vol") else value)
        else:
            logger.warning("Ignoring invalid setting %s=%r", f.name, value)
    return settings


def save_settings(store: KeyValueStore, settings: Settings):
    store.set(SETTINGS_KEY, json.dumps(asdict(settings)))
