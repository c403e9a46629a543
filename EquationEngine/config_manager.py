# config_manager.py
"""Loads engine settings (precision, rounding mode, log level) from config.json."""
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

config_json = Path(__file__).resolve().parent / "config.json"

DEFAULT_SETTINGS = {
    "precision": 7,
    "rounding": "ROUND_HALF_EVEN",
    "log_level": "WARNING",
}


def load_settings(path=None):
    """Return the settings dictionary, or {} if the file is missing or corrupt."""
    path = Path(path) if path is not None else config_json
    try:
        with open(path, 'r', encoding='utf-8') as f:
            settings_dict = json.load(f)

    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.warning("Could not load settings from %s: %s", path, e)
        return {}

    if not isinstance(settings_dict, dict):
        logger.warning("Settings file %s does not contain an object", path)
        return {}
    return settings_dict


def load_setting_value(key_value, default=None, path=None):
    settings_dict = load_settings(path)

    if key_value == "all":
        merged = dict(DEFAULT_SETTINGS)
        merged.update(settings_dict)
        return merged

    if default is None:
        default = DEFAULT_SETTINGS.get(key_value)
    return settings_dict.get(key_value, default)
