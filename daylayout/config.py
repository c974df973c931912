from collections.abc import Mapping

import yaml
from loguru import logger

import daylayout.settings as settings
from daylayout.utils import css_color_to_hex


def load_config(path=settings.CONFIG_PATH) -> dict:
    """Load events/calendar config and normalize colors."""
    with open(path, 'r', encoding='utf-8') as f:
        logger.debug("Loading configuration from {}", path)
        config = yaml.safe_load(f) or {}
    if not isinstance(config, Mapping):
        logger.error("Config {} must be a mapping, got {}", path, type(config).__name__)
        raise ValueError(f"Config {path} must be a mapping")

    for key in ("events", "calendars"):
        # `events:` with nothing under it loads as None
        entries = config.get(key) or []
        if not isinstance(entries, list):
            logger.error("Config '{}' must be a list, got {}", key, type(entries).__name__)
            raise ValueError(f"Config '{key}' must be a list")
        for pos, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                logger.error("Config {}[{}] is not a mapping: {!r}", key, pos, entry)
                raise ValueError(f"Config {key}[{pos}] is not a mapping")
            if entry.get("color"):
                entry["color"] = css_color_to_hex(str(entry["color"]))
        config[key] = entries
    return config
