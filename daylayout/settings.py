import os
import re
from datetime import datetime
from pathlib import Path
from loguru import logger


def _parse_hour(raw: str, use_24h: bool) -> int:
    """
    Parse a human–friendly hour string into 0–23.
      - If it ends with AM/PM, A/P, or with dots (e.g. “9 a.m.”), parse as 12-hour.
      - Otherwise, if use_24h, parse as a bare integer hour.
      - Otherwise (12-hour mode with no suffix) raise an error.
    """
    s = raw.strip()
    # normalize: remove dots and spaces around suffix
    s_norm = re.sub(r'\.', '', s).replace(' ', '')
    # look for a/p or am/pm at very end
    m = re.search(r'(?i)([ap](?:m)?)$', s_norm)
    if m:
        suffix = m.group(1).lower()
        # turn “a” → “am”, “p” → “pm”
        if suffix in ('a', 'p'):
            suffix += 'm'
        base = s_norm[:m.start(1)]
        candidate = (base + suffix).upper()
        # try H PM then H:MM PM
        for fmt in ("%I%p", "%I:%M%p"):
            try:
                return datetime.strptime(candidate, fmt).hour
            except ValueError:
                continue
        logger.error("Cannot parse 12h time from '{}'.", raw)
        raise ValueError(f"Cannot parse 12h time from '{raw}'")
    if not use_24h:
        logger.error("Missing AM/PM suffix in 12-hour mode: {!r}", raw)
        raise ValueError(f"Missing AM/PM suffix: '{raw}'")
    try:
        hour = int(s)
    except ValueError:
        logger.error("Non-integer hour when parsing 24-hour input: {!r}", raw)
        raise ValueError(f"Invalid hour format: '{raw}'")
    if not (0 <= hour < 24):
        logger.error("24-hour hour out of range [0–23]: {!r}", raw)
        raise ValueError(f"24-h hour out of range: '{raw}'")
    return hour


# Project root
BASE_DIR = Path(__file__).resolve().parent.parent

# File paths
CONFIG_PATH    = Path(os.getenv("APP_CONFIG_PATH", str(BASE_DIR / "config.yaml")))
OUTPUT_PDF     = os.getenv("APP_OUTPUT_PDF_PATH", "output/daylayout.pdf")
OUTPUT_LAYOUT  = os.getenv("APP_OUTPUT_LAYOUT_PATH", "output/layout.yaml")
FORMAT         = os.getenv("APP_OUTPUT_FORMAT", "pdf").lower()

TIME_FORMAT    = os.getenv("TIME_FORMAT", "24")
USE_24H        = TIME_FORMAT == "24"
TARGET_DATE    = os.getenv("TIME_TARGET_DATE", "today")

_raw_day_start = os.getenv("TIME_DAY_START", "9" if USE_24H else "9am")
DAY_START_HOUR = _parse_hour(_raw_day_start, USE_24H)

# Layout window: minutes after DAY_START_HOUR, strip of MAX_WIDTH starting at MIN_LEFT
DAY_MINUTES = int(os.getenv("LAYOUT_DAY_MINUTES", 720))
MIN_LEFT    = int(os.getenv("LAYOUT_MIN_LEFT", 10))
MAX_WIDTH   = int(os.getenv("LAYOUT_MAX_WIDTH", 620))

# Color defaults
EVENT_FILL      = os.getenv("DOC_EVENT_FILL_COLOR", "white")
EVENT_STROKE    = os.getenv("DOC_EVENT_BORDER_COLOR", "gray(80%)")
EVENT_BAR       = os.getenv("DOC_EVENT_BAR_COLOR", "#3B5998")
GRIDLINE_COLOR  = os.getenv("DOC_GRID_LINE_COLOR", "gray(85%)")
CONTAINER_FILL  = os.getenv("DOC_CONTAINER_FILL_COLOR", "gray(93%)")
FOOTER_COLOR    = os.getenv("DOC_FOOTER_COLOR", "gray(60%)")

# Page layout
PDF_MARGIN_LEFT   = float(os.getenv("DOC_MARGIN_LEFT", 20))
PDF_MARGIN_RIGHT  = float(os.getenv("DOC_MARGIN_RIGHT", 20))
PDF_MARGIN_TOP    = float(os.getenv("DOC_MARGIN_TOP", 24))
PDF_MARGIN_BOTTOM = float(os.getenv("DOC_MARGIN_BOTTOM", 24))
TIME_LABEL_WIDTH  = float(os.getenv("DOC_TIME_LABEL_WIDTH", 60))
FOOTER = os.getenv("DOC_FOOTER_TEXT", "D A Y L A Y O U T")
