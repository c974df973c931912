from datetime import datetime, date, time, timedelta
import re
from loguru import logger
import webcolors
from dateutil import parser as date_parser

from daylayout.settings import USE_24H, DAY_START_HOUR


def css_color_to_hex(name_or_hex: str) -> str:
    """
    Convert a CSS color name, functional gray(%), or hex code to a 6-digit hex code.

    - Leaves valid hex codes unchanged.
    - Parses CSS4 gray(%) syntax.
    - Custom mapping for grayscale class names gray0–gray15, with aliases for black and white.
    - Falls back to standard CSS color names via webcolors.
    """

    if name_or_hex.startswith("#"):
        return name_or_hex

    lower = name_or_hex.lower().strip()

    m_pct = re.fullmatch(r'gray\(\s*([0-9]+(?:\.[0-9]+)?)%\s*\)', lower)
    if m_pct:
        pct = float(m_pct.group(1))
        level = round(255 * pct / 100)
        return f"#{level:02X}{level:02X}{level:02X}"

    if lower in ('black', 'gray0'):
        return '#000000'
    if lower in ('white', 'gray15'):
        return '#FFFFFF'

    m = re.fullmatch(r'gray([0-9]|1[0-5])', lower)
    if m:
        n = int(m.group(1))
        level = n * 17
        return f"#{level:02X}{level:02X}{level:02X}"

    try:
        return webcolors.name_to_hex(name_or_hex)
    except ValueError:
        logger.error("Unknown CSS color '{}', passing through.", name_or_hex)
        return name_or_hex


def minute_to_time(minute: int, day_start_hour: int = DAY_START_HOUR) -> time:
    """
    Wall clock time of a minute offset from the day start.
    """
    base = datetime.combine(date.today(), time(hour=day_start_hour))
    return (base + timedelta(minutes=minute)).time()


def fmt_minutes(minute: int, day_start_hour: int = DAY_START_HOUR) -> str:
    """
    Return a HH:MM or h:MM AM/PM string based on USE_24H.
    """
    t = minute_to_time(minute, day_start_hour)
    if USE_24H:
        return t.strftime("%H:%M")
    else:
        return t.strftime("%-I:%M %p")


def parse_target_date(value: str, today: date | None = None) -> date:
    s = value.strip().strip('"').strip("'").lower()
    if s in ("", "day", "today"):
        return today or date.today()
    try:
        return date_parser.isoparse(s).date()
    except ValueError:
        logger.error("Cannot parse target date {!r}", value)
        raise
