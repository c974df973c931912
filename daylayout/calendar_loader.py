from datetime import datetime, date, time

import requests
from icalendar import Calendar as iCal
from loguru import logger

import daylayout.settings as settings
from daylayout.logger import EVENTS


def download_calendar(source: str) -> bytes:
    """
    Fetch an ICS calendar from a URL or file path.
    """
    if source.startswith("http"):
        resp = requests.get(source, timeout=30)
        resp.raise_for_status()
        return resp.content
    else:
        with open(source, "rb") as f:
            return f.read()


def parse_calendar(raw: bytes) -> iCal:
    """
    Parse raw ICS bytes into an icalendar.Calendar object.
    """
    return iCal.from_ical(raw)


def _wall_clock(value) -> datetime:
    # time zones are out of scope: keep the wall clock time as written
    return value.replace(tzinfo=None)


def extract_day_events(
    cal: iCal,
    target_date: date,
    day_start_hour: int = settings.DAY_START_HOUR,
    day_minutes: int = settings.DAY_MINUTES,
    color: str | None = None,
) -> list[dict]:
    """
    Convert the VEVENTs that start on `target_date` into layout events:
    {id, start, end, title, color} with start/end in minutes from the day start.

    All-day and cancelled events, and anything outside [0, day_minutes],
    are skipped.
    """
    day_start = datetime.combine(target_date, time(hour=day_start_hour))
    events = []
    seen = set()

    for comp in cal.walk("VEVENT"):
        title = str(comp.get("SUMMARY", ""))
        start_raw = comp.decoded("dtstart")

        if not isinstance(start_raw, datetime):
            logger.log(EVENTS, "Skipping all-day event {!r}", title)
            continue
        if str(comp.get("STATUS", "")).upper() == "CANCELLED":
            logger.log(EVENTS, "Skipping cancelled event {!r}", title)
            continue

        if comp.get("dtend"):
            end_raw = comp.decoded("dtend")
        elif comp.get("duration"):
            end_raw = start_raw + comp.decoded("duration")
        else:
            end_raw = start_raw

        start = _wall_clock(start_raw)
        end = _wall_clock(end_raw)
        if start.date() != target_date:
            continue

        start_min = int((start - day_start).total_seconds() // 60)
        end_min = int((end - day_start).total_seconds() // 60)
        if not (0 <= start_min < end_min <= day_minutes):
            logger.log(EVENTS, "Skipping {!r}: [{}, {}] outside the day window", title, start_min, end_min)
            continue

        uid = str(comp.get("UID") or f"{title}@{start_min}")
        if uid in seen:
            uid = f"{uid}#{start_min}"
        seen.add(uid)

        events.append({
            "id":    uid,
            "start": start_min,
            "end":   end_min,
            "title": title,
            "color": color,
        })

    return events


def load_day_events(
    sources: list[dict],
    target_date: date,
    day_start_hour: int = settings.DAY_START_HOUR,
    day_minutes: int = settings.DAY_MINUTES,
) -> list[dict]:
    """
    High-level loader: for each calendar entry, download, parse,
    and extract the events of `target_date`.
    """
    all_events = []
    names = [entry.get("name", "<unknown>") for entry in sources]
    logger.debug("Loading {} calendars: {}", len(names), names)
    for entry in sources:
        name = entry.get("name")
        source = entry.get("source")
        logger.debug("Fetching calendar {} from {}...", name, source)
        cal = parse_calendar(download_calendar(source))
        day_events = extract_day_events(cal, target_date, day_start_hour, day_minutes, entry.get("color"))
        logger.debug("   • {}: {} events", name, len(day_events))
        all_events.extend(day_events)
    return all_events
