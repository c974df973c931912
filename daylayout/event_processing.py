from collections.abc import Mapping
from loguru import logger

import daylayout.settings as settings
from daylayout.errors import InvalidInput, MalformedEvent
from daylayout.logger import EVENTS


def _ensure_list(events, what: str = "Events"):
    if not isinstance(events, (list, tuple)):
        logger.error("{} must be a list or tuple, got {}", what, type(events).__name__)
        raise InvalidInput(f"{what} must be a list or tuple, got {type(events).__name__}")


def validate_events(events, day_minutes: int = settings.DAY_MINUTES) -> None:
    """
    Check that every event is a mapping with an id and integer minute bounds
    inside the daily window, with no id used twice.
    """
    _ensure_list(events)
    seen = set()
    for pos, event in enumerate(events):
        if not isinstance(event, Mapping):
            logger.error("Event #{} is not a mapping: {!r}", pos, event)
            raise MalformedEvent(f"Event #{pos} is not a mapping")
        missing = [key for key in ("id", "start", "end") if key not in event]
        if missing:
            logger.error("Event #{} is missing {}", pos, missing)
            raise MalformedEvent(f"Event #{pos} is missing {', '.join(missing)}")

        eid, start, end = event["id"], event["start"], event["end"]
        for name, value in (("start", start), ("end", end)):
            if isinstance(value, bool) or not isinstance(value, int):
                logger.error("Event {!r}: {} must be an integer minute, got {!r}", eid, name, value)
                raise MalformedEvent(f"Event {eid!r}: {name} must be an integer minute")
        if not (0 <= start < end <= day_minutes):
            logger.error("Event {!r}: [{}, {}] outside [0, {}] or empty", eid, start, end, day_minutes)
            raise MalformedEvent(
                f"Event {eid!r}: expected 0 <= start < end <= {day_minutes}, got [{start}, {end}]"
            )
        if eid in seen:
            logger.error("Duplicate event id {!r}", eid)
            raise MalformedEvent(f"Duplicate event id {eid!r}")
        seen.add(eid)


def clone_events(events) -> list[dict]:
    """
    Build the mutable working copies the layout operates on.
    """
    _ensure_list(events)
    return [
        {
            "id":              event["id"],
            "start":           event["start"],
            "end":             event["end"],
            "collisions":      [],
            "left":            0,
            "width":           0,
            "has_event_under": False,
            "top_event_id":    None,
        }
        for event in events
    ]


def normalize_events(events) -> list[dict]:
    """
    Strip working fields, leaving {id, start, end, left, width, top}.
    """
    _ensure_list(events)
    return [
        {
            "id":    event["id"],
            "start": event["start"],
            "end":   event["end"],
            "left":  event["left"],
            "width": event["width"],
            "top":   event["start"],
        }
        for event in events
    ]


def start_end_key(event) -> tuple:
    # identical intervals fall back to the id so input order does not matter;
    # the type name keeps 1 and "1" apart
    eid = event["id"]
    return (event["start"], -event["end"], type(eid).__name__, str(eid))


def collides(a, b) -> bool:
    """
    True if the half-open intervals [start, end) of two events overlap.
    """
    return (
        (a["end"] > b["start"] and a["end"] <= b["end"])
        or (a["start"] >= b["start"] and a["start"] < b["end"])
        or (a["start"] < b["start"] and a["end"] > b["end"])
    )


def update_collisions(events) -> None:
    """
    Rebuild every event's `collisions` list from scratch.

    Indices refer to positions in `events`, so this has to run again after
    anything is added, removed or reordered.
    """
    _ensure_list(events)
    for event in events:
        event["collisions"] = []

    for i in range(len(events) - 1):
        for j in range(i + 1, len(events)):
            if collides(events[i], events[j]):
                events[i]["collisions"].append(j)
                events[j]["collisions"].append(i)


def left_collisions_count(collisions: list[int], idx: int) -> int:
    """
    Number of collisions with events placed before position `idx`.
    """
    count = 0
    while count < len(collisions) and collisions[count] < idx:
        count += 1
    return count


def set_layout_params(events, min_left, max_width) -> None:
    """
    Assign left/width so that each run of colliding events shares
    `max_width` evenly, strip starting at `min_left`.

    Expects `events` sorted and with fresh collisions. Every time a member
    joins a run, the earlier members of the run are re-balanced.
    """
    _ensure_list(events)
    start = 0

    for i, event in enumerate(events):
        if not left_collisions_count(event["collisions"], i):
            event["left"] = min_left
            event["width"] = max_width
            start = i
            continue

        left = events[event["collisions"][0]]["left"]
        width = int(max_width / (i - start + 1))

        for k in range(start, i):
            if k == start and left > events[start]["left"]:
                left = events[start]["left"]

            events[k]["width"] = width
            events[k]["left"] = max(left, min_left)

            left += events[k]["width"]

        event["left"] = left
        event["width"] = width


def get_events_under(events, pinned=()) -> tuple[list[dict], list[dict]]:
    """
    Split sorted working events into (primary, under).

    An event that collides with something already placed may instead go
    under an earlier event of the current run that it does not collide
    with, provided nothing is under that one yet. Events whose id is in
    `pinned` always stay in the primary list. Collisions are rebuilt for
    both lists before returning; the under list only knows about collisions
    among nested events.
    """
    _ensure_list(events)
    primary = []
    under = []
    start = 0

    for event in events:
        left_count = sum(1 for placed in primary if collides(placed, event))
        if not left_count:
            start = len(primary)
            primary.append(event)
            continue

        if event["id"] in pinned:
            primary.append(event)
            continue

        for left_event in primary[start:]:
            if not collides(left_event, event) and not left_event["has_event_under"]:
                event["top_event_id"] = left_event["id"]
                left_event["has_event_under"] = True
                under.append(event)
                logger.log(EVENTS, "Event {} goes under event {}", event["id"], left_event["id"])
                break
        else:
            primary.append(event)

    update_collisions(primary)
    if under:
        update_collisions(under)

    return primary, under


def process_events_under(events_under, events) -> None:
    """
    Position nested events inside the space their anchors leave free.

    Each nested event starts from its anchor's column and is widened towards
    the first colliding neighbor on either side. Only the next nested event
    is checked for a competing claim on the column right of the anchor.
    """
    _ensure_list(events_under, "Nested events")
    _ensure_list(events)

    idx_by_id = {event["id"]: i for i, event in enumerate(events)}
    groups = {}

    for i, event in enumerate(events_under):
        top_id = event["top_event_id"]
        top_idx = idx_by_id[top_id]
        top_event = events[top_idx]

        if top_id not in groups:
            groups[top_id] = {
                "items": [],
                "left":  top_event["left"],
                "width": top_event["width"],
            }

        group = groups[top_id]
        group["items"].append(event)

        next_event = events_under[i + 1] if i + 1 < len(events_under) else None
        right_event = events[top_idx + 1] if top_idx + 1 < len(events) else None

        has_top_collision_at_right = (
            right_event is not None
            and next_event is not None
            and right_event["id"] == next_event["top_event_id"]
            and collides(next_event, event)
        )

        if not top_event["collisions"] or has_top_collision_at_right:
            continue

        left = top_event["left"]
        width = top_event["width"]

        if left_collisions_count(event["collisions"], i):
            # fit between nested events further left
            for j in range(i):
                other = events_under[j]
                other_group = groups[other["top_event_id"]]
                if collides(other, event) and other_group["left"] < group["left"]:
                    left = other_group["left"] + other_group["width"]
                    width = width + (top_event["left"] - left)
        else:
            # fit against the first colliding primary event on the left
            for j in range(top_idx - 1, -1, -1):
                if collides(events[j], event):
                    left = events[j]["left"] + events[j]["width"]
                    width = width + (top_event["left"] - left)
                    break

        # and the first colliding one on the right that starts past `left`
        for j in range(top_idx + 1, len(events)):
            if collides(events[j], event) and events[j]["left"] > left:
                width = events[j]["left"] - left
                break

        group["left"] = left
        group["width"] = width

    for top_id, group in groups.items():
        update_collisions(group["items"])
        set_layout_params(group["items"], group["left"], group["width"])
        logger.log(EVENTS, "Under {}: left={} width={}", top_id, group["left"], group["width"])


def _spans_overlap(a, b) -> bool:
    return a["left"] < b["left"] + b["width"] and b["left"] < a["left"] + a["width"]


def misplaced_events_under(events_under, events, min_left, max_width) -> set:
    """
    Ids of nested events whose final window is unusable: empty, outside the
    strip, or on top of a colliding primary or earlier nested event.
    """
    _ensure_list(events_under, "Nested events")
    _ensure_list(events)
    misplaced = set()

    for i, event in enumerate(events_under):
        if (
            event["width"] <= 0
            or event["left"] < min_left
            or event["left"] + event["width"] > min_left + max_width
        ):
            misplaced.add(event["id"])
            continue
        others = list(events) + [
            other for other in events_under[:i] if other["id"] not in misplaced
        ]
        if any(collides(other, event) and _spans_overlap(other, event) for other in others):
            misplaced.add(event["id"])

    return misplaced


def lay_out_day(
    events,
    min_left: int = settings.MIN_LEFT,
    max_width: int = settings.MAX_WIDTH,
    day_minutes: int = settings.DAY_MINUTES,
) -> list[dict]:
    """
    Lay out the events of a single day so that no two colliding events
    overlap on screen.

    `events` is a list of mappings with `id`, `start` and `end` (minutes from
    the day start, within [0, day_minutes]). Returns a new list of
    {id, start, end, left, width, top}: primary events first, then events
    nested under them. Callers should key the result by id.
    """
    validate_events(events, day_minutes)

    # Events whose nested window would not fit are kept in the columns and
    # the layout is redone; `pinned` only grows, so this ends.
    pinned = set()
    while True:
        working = clone_events(events)
        working.sort(key=start_end_key)
        update_collisions(working)

        primary, under = get_events_under(working, pinned)
        set_layout_params(primary, min_left, max_width)
        process_events_under(under, primary)

        misplaced = misplaced_events_under(under, primary, min_left, max_width)
        if not misplaced:
            break
        logger.log(EVENTS, "Keeping {} in columns, no room underneath", sorted(map(str, misplaced)))
        pinned |= misplaced

    logger.debug("Laid out {} events: {} in columns, {} nested", len(working), len(primary), len(under))
    return normalize_events(primary + under)
