import sys

from loguru import logger

import daylayout.settings as settings
from daylayout.config import load_config
from daylayout.calendar_loader import load_day_events
from daylayout.errors import LayoutError
from daylayout.event_processing import lay_out_day
from daylayout.renderers import render_day_pdf, write_layout_yaml
from daylayout.utils import parse_target_date, fmt_minutes
from daylayout.logger import configure_logging, EVENTS


def main():
    # 0) Set up logs
    configure_logging()

    # 1) Load config and the day to lay out
    config = load_config(settings.CONFIG_PATH)
    target = parse_target_date(str(config.get("date") or settings.TARGET_DATE))
    logger.info("Laying out {}", target)

    # 2) Gather events: inline ones first, then calendar feeds
    events = list(config["events"])
    if config["calendars"]:
        events.extend(load_day_events(config["calendars"], target))

    # dedupe by id
    instances = []
    seen = set()
    for event in events:
        eid = event.get("id")
        if eid in seen:
            logger.opt(colors=True).debug("<yellow>Skipping duplicate: {}</yellow>", eid)
            continue
        seen.add(eid)
        instances.append(event)

    # 3) Compute the layout
    try:
        laid_out = lay_out_day(instances)
    except LayoutError as e:
        logger.error("Layout failed: {}", e)
        sys.exit(1)

    for event in laid_out:
        logger.log(EVENTS, "{} [{} - {}] left={} width={}",
                   event["id"], fmt_minutes(event["start"]), fmt_minutes(event["end"]),
                   event["left"], event["width"])

    # 4) Write outputs
    if settings.FORMAT in ("pdf", "both"):
        labels = {e["id"]: e["title"] for e in instances if e.get("title")}
        colors = {e["id"]: e["color"] for e in instances if e.get("color")}
        out_path = render_day_pdf(laid_out, settings.OUTPUT_PDF, target, labels=labels, colors=colors)
        logger.info("Wrote PDF to {}", out_path)

    if settings.FORMAT in ("yaml", "both"):
        out_path = write_layout_yaml(laid_out, settings.OUTPUT_LAYOUT)
        logger.info("Wrote layout to {}", out_path)

    logger.info("✅ Completed layout of {} events for {}", len(laid_out), target)


if __name__ == '__main__':
    main()
