import os
from datetime import date
from pathlib import Path

import yaml
from loguru import logger
from reportlab.pdfgen import canvas
from reportlab.lib.colors import HexColor
from reportlab.pdfbase import pdfmetrics

import daylayout.settings as settings
from daylayout.layout import get_layout_config, minute_to_y
from daylayout.logger import VISUAL
from daylayout.utils import css_color_to_hex, fmt_minutes

FONT_REGULAR = "Helvetica"
FONT_BOLD    = "Helvetica-Bold"

PLACEHOLDER_TITLE    = "Sample Event"
PLACEHOLDER_LOCATION = "Sample Location"


def ellipsize(text: str, font_name: str, font_size: float, max_w: float) -> str:
    if pdfmetrics.stringWidth(text, font_name, font_size) <= max_w:
        return text
    while text and pdfmetrics.stringWidth(text + "...", font_name, font_size) > max_w:
        text = text[:-1]
    return text.rstrip() + "..." if text else ""


def render_time_grid(c, layout):
    grid_color = css_color_to_hex(settings.GRIDLINE_COLOR)
    day_start = layout["day_start_hour"]
    logger.log(VISUAL, "Drawing time grid for {} minutes from {:02}:00.", layout["day_minutes"], day_start)
    logger.log(VISUAL, "    Top: {t:.2f}, Bottom: {b:.2f}", t=layout["grid_top"], b=layout["grid_bottom"])
    logger.log(VISUAL, "    Left: {l:.2f}, Right: {r:.2f}", l=layout["grid_left"], r=layout["grid_right"])

    # Container the events are positioned in
    c.setFillColor(HexColor(css_color_to_hex(settings.CONTAINER_FILL)))
    c.setStrokeColor(HexColor(grid_color))
    c.setLineWidth(0.5)
    c.rect(
        layout["grid_left"],
        layout["grid_bottom"],
        layout["grid_right"] - layout["grid_left"],
        layout["grid_top"] - layout["grid_bottom"],
        stroke=1,
        fill=1,
    )

    # Hour and half-hour labels
    for minute in range(0, layout["day_minutes"] + 1, 30):
        y = minute_to_y(minute, layout)
        on_hour = minute % 60 == 0
        c.setFillGray(0.2 if on_hour else 0.55)
        c.setFont(FONT_BOLD if on_hour else FONT_REGULAR, 8 if on_hour else 6)
        c.drawRightString(layout["grid_left"] - 6, y - 3, fmt_minutes(minute, day_start))


def render_event(c, event, layout, label=None, color=None):
    """
    Draw one laid-out event: a box at (left, top) sized (width, end - start),
    a color bar on its left edge, and a title/location pair.
    """
    text_padding = layout["text_padding"]
    bar_w = 3

    x = layout["grid_left"] + event["left"]
    h = event["end"] - event["start"]
    y = minute_to_y(event["top"], layout) - h
    w = event["width"]
    radius = 2 if h < 10 else 3

    c.setLineWidth(0.5)
    c.setStrokeColor(HexColor(css_color_to_hex(settings.EVENT_STROKE)))
    c.setFillColor(HexColor(css_color_to_hex(color or settings.EVENT_BAR)))
    c.roundRect(x, y, w, h, radius, stroke=0, fill=1)
    c.setFillColor(HexColor(css_color_to_hex(settings.EVENT_FILL)))
    c.roundRect(x + bar_w, y, max(w - bar_w, 0), h, radius, stroke=1, fill=1)

    title = label or PLACEHOLDER_TITLE
    inner_w = max(w - bar_w - 2 * text_padding, 0)
    title_size = min(10, max(h - 2, 4))
    text_x = x + bar_w + text_padding
    title_y = y + h - text_padding - title_size * 0.75

    c.setFillGray(0)
    c.setFont(FONT_BOLD, title_size)
    c.drawString(text_x, title_y, ellipsize(title, FONT_BOLD, title_size, inner_w))

    # second line only if it fits in the box
    sub_size = 8
    sub_y = title_y - sub_size - 2
    if sub_y >= y + 2:
        if label:
            sub = f"{fmt_minutes(event['start'], layout['day_start_hour'])} - {fmt_minutes(event['end'], layout['day_start_hour'])}"
        else:
            sub = PLACEHOLDER_LOCATION
        c.setFillGray(0.35)
        c.setFont(FONT_REGULAR, sub_size)
        c.drawString(text_x, sub_y, ellipsize(sub, FONT_REGULAR, sub_size, inner_w))

    logger.log(VISUAL, "Event {}: box_x: {x:.2f} | box_y: {y:.2f} | box_width: {w:.2f} | box_height: {h:.2f}",
               event["id"], x=x, y=y, w=w, h=h)


def render_day_pdf(
    layout_events: list[dict],
    output_path: str,
    date_label: date | None = None,
    labels: dict | None = None,
    colors: dict | None = None,
    layout: dict | None = None,
) -> str:
    """
    Draw a single-page PDF of the laid-out day:
      • heading (date or "Schedule")
      • container with time labels
      • each event at its computed position
      • footer
    Overwrites `output_path`; returns it.
    """
    layout = layout or get_layout_config()
    labels = labels or {}
    colors = colors or {}
    width, height = layout["page_width"], layout["page_height"]

    logger.log(VISUAL, "Page size: {w:.2f}×{h:.2f}", w=width, h=height)

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(output_path), pagesize=(width, height))

    # Header/title
    heading = date_label.strftime('%A, %B %d, %Y') if date_label else "Schedule"
    c.setFillGray(0)
    c.setFont(FONT_BOLD, layout["heading_size"])
    c.drawCentredString(width / 2, layout["page_top"] - layout["heading_ascent"], heading)

    render_time_grid(c, layout)

    for event in layout_events:
        render_event(c, event, layout, labels.get(event["id"]), colors.get(event["id"]))

    footer = settings.FOOTER
    if footer != "disabled":
        c.setFont(FONT_REGULAR, 6)
        c.setFillColor(HexColor(css_color_to_hex(settings.FOOTER_COLOR)))
        c.drawCentredString(width / 2, layout["page_bottom"], footer)

    c.showPage()
    c.save()
    logger.debug("Rendered {} events to {}", len(layout_events), output_path)
    return str(output_path)


def write_layout_yaml(layout_events: list[dict], output_path: str) -> str:
    """
    Dump the layout records as a YAML list.
    """
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            [dict(event) for event in layout_events],
            f,
            sort_keys=False,
            default_flow_style=False,
        )
    logger.debug("Wrote layout of {} events to {}", len(layout_events), output_path)
    return output_path
