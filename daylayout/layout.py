import daylayout.settings as settings


def get_layout_config(
    min_left=settings.MIN_LEFT,
    max_width=settings.MAX_WIDTH,
    day_minutes=settings.DAY_MINUTES,
    day_start_hour=settings.DAY_START_HOUR,
):
    # One layout unit is one point: a minute is a point tall, widths map 1:1
    time_label_width = settings.TIME_LABEL_WIDTH
    heading_size     = 12
    heading_ascent   = heading_size * 0.75
    element_pad      = 8
    text_padding     = 4

    container_width  = 2 * min_left + max_width
    container_height = day_minutes

    page_width  = settings.PDF_MARGIN_LEFT + time_label_width + container_width + settings.PDF_MARGIN_RIGHT
    page_height = (
        settings.PDF_MARGIN_TOP
        + heading_ascent
        + 2 * element_pad
        + container_height
        + 2 * element_pad
        + settings.PDF_MARGIN_BOTTOM
    )

    page_left   = settings.PDF_MARGIN_LEFT
    page_right  = page_width - settings.PDF_MARGIN_RIGHT
    page_top    = page_height - settings.PDF_MARGIN_TOP
    page_bottom = settings.PDF_MARGIN_BOTTOM

    grid_top    = page_top - heading_ascent - 2 * element_pad
    grid_bottom = grid_top - container_height
    grid_left   = page_left + time_label_width
    grid_right  = grid_left + container_width

    return {
        "page_width":       page_width,
        "page_height":      page_height,
        "page_left":        page_left,
        "page_right":       page_right,
        "page_top":         page_top,
        "page_bottom":      page_bottom,
        "grid_top":         grid_top,
        "grid_bottom":      grid_bottom,
        "grid_left":        grid_left,
        "grid_right":       grid_right,
        "day_minutes":      day_minutes,
        "day_start_hour":   day_start_hour,
        "time_label_width": time_label_width,
        "heading_size":     heading_size,
        "heading_ascent":   heading_ascent,
        "element_pad":      element_pad,
        "text_padding":     text_padding,
    }


def minute_to_y(minute: float, layout: dict[str, float]) -> float:
    """
    Convert a minute offset from the day start to a vertical position inside the grid.
    """
    return layout["grid_top"] - minute


def get_page_size(layout: dict[str, float] | None = None):
    layout = layout or get_layout_config()
    return layout["page_width"], layout["page_height"]
