class LayoutError(Exception):
    """Base class for everything the day layout raises."""


class InvalidInput(LayoutError, TypeError):
    """The events argument is not a list or tuple."""


class MalformedEvent(LayoutError, ValueError):
    """
    An event cannot be laid out: not a mapping, missing id/start/end,
    non-integer bounds, outside the daily window, or a repeated id.
    """
