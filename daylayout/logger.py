import sys
import os
from loguru import logger

# Custom levels, below DEBUG
VISUAL = "VISUAL"
EVENTS = "EVENTS"


def _register_levels():
    for name, no, icon in ((VISUAL, 8, "🔍"), (EVENTS, 9, "📅")):
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no, icon=icon, color="<magenta>")


_register_levels()


def configure_logging(
    *,
    level: str = "INFO",
    colorize: bool = True,
    format=(
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <7}</level> | "
        "{message}"
    ),
):
    """
    Parameters:
    - level: minimum log level to output (e.g., "DEBUG", "INFO", "EVENTS").
    - colorize: whether to use ANSI colors in the console.
    - format: Loguru format string for console output.
    """
    env_level = os.getenv("APP_LOG_LEVEL", "").upper()
    env_colorize = os.getenv("APP_LOG_COLORIZE", "").lower()
    env_format = os.getenv("APP_LOG_FORMAT", "")

    effective_level = env_level if env_level else (level or "INFO")
    effective_colorize = env_colorize in ("1", "true", "yes") if env_colorize else colorize
    effective_format = env_format if env_format else format

    logger.remove()
    _register_levels()

    logger.add(
        sys.stdout,
        level=effective_level,
        colorize=effective_colorize,
        format=effective_format,
        enqueue=True,
    )
