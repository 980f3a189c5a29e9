"""
Colored console logging for ORM Inspector.

The ``log_*`` helpers prefix messages with a marker; ``ColoredFormatter``
picks the color from that marker, falling back to the log level.
"""

import logging
import sys
from typing import Optional


SUCCESS_MARKER = "✓"
PROGRESS_MARKER = "→"
HIGHLIGHT_MARKER = "•"
SECTION_RULE = "=" * 60


class ColoredFormatter(logging.Formatter):
    """
    Logging formatter adding ANSI color codes to console output.

    Errors and warnings are always colored by level. Informational messages
    are colored by the marker the ``log_*`` helpers put in front of them.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '',
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SUCCESS = '\033[92m'    # Bright Green
    PROGRESS = '\033[94m'   # Bright Blue
    HIGHLIGHT = '\033[96m'  # Bright Cyan

    RESET = '\033[0m'
    BOLD = '\033[1m'

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True, stream=None):
        """
        Args:
            fmt: Log format string (uses default if None)
            use_colors: Whether to use colors at all
            stream: Stream the handler writes to; colors are only used on a TTY
        """
        super().__init__(fmt or "%(levelname)s: %(message)s")
        stream = stream if stream is not None else sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def color_for(self, record: logging.LogRecord) -> str:
        """Color prefix for ``record``; empty when the message stays plain."""
        if record.levelno >= logging.WARNING:
            return self.COLORS.get(record.levelname, '')

        message = record.getMessage().lstrip()
        if message.startswith(SUCCESS_MARKER):
            return self.SUCCESS + self.BOLD
        if message.startswith(PROGRESS_MARKER):
            return self.PROGRESS
        if message.startswith(HIGHLIGHT_MARKER):
            return self.HIGHLIGHT
        if message.startswith(SECTION_RULE) or message.isupper():
            return self.BOLD + self.HIGHLIGHT
        return self.COLORS.get(record.levelname, '')

    def format(self, record: logging.LogRecord) -> str:
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message
        color = self.color_for(record)
        if not color:
            return formatted_message
        return f"{color}{formatted_message}{self.RESET}"


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Route all logging to stderr through ``ColoredFormatter``.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors, stream=sys.stderr))
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"{SUCCESS_MARKER} {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"{PROGRESS_MARKER} {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    logger.info(f"{HIGHLIGHT_MARKER} {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header framed by horizontal rules."""
    logger.info(SECTION_RULE)
    logger.info(f"  {section_name.upper()}")
    logger.info(SECTION_RULE)
