"""
Logging setup for the midi2input CLI.
"""

import logging
import sys
from typing import Optional, TextIO

RESET = '\033[0m'
LEVEL_COLORS = {
    logging.DEBUG: '\033[90m',
    logging.INFO: '',
    logging.WARNING: '\033[93m',
    logging.ERROR: '\033[91m',
    logging.CRITICAL: '\033[91m\033[1m',
}

LOG_FORMAT = '%(asctime)s %(levelname)-7s [%(name)s] %(message)s'
DATE_FORMAT = '%H:%M:%S'


class ColorFormatter(logging.Formatter):
    """Colors whole records by level when writing to a terminal."""

    def __init__(self, use_colors: bool = True):
        super().__init__(LOG_FORMAT, DATE_FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = LEVEL_COLORS.get(record.levelno, '')
        if self.use_colors and color:
            return f"{color}{formatted}{RESET}"
        return formatted


def setup_logging(verbose: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure the ``midi2input`` logger hierarchy.

    Args:
        verbose: Log DEBUG records (every MIDI event) instead of INFO
        stream: Output stream, stderr by default

    Returns:
        The package root logger
    """
    stream = stream or sys.stderr
    root = logging.getLogger('midi2input')
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ColorFormatter(use_colors=hasattr(stream, 'isatty') and stream.isatty()))
    root.addHandler(handler)
    root.propagate = False
    return root
