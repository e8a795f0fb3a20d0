import logging
import sys
from pathlib import Path

FORMATTER = logging.Formatter(
    "[%(asctime)s] %(levelname)s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
)
# Command output goes to stdout, so logs stay on stderr
STDERR_HANDLER = logging.StreamHandler(sys.stderr)
STDERR_HANDLER.setFormatter(FORMATTER)
STDERR_HANDLER.setLevel(logging.WARNING)
logging.basicConfig(
    level=logging.DEBUG,
    handlers=[STDERR_HANDLER],
)
LOGGER = logging.getLogger("OMEQ")


def set_console_level(level: int) -> None:
    STDERR_HANDLER.setLevel(level)


def attach_file_handler(log_file: Path) -> logging.FileHandler:
    """Write everything from DEBUG up to `log_file` in addition to stderr."""
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(FORMATTER)
    LOGGER.addHandler(file_handler)
    LOGGER.debug(f"Logging to {log_file}")
    return file_handler
