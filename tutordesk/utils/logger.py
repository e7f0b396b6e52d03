# tutordesk/utils/logger.py
import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "tutordesk"

logger = logging.getLogger(ROOT_LOGGER_NAME)
logger.setLevel(logging.INFO)

# Prevent duplicate handlers if imported multiple times
if not logger.handlers:
    # Stream handler (stdout -> docker logs)
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_formatter = logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
    stream_handler.setFormatter(stream_formatter)
    logger.addHandler(stream_handler)


def get_logger(name: str) -> logging.Logger:
    """Child logger under the tutordesk namespace."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logger.getChild(name)


def configure_logging(level: Union[str, int] = "INFO", log_file: Optional[str] = None) -> None:
    """Apply the configured level and add a file handler once."""
    logger.setLevel(level if isinstance(level, int) else level.upper())

    if not log_file:
        return
    log_path = Path(log_file)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_path.resolve():
            return

    # Ensure directory exists
    log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(file_formatter)
    logger.addHandler(file_handler)
