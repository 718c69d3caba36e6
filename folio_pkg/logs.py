"""Logging setup shared by the site builder and the batch jobs."""

import logging
import os
from datetime import datetime

ROOT_LOGGER = 'folio'


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    allowed_messages = [
        "Site build completed in",
        "Total projects rendered:",
        "Building index page",
        "Building about page",
        "Building business page",
        "Building 404 page",
        "Generating XML sitemap",
        "Generating robots.txt",
        "Localized",
        "Renamed project",
        "Moved project file",
        "ID migration completed",
    ]

    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        return any(msg in record.getMessage() for msg in self.allowed_messages)


def configure_logging(log_dir='logs', level=logging.INFO):
    """
    Attach console and file handlers to the shared ``folio`` logger.

    Args:
        log_dir: Directory for the DEBUG log file. Falsy disables file logging.
        level: Console level.

    Returns:
        The configured parent logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(logging.DEBUG)

    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.addFilter(InfoFilter())
    console_handler.setFormatter(logging.Formatter('%(message)s'))
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_filename = datetime.now().strftime('folio_%Y-%m-%d_%H-%M-%S.log')
        file_handler = logging.FileHandler(os.path.join(log_dir, log_filename), encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        logger.addHandler(file_handler)

    return logger


def get_logger(name):
    """Return a component logger under the shared ``folio`` parent."""
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')
