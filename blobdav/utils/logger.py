#!/usr/bin/env python3
"""
blobdav/utils/logger.py
Logging setup for the gateway
"""

import logging
from typing import Optional

LOGGER_NAME = 'blobdav'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``blobdav`` logger: console output, optionally a log file as well"""
    logger = logging.getLogger(LOGGER_NAME)

    # keep records out of the root logger, otherwise they print twice
    logger.propagate = False

    if logger.handlers:
        logger.handlers.clear()

    log_level = getattr(logging, str(level).upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.info(f"File logging enabled: {log_file}")

    return logger
