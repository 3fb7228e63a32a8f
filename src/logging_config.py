"""
Logging configuration for the template filler.
Console output for the CLI, plus an optional rotating debug log file.
"""
#
# Copyright (c) 2026 TrailLensCo
# All rights reserved.
#
# This file is proprietary and confidential.
# Unauthorized copying, distribution, or use of this file,
# via any medium, is strictly prohibited without the express
# written permission of TrailLensCo.

import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Optional

DETAILED_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s:%(lineno)d - %(funcName)s - %(message)s"
CONSOLE_FORMAT = "%(levelname)-8s - %(message)s"


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    log_file_prefix: str = "template_filler",
) -> Optional[str]:
    """
    Configure root logging.

    Console messages go to stderr at log_level so stdout stays free for
    command output. When log_dir is given, everything at DEBUG is also
    written to a timestamped rotating file there.

    Args:
        log_dir: Directory for the log file (None disables file logging)
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file_prefix: Prefix for log filename

    Returns:
        Path to the log file, or None
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    root_logger.addHandler(console_handler)

    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = os.path.join(log_dir, f"{log_file_prefix}_{timestamp}.log")

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            fmt=DETAILED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"
        ))
        root_logger.addHandler(file_handler)

    # Third-party HTTP chatter stays out of the console
    for noisy in ("httpx", "httpcore", "anthropic"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        f"Logging initialized: level={log_level}, file={log_path}"
    )
    return log_path
