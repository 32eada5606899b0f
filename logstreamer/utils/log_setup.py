import logging
import os
import sys
from pathlib import Path
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Setup logging for the application."""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    # Diagnostics go to stderr so command output on stdout stays parseable
    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(file_handler)


def resolve_log_level(config_level: Optional[str] = None) -> str:
    """Level from ``LOGSTREAMER_LOG_LEVEL``, else the configured one, else INFO."""
    return os.environ.get('LOGSTREAMER_LOG_LEVEL') or config_level or "INFO"
