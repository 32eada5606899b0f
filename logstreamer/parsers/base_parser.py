"""
Base parser module for logstreamer.

Shared helpers for parsers that turn raw host output into records.
"""

import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional


_DECIMAL = re.compile(r"-?[0-9]+")


class BaseParser(ABC):
    """
    Abstract base for line parsers.

    Helpers here never raise on malformed input; they fall back to a default
    so a parser can stay total.
    """

    def __init__(self, config=None):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def parse(self, source: str) -> Any:
        """Turn one unit of raw input into a record."""

    def safe_parse_int(self, value: Any, default: Optional[int] = None) -> Optional[int]:
        """
        Convert ``value`` to int, returning ``default`` when it is not numeric.

        Strings must be plain ASCII decimal digits with an optional leading
        ``-``; whitespace, ``+``, underscores and other digit scripts are
        rejected. Booleans are rejected even though Python treats them as
        integers.
        """
        if isinstance(value, bool):
            return default
        if isinstance(value, int):
            return value
        if isinstance(value, str) and _DECIMAL.fullmatch(value):
            return int(value)
        return default

    def safe_get_str(self, data: Dict[str, Any], key: str, default: Optional[str] = None) -> Optional[str]:
        """``data[key]`` if it is a string, otherwise ``default``."""
        value = data.get(key)
        return value if isinstance(value, str) else default

    @staticmethod
    def now_timestamp() -> str:
        """Current local time as an ISO-8601 string with offset."""
        return datetime.now().astimezone().isoformat()
