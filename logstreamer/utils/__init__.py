"""Utilities module for logstreamer."""

from .file_utils import FileUtils
from .formatting import FormattingUtils
from .log_setup import setup_logging

__all__ = ['FileUtils', 'FormattingUtils', 'setup_logging']
