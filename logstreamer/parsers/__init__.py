"""Parsers module for logstreamer."""

from .log_parser import LogParser, classify_level, parse_line

__all__ = ['LogParser', 'classify_level', 'parse_line']
