"""Configuration module for logstreamer."""

from .config import Config
from .settings import Settings

__all__ = ['Config', 'Settings']
