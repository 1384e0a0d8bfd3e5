"""Utility modules for parity validator."""

from .config_loader import ConfigLoader, DEFAULT_CONFIG
from .logger import setup_logging, get_logger

__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'setup_logging', 'get_logger']
