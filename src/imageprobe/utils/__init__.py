# Utility Module

from .config import Config
from .helpers import setup_logging, resolve_directory

__all__ = [
    'Config',
    'setup_logging',
    'resolve_directory'
]
