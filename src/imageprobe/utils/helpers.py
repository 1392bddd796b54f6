#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Common utility functions
Provides logging setup, argument coercion and formatting helpers
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional
from datetime import datetime

from .constants import DATETIME_FORMAT
from ..core.errors import ToolArgumentError


def setup_logging(verbose: bool = False, log_dir: Optional[Path] = None,
                  level: str = "INFO") -> logging.Logger:
    """
    Setup logging system

    Console output goes to stderr: stdout carries the MCP protocol stream.

    Args:
        verbose: Whether to enable verbose logging mode (forces DEBUG)
        log_dir: Optional directory for a daily log file
        level: Log level name used when not verbose

    Returns:
        Configured logger object
    """
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt=DATETIME_FORMAT
    )

    logger = logging.getLogger('imageprobe')
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f'imageprobe_{datetime.now().strftime("%Y%m%d")}.log'
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def resolve_directory(directory: Optional[str]) -> str:
    """
    Resolve a caller-supplied directory to an absolute path

    Args:
        directory: Directory path, relative paths resolve against the current directory

    Returns:
        Absolute directory path
    """
    directory = directory or "./"
    if os.path.isabs(directory):
        return directory
    return os.path.abspath(directory)


def coerce_bool(name: str, value: Any, default: bool) -> bool:
    """Validate a boolean tool argument ("true"/"false" strings are accepted)"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    raise ToolArgumentError(f"'{name}' must be a boolean, got {value!r}")


def coerce_int(name: str, value: Any, default: int, minimum: int = 0) -> int:
    """Validate an integer tool argument"""
    if value is None:
        return default
    if isinstance(value, bool):
        raise ToolArgumentError(f"'{name}' must be a number, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ToolArgumentError(f"'{name}' must be a number, got {value!r}")
    if number < minimum:
        raise ToolArgumentError(f"'{name}' must be >= {minimum}, got {number}")
    return number


def coerce_str(name: str, value: Any, default: str) -> str:
    """Validate a string tool argument"""
    if value is None:
        return default
    if not isinstance(value, str):
        raise ToolArgumentError(f"'{name}' must be a string, got {value!r}")
    return value
