#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Report formatting for scan results and captured console logs
"""

import os
from typing import Any, Dict, List, Sequence, Union

from .models import ScanRecord
from ..utils.constants import BYTE_UNITS, BYTE_UNIT_BASE


def format_bytes(num_bytes: int) -> str:
    """
    Format size in bytes to a human-readable string

    Uses base-1024 units up to TB with at most two decimals,
    e.g. 0 -> "0 Bytes", 1024 -> "1 KB", 1536 -> "1.5 KB".
    """
    if num_bytes == 0:
        return '0 Bytes'

    value = float(num_bytes)
    unit_index = 0
    while value >= BYTE_UNIT_BASE and unit_index < len(BYTE_UNITS) - 1:
        value /= BYTE_UNIT_BASE
        unit_index += 1

    text = f"{round(value, 2):.2f}".rstrip('0').rstrip('.')
    return f"{text} {BYTE_UNITS[unit_index]}"


def format_image_info(record: ScanRecord, base_path: str = '') -> str:
    """Format one record as '<path> - <WxH> - <size>[ - <type>]'"""
    if record.has_dimensions:
        dimensions = f"{record.width}x{record.height}"
    else:
        dimensions = "Unknown dimensions"
    rel_path = os.path.relpath(record.path, base_path) if base_path else record.path
    line = f"{rel_path} - {dimensions} - {format_bytes(record.size)}"
    if record.has_dimensions:
        line += f" - {record.type}"
    return line


def scan_location(directory: str, recursive: bool) -> str:
    return f"{directory}{' (including subdirectories)' if recursive else ''}"


def summarize(records: Sequence[ScanRecord], base_path: str = '', recursive: bool = False) -> str:
    """
    Generate a human-readable summary of found images

    Args:
        records: Scan records
        base_path: Directory that was scanned; record paths are shown relative to it
        recursive: Whether subdirectories were included

    Returns:
        Multi-line summary text
    """
    total_size = sum(record.size for record in records)
    lines = [
        f"Found {len(records)} images in {scan_location(base_path, recursive)}",
        f"Total size: {format_bytes(total_size)}",
        "\nImage details:",
    ]
    lines.extend(format_image_info(record, base_path) for record in records)
    return "\n".join(lines)


def serialize(records: Sequence[ScanRecord], with_metadata: bool = True) -> List[Union[Dict[str, Any], str]]:
    """Records as plain dicts, or only their paths"""
    if with_metadata:
        return [record.to_dict() for record in records]
    return [record.path for record in records]


def format_console_logs(logs: Sequence[Any]) -> str:
    """One '[timestamp] TYPE: text' line per console entry"""
    return "\n".join(
        f"[{log.iso_timestamp}] {log.type.upper()}: {log.text}" for log in logs
    )


def serialize_console_logs(logs: Sequence[Any]) -> List[Dict[str, Any]]:
    return [log.to_dict() for log in logs]
