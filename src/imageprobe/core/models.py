#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Scan record models

A scanned image file yields either a full ImageRecord (header parsed) or a
SizeOnlyRecord (image by extension, header unreadable).
"""

from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass(frozen=True)
class ImageRecord:
    """Image file whose header was parsed"""
    path: str
    width: int
    height: int
    type: str
    size: int

    has_dimensions = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'width': self.width,
            'height': self.height,
            'type': self.type,
            'size': self.size,
        }


@dataclass(frozen=True)
class SizeOnlyRecord:
    """Image file (by extension) whose header could not be read"""
    path: str
    size: int

    has_dimensions = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'size': self.size,
        }


ScanRecord = Union[ImageRecord, SizeOnlyRecord]
