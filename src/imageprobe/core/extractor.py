#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Image metadata extractor

Decides whether a file is an image by its extension and reads width, height
and format from the header. The file size is always reported; a header that
cannot be read degrades to a size-only record.
"""

import asyncio
import os
import re
import stat
import threading
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Optional, Tuple

from PIL import Image

from .diagnostics import DiagnosticEvent, DiagnosticSink, LoggingDiagnosticSink
from .models import ImageRecord, SizeOnlyRecord, ScanRecord
from ..utils.constants import IMAGE_EXTENSIONS, PILLOW_FORMAT_TAGS, SVG_TYPE_TAG

# Serializes the temporary lift of Image.MAX_IMAGE_PIXELS
_PIXEL_LIMIT_LOCK = threading.Lock()

_SVG_LENGTH = re.compile(r'^\s*([0-9]*\.?[0-9]+)\s*(px)?\s*$')


class HeaderParseError(Exception):
    """Header could not be parsed into dimensions"""


def _parse_svg_length(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = _SVG_LENGTH.match(value)
    if not match:
        return None
    return float(match.group(1))


def read_svg_dimensions(file_path: str) -> Tuple[int, int]:
    """
    Read dimensions from the root <svg> element

    Uses width/height attributes, filling a missing one from the viewBox
    aspect ratio, and falls back to the viewBox size.
    """
    root = None
    with open(file_path, 'rb') as f:
        try:
            for _, element in ET.iterparse(f, events=('start',)):
                root = element
                break
        except ET.ParseError as e:
            raise HeaderParseError(f"invalid SVG: {e}")
    if root is None:
        raise HeaderParseError("empty document")

    if not root.tag.endswith('svg'):
        raise HeaderParseError(f"root element is {root.tag}, not svg")

    width = _parse_svg_length(root.get('width'))
    height = _parse_svg_length(root.get('height'))

    view_box = None
    if root.get('viewBox'):
        parts = re.split(r'[\s,]+', root.get('viewBox').strip())
        if len(parts) == 4:
            try:
                vb_width, vb_height = float(parts[2]), float(parts[3])
                if vb_width > 0 and vb_height > 0:
                    view_box = (vb_width, vb_height)
            except ValueError:
                view_box = None

    if width is None and height is None and view_box:
        width, height = view_box
    elif width is None and height is not None and view_box:
        width = height * view_box[0] / view_box[1]
    elif height is None and width is not None and view_box:
        height = width * view_box[1] / view_box[0]

    if not width or not height:
        raise HeaderParseError("SVG has no usable width/height")
    return max(1, round(width)), max(1, round(height))


def _open_header(file_path: str) -> Tuple[int, int, str]:
    # Image.open only reads the header; pixel data is never decoded here
    try:
        with Image.open(file_path) as img:
            return img.size[0], img.size[1], img.format or ''
    except Image.DecompressionBombError:
        pass

    # The pixel limit guards decoding, so lift it for this header read only
    with _PIXEL_LIMIT_LOCK:
        previous_limit = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            with Image.open(file_path) as img:
                return img.size[0], img.size[1], img.format or ''
        finally:
            Image.MAX_IMAGE_PIXELS = previous_limit


def read_header(file_path: str) -> Tuple[int, int, str]:
    """
    Read (width, height, type) from an image header

    Raises:
        HeaderParseError, OSError: the header is corrupt, truncated or unsupported
    """
    if Path(file_path).suffix.lower() == '.svg':
        width, height = read_svg_dimensions(file_path)
        return width, height, SVG_TYPE_TAG

    width, height, image_format = _open_header(file_path)

    if width <= 0 or height <= 0:
        raise HeaderParseError(f"invalid dimensions {width}x{height}")
    type_tag = PILLOW_FORMAT_TAGS.get(image_format.upper(), image_format.lower())
    if not type_tag:
        raise HeaderParseError("unknown image format")
    return width, height, type_tag


class MetadataExtractor:
    """
    Extracts ImageRecord / SizeOnlyRecord from single files
    """

    def __init__(self, extensions: Optional[Iterable[str]] = None,
                 sink: Optional[DiagnosticSink] = None):
        """
        Initialize extractor

        Args:
            extensions: Image extension allow-list ('.png' form), defaults to IMAGE_EXTENSIONS
            sink: Diagnostic sink, defaults to the logging side channel
        """
        self.extensions = {ext.lower() for ext in (extensions or IMAGE_EXTENSIONS)}
        self.sink = sink or LoggingDiagnosticSink()

    def is_image_path(self, file_path: str) -> bool:
        """Check if a file is an image based on extension"""
        return os.path.splitext(file_path)[1].lower() in self.extensions

    async def extract(self, file_path: str) -> Optional[ScanRecord]:
        """
        Extract metadata for one file

        Args:
            file_path: Path of the file

        Returns:
            ImageRecord, SizeOnlyRecord, or None for non-images and unreadable entries
        """
        try:
            st = await asyncio.to_thread(os.stat, file_path)
        except OSError as e:
            self.sink.record(DiagnosticEvent(
                kind='stat_failed', path=file_path, message=str(e), level='ERROR'
            ))
            return None

        if not stat.S_ISREG(st.st_mode):
            return None

        if not self.is_image_path(file_path):
            return None

        try:
            width, height, type_tag = await asyncio.to_thread(read_header, file_path)
        except Exception as e:
            # Expected for truncated or unsupported files: report size only
            self.sink.record(DiagnosticEvent(
                kind='header_unreadable', path=file_path, message=str(e), level='DEBUG'
            ))
            return SizeOnlyRecord(path=file_path, size=st.st_size)

        return ImageRecord(
            path=file_path,
            width=width,
            height=height,
            type=type_tag,
            size=st.st_size,
        )
