#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Constants definition module
Defines various constants used in the imageprobe system
"""

from typing import Dict, Set, Tuple

# ==================== Image Scanning ====================

# Extensions treated as images (matched case-insensitively)
IMAGE_EXTENSIONS: Set[str] = {
    '.jpg', '.jpeg', '.png', '.gif', '.bmp',
    '.webp', '.svg', '.tiff', '.ico',
}

# Pillow format name -> short type tag
PILLOW_FORMAT_TAGS: Dict[str, str] = {
    'JPEG': 'jpg',
    'MPO': 'jpg',   # multi-picture JPEG from cameras
    'PNG': 'png',
    'GIF': 'gif',
    'BMP': 'bmp',
    'DIB': 'bmp',
    'WEBP': 'webp',
    'TIFF': 'tiff',
    'ICO': 'ico',
}

SVG_TYPE_TAG = 'svg'

# ==================== Size Formatting ====================

BYTE_UNITS: Tuple[str, ...] = ('Bytes', 'KB', 'MB', 'GB', 'TB')
BYTE_UNIT_BASE = 1024

# ==================== Browser Capture ====================

DEFAULT_CAPTURE_URL = 'http://localhost:3000'
DEFAULT_WAIT_TIME_MS = 10000
PAGE_LOAD_TIMEOUT_SECONDS = 30

# Chrome log level -> console message type
CHROME_LEVEL_TYPES: Dict[str, str] = {
    'SEVERE': 'error',
    'WARNING': 'warning',
    'INFO': 'log',
    'DEBUG': 'debug',
}

# ==================== Local Static Server ====================

DEFAULT_SERVER_HOST = '127.0.0.1'
DEFAULT_SERVER_PORT = 3000

CONTENT_TYPES: Dict[str, str] = {
    '.html': 'text/html',
    '.js': 'text/javascript',
    '.css': 'text/css',
    '.json': 'application/json',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif': 'image/gif',
}
DEFAULT_CONTENT_TYPE = 'text/plain'

# ==================== MCP ====================

SERVER_NAME = 'image-size-and-console-logs'
RESOURCE_SCHEME = 'imageprobe'

# ==================== Time Configuration ====================

DATETIME_FORMAT = '%Y-%m-%d %H:%M:%S'
