#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception hierarchy for imageprobe
"""


class ImageProbeError(Exception):
    """Base class for imageprobe errors"""


class ScanError(ImageProbeError):
    """The scan root could not be listed (missing, not a directory, no access)"""

    def __init__(self, directory: str, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Cannot scan {directory}: {reason}")


class ToolArgumentError(ImageProbeError, ValueError):
    """A tool was called with arguments of the wrong type or range"""


class BrowserCaptureError(ImageProbeError):
    """The headless browser could not be started"""
