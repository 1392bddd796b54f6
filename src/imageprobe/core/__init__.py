# Core Scanning Module

from .models import ImageRecord, SizeOnlyRecord, ScanRecord
from .diagnostics import (
    DiagnosticEvent,
    DiagnosticSink,
    LoggingDiagnosticSink,
    CollectingDiagnosticSink
)
from .errors import ImageProbeError, ScanError, ToolArgumentError, BrowserCaptureError
from .extractor import MetadataExtractor
from .walker import DirectoryWalker
from .report import format_bytes, format_image_info, summarize, serialize

__all__ = [
    'ImageRecord',
    'SizeOnlyRecord',
    'ScanRecord',
    'DiagnosticEvent',
    'DiagnosticSink',
    'LoggingDiagnosticSink',
    'CollectingDiagnosticSink',
    'ImageProbeError',
    'ScanError',
    'ToolArgumentError',
    'BrowserCaptureError',
    'MetadataExtractor',
    'DirectoryWalker',
    'format_bytes',
    'format_image_info',
    'summarize',
    'serialize'
]
