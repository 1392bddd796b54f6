# Browser Capture Module

from .console_capture import ConsoleLogEntry, ConsoleLogCapturer
from .local_server import LocalStaticServer, create_app

__all__ = [
    'ConsoleLogEntry',
    'ConsoleLogCapturer',
    'LocalStaticServer',
    'create_app'
]
