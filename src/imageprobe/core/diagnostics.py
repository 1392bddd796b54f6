#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Diagnostic sinks

The walker and extractor report operational problems (unreadable files,
unlistable directories, corrupt headers) to a sink instead of writing to a
global stream, so tests can capture them silently.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class DiagnosticEvent:
    """One operational event raised during a scan"""
    kind: str       # 'stat_failed', 'list_failed', 'header_unreadable'
    path: str
    message: str
    level: str = "ERROR"
    timestamp: datetime = field(default_factory=datetime.now)


class DiagnosticSink(Protocol):
    """Anything with a record(event) method"""

    def record(self, event: DiagnosticEvent) -> None:
        ...


class LoggingDiagnosticSink:
    """Forwards events to the standard logging side channel"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('imageprobe.scan')

    def record(self, event: DiagnosticEvent) -> None:
        level = logging.getLevelName(event.level)
        if not isinstance(level, int):
            level = logging.ERROR
        self.logger.log(level, f"[{event.kind}] {event.path}: {event.message}")


class CollectingDiagnosticSink:
    """Keeps events in memory"""

    def __init__(self):
        self.events: List[DiagnosticEvent] = []

    def record(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]
