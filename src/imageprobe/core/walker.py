#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Directory walker

Enumerates a directory (optionally its whole subtree) and runs the metadata
extractor on every file. Subdirectories are visited depth-first with an
explicit stack of open listings; a subtree that cannot be listed is reported
to the diagnostic sink and skipped.
"""

import asyncio
import os
from typing import Iterator, List, Optional, Tuple

from .diagnostics import DiagnosticEvent, DiagnosticSink, LoggingDiagnosticSink
from .errors import ScanError
from .extractor import MetadataExtractor
from .models import ScanRecord

# (path, is_directory)
Entry = Tuple[str, bool]


def list_entries(directory: str) -> List[Entry]:
    """
    List immediate entries of a directory in listing order

    Symlinked directories are reported as non-directories so the walk never
    follows them.

    Raises:
        ScanError: the directory cannot be listed
    """
    entries = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError:
                    is_dir = False
                entries.append((entry.path, is_dir))
    except OSError as e:
        raise ScanError(directory, e.strerror or str(e))
    return entries


class DirectoryWalker:
    """
    Walks a directory tree and collects scan records
    """

    def __init__(self, extractor: Optional[MetadataExtractor] = None,
                 sink: Optional[DiagnosticSink] = None):
        """
        Initialize walker

        Args:
            extractor: Metadata extractor, created with the same sink when None
            sink: Diagnostic sink, defaults to the logging side channel
        """
        self.sink = sink or LoggingDiagnosticSink()
        self.extractor = extractor or MetadataExtractor(sink=self.sink)

    async def walk(self, directory: str, recursive: bool = False) -> List[ScanRecord]:
        """
        Scan a directory for images

        Args:
            directory: Directory to scan
            recursive: Whether to descend into subdirectories

        Returns:
            Records in depth-first listing order

        Raises:
            ScanError: the root directory cannot be listed
        """
        root_entries = await asyncio.to_thread(list_entries, directory)

        results: List[ScanRecord] = []
        stack: List[Iterator[Entry]] = [iter(root_entries)]

        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue

            path, is_dir = entry
            if is_dir:
                if not recursive:
                    continue
                try:
                    children = await asyncio.to_thread(list_entries, path)
                except ScanError as e:
                    self.sink.record(DiagnosticEvent(
                        kind='list_failed', path=path, message=e.reason, level='ERROR'
                    ))
                    continue
                # Finish this subtree before the next sibling
                stack.append(iter(children))
                continue

            record = await self.extractor.extract(path)
            if record is not None:
                results.append(record)

        return results
