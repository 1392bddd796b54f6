#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test report formatting
"""

import os
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from imageprobe.browser.console_capture import ConsoleLogEntry
from imageprobe.core.models import ImageRecord, SizeOnlyRecord
from imageprobe.core.report import (
    format_bytes,
    format_console_logs,
    format_image_info,
    serialize,
    serialize_console_logs,
    summarize,
)

BASE = os.path.join(os.sep, "photos")


class TestFormatBytes:
    """Test human-readable sizes"""

    @pytest.mark.parametrize("num_bytes, expected", [
        (0, "0 Bytes"),
        (1, "1 Bytes"),
        (1023, "1023 Bytes"),
        (1024, "1 KB"),
        (1500, "1.46 KB"),
        (1536, "1.5 KB"),
        (1024 ** 2, "1 MB"),
        (5 * 1024 ** 3 + 1024 ** 3 // 4, "5.25 GB"),
        (1024 ** 4, "1 TB"),
        (1024 ** 5, "1024 TB"),
    ])
    def test_format_bytes(self, num_bytes, expected):
        assert format_bytes(num_bytes) == expected


class TestImageSummary:
    """Test summary and serialization of scan records"""

    def setup_method(self):
        self.full = ImageRecord(
            path=os.path.join(BASE, "cats", "tabby.png"),
            width=640, height=480, type="png", size=2048,
        )
        self.degraded = SizeOnlyRecord(path=os.path.join(BASE, "broken.jpg"), size=1536)

    def test_format_full_record(self):
        line = format_image_info(self.full, BASE)
        assert line == f"{os.path.join('cats', 'tabby.png')} - 640x480 - 2 KB - png"

    def test_format_size_only_record(self):
        line = format_image_info(self.degraded)
        assert line == f"{self.degraded.path} - Unknown dimensions - 1.5 KB"

    def test_summarize(self):
        text = summarize([self.full, self.degraded], BASE, recursive=True)
        lines = text.split("\n")

        assert lines[0] == f"Found 2 images in {BASE} (including subdirectories)"
        assert lines[1] == "Total size: 3.5 KB"
        assert lines[2] == ""
        assert lines[3] == "Image details:"
        assert lines[4].endswith("640x480 - 2 KB - png")
        assert lines[5] == "broken.jpg - Unknown dimensions - 1.5 KB"

    def test_summarize_shallow_header(self):
        text = summarize([self.full], BASE, recursive=False)
        assert text.split("\n")[0] == f"Found 1 images in {BASE}"

    def test_serialize_with_metadata(self):
        data = serialize([self.full, self.degraded], with_metadata=True)
        assert data[0] == {
            "path": self.full.path, "width": 640, "height": 480, "type": "png", "size": 2048,
        }
        assert data[1] == {"path": self.degraded.path, "size": 1536}

    def test_serialize_paths_only(self):
        assert serialize([self.full, self.degraded], with_metadata=False) == [
            self.full.path, self.degraded.path,
        ]


class TestConsoleLogFormatting:
    """Test console log output"""

    def test_format_and_serialize(self):
        ts = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
        logs = [
            ConsoleLogEntry(type="log", text="hello", timestamp=ts),
            ConsoleLogEntry(type="error", text="boom", timestamp=ts),
        ]

        assert format_console_logs(logs) == (
            "[2024-01-02T03:04:05.678Z] LOG: hello\n"
            "[2024-01-02T03:04:05.678Z] ERROR: boom"
        )
        assert serialize_console_logs(logs)[1] == {
            "type": "error", "text": "boom", "timestamp": "2024-01-02T03:04:05.678Z",
        }


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
