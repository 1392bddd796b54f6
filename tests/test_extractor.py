#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test image metadata extractor
"""

import asyncio
import logging
import os
import shutil
import sys
import struct
import tempfile
import zlib
from pathlib import Path

import pytest
from PIL import Image

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from imageprobe.core.diagnostics import CollectingDiagnosticSink
from imageprobe.core.extractor import MetadataExtractor, read_svg_dimensions, HeaderParseError
from imageprobe.core.models import ImageRecord, SizeOnlyRecord

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def _write_png_header(path: Path, width: int, height: int):
    """Write a PNG holding only IHDR, an empty IDAT and IEND"""
    def chunk(kind: bytes, data: bytes) -> bytes:
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data))

    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    path.write_bytes(b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IDAT", b"") + chunk(b"IEND", b""))
    return path


def _make_image(path: Path, size=(10, 20), fmt=None):
    Image.new('RGB', size, color=(200, 30, 30)).save(path, format=fmt)
    return path


class TestMetadataExtractor:
    """Test MetadataExtractor on real files"""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp(prefix="imageprobe_extract_"))
        self.sink = CollectingDiagnosticSink()
        self.extractor = MetadataExtractor(sink=self.sink)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _extract(self, path):
        return asyncio.run(self.extractor.extract(str(path)))

    def test_png_header(self):
        """PNG yields full record with dimensions and size"""
        path = _make_image(self.temp_dir / "a.png", (10, 20))
        record = self._extract(path)

        assert isinstance(record, ImageRecord)
        assert record.width == 10
        assert record.height == 20
        assert record.type == "png"
        assert record.size == os.path.getsize(path)
        assert record.path == str(path)

    def test_jpeg_type_tag(self):
        """JPEG format maps to the short 'jpg' tag"""
        path = _make_image(self.temp_dir / "photo.jpeg", (32, 16), fmt="JPEG")
        record = self._extract(path)

        assert isinstance(record, ImageRecord)
        assert (record.width, record.height, record.type) == (32, 16, "jpg")

    def test_extension_case_insensitive(self):
        """Upper-case extensions are still images"""
        path = _make_image(self.temp_dir / "SHOUT.PNG", (4, 4), fmt="PNG")
        assert isinstance(self._extract(path), ImageRecord)

    def test_non_image_extension_skipped(self):
        """Files outside the allow-list yield no record, even with image content"""
        text_file = self.temp_dir / "notes.txt"
        text_file.write_text("hello")
        disguised = _make_image(self.temp_dir / "image.dat", (5, 5), fmt="PNG")

        assert self._extract(text_file) is None
        assert self._extract(disguised) is None
        assert self.sink.events == []

    def test_directory_named_like_image(self):
        """Directories are not regular files"""
        folder = self.temp_dir / "folder.png"
        folder.mkdir()
        assert self._extract(folder) is None

    def test_corrupt_image_degrades_to_size_only(self):
        """Unreadable header gives size-only record, never an exception"""
        garbage = self.temp_dir / "broken.jpg"
        garbage.write_bytes(b"this is definitely not a jpeg")
        truncated = self.temp_dir / "truncated.png"
        truncated.write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")

        for path in (garbage, truncated):
            record = self._extract(path)
            assert isinstance(record, SizeOnlyRecord)
            assert record.size == os.path.getsize(path)
            assert "width" not in record.to_dict()
            assert "type" not in record.to_dict()

        assert self.sink.kinds() == ["header_unreadable", "header_unreadable"]

    def test_empty_image_file(self):
        """Zero-byte image file is size-only with size 0"""
        empty = self.temp_dir / "empty.gif"
        empty.write_bytes(b"")
        record = self._extract(empty)
        assert isinstance(record, SizeOnlyRecord)
        assert record.size == 0

    def test_missing_file_recorded(self):
        """stat failures are reported to the sink and skipped"""
        record = self._extract(self.temp_dir / "missing.png")
        assert record is None
        assert self.sink.kinds() == ["stat_failed"]

    @pytest.mark.skipif(not hasattr(os, "symlink") or sys.platform.startswith("win"),
                        reason="symlinks not available")
    def test_dangling_symlink_recorded(self):
        """Dangling links are reported, not raised"""
        link = self.temp_dir / "gone.png"
        os.symlink(self.temp_dir / "nowhere.png", link)
        assert self._extract(link) is None
        assert self.sink.kinds() == ["stat_failed"]

    def test_custom_extension_list(self):
        """Only configured extensions are considered"""
        extractor = MetadataExtractor(extensions={'.png'}, sink=self.sink)
        jpg = _make_image(self.temp_dir / "x.jpg", (3, 3), fmt="JPEG")
        png = _make_image(self.temp_dir / "x.png", (3, 3))

        assert asyncio.run(extractor.extract(str(jpg))) is None
        assert isinstance(asyncio.run(extractor.extract(str(png))), ImageRecord)

    def test_oversized_image_keeps_dimensions(self):
        """Images past Pillow's pixel limit still report header dimensions"""
        path = _write_png_header(self.temp_dir / "huge.png", 20000, 20000)
        limit = Image.MAX_IMAGE_PIXELS
        record = self._extract(path)

        assert isinstance(record, ImageRecord)
        assert (record.width, record.height, record.type) == (20000, 20000, "png")
        assert record.size == os.path.getsize(path)
        assert self.sink.events == []
        assert Image.MAX_IMAGE_PIXELS == limit


class TestSvgDimensions:
    """Test SVG header reading"""

    def setup_method(self):
        self.temp_dir = Path(tempfile.mkdtemp(prefix="imageprobe_svg_"))

    def teardown_method(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, name, content):
        path = self.temp_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    def test_width_height_attributes(self):
        path = self._write("a.svg", '<svg xmlns="http://www.w3.org/2000/svg" width="120px" height="80"></svg>')
        assert read_svg_dimensions(str(path)) == (120, 80)

    def test_viewbox_fallback(self):
        path = self._write("b.svg", '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 300 150"></svg>')
        assert read_svg_dimensions(str(path)) == (300, 150)

    def test_one_dimension_from_viewbox_ratio(self):
        path = self._write("c.svg", '<svg xmlns="http://www.w3.org/2000/svg" width="100" viewBox="0 0 200 50"/>')
        assert read_svg_dimensions(str(path)) == (100, 25)

    def test_unusable_svg(self):
        path = self._write("d.svg", '<svg xmlns="http://www.w3.org/2000/svg" width="50%"></svg>')
        with pytest.raises(HeaderParseError):
            read_svg_dimensions(str(path))

    def test_svg_through_extractor(self):
        """SVG records carry the 'svg' type tag; broken SVG degrades"""
        good = self._write("ok.svg", '<?xml version="1.0"?><svg xmlns="http://www.w3.org/2000/svg" width="16" height="16"/>')
        bad = self._write("bad.svg", 'not xml at all <<<')
        extractor = MetadataExtractor(sink=CollectingDiagnosticSink())

        good_record = asyncio.run(extractor.extract(str(good)))
        bad_record = asyncio.run(extractor.extract(str(bad)))

        assert isinstance(good_record, ImageRecord)
        assert (good_record.width, good_record.height, good_record.type) == (16, 16, "svg")
        assert isinstance(bad_record, SizeOnlyRecord)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
