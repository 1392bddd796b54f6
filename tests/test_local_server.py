#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test local static file server
"""

import asyncio
import shutil
import sys
import tempfile
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from imageprobe.browser.local_server import (
    LocalStaticServer,
    create_app,
    inject_console_script,
)


class TestStaticApp:
    """Test request handling of the static application"""

    def setup_method(self):
        self.root = Path(tempfile.mkdtemp(prefix="imageprobe_static_"))
        (self.root / "sub").mkdir()
        (self.root / "sub" / "inner.txt").write_text("inner")
        (self.root / "page.html").write_text("<html><body><p>Hi</p></body></html>")
        (self.root / "fragment.html").write_text("<p>no body tag</p>")
        (self.root / "app.js").write_text("console.log('x');")
        Image.new('RGB', (2, 2)).save(self.root / "pixel.png")
        self.client = TestClient(create_app(str(self.root)))

    def teardown_method(self):
        shutil.rmtree(self.root, ignore_errors=True)

    def test_root_listing_without_index(self):
        response = self.client.get("/")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert '<a href="/page.html">page.html</a>' in response.text
        assert "Directory listing rendered with" in response.text
        assert "console.log(" in response.text

    def test_root_serves_index(self):
        (self.root / "index.html").write_text("<html><body>Index</body></html>")
        response = self.client.get("/")
        assert response.status_code == 200
        assert "Index" in response.text
        assert 'Page \\"/index.html\\" loaded at' in response.text

    def test_html_injection_before_body_close(self):
        response = self.client.get("/page.html")
        body = response.text
        assert response.status_code == 200
        assert body.index("<script>") < body.index("</body>")
        assert "Content type: text/html" in body
        assert "File size: " in body

    def test_html_injection_appended_without_body(self):
        body = self.client.get("/fragment.html").text
        assert body.startswith("<p>no body tag</p>")
        assert body.rstrip().endswith("</script>")

    def test_subdirectory_listing(self):
        response = self.client.get("/sub")
        assert response.status_code == 200
        assert '<a href="/sub/..">..</a>' in response.text
        assert '<a href="/sub/inner.txt">inner.txt</a>' in response.text
        assert "Subdirectory listing rendered with 1 files" in response.text

    def test_content_types(self):
        assert self.client.get("/pixel.png").headers["content-type"] == "image/png"
        assert self.client.get("/app.js").headers["content-type"].startswith("text/javascript")
        assert self.client.get("/sub/inner.txt").headers["content-type"].startswith("text/plain")

    def test_missing_file(self):
        response = self.client.get("/nope.html")
        assert response.status_code == 404
        assert response.text == "404 Not Found"


def test_inject_console_script_only_once():
    page = "<body>a</body><body>b</body>"
    result = inject_console_script(page, "/x.html", "text/html", 10)
    assert result.count("<script>") == 1


def test_local_server_lifecycle():
    """Server binds an ephemeral port, serves, and shuts down"""
    root = Path(tempfile.mkdtemp(prefix="imageprobe_live_"))
    (root / "index.html").write_text("<html><body>live</body></html>")

    async def scenario():
        async with LocalStaticServer(str(root), port=0) as server:
            assert server.port != 0
            assert server.url == f"http://localhost:{server.port}/"
            async with httpx.AsyncClient() as client:
                response = await client.get(f"http://127.0.0.1:{server.port}/")
            return server, response

    try:
        server, response = asyncio.run(scenario())
        assert response.status_code == 200
        assert "live" in response.text
        assert server._server is None
        assert server._socket is None
    finally:
        shutil.rmtree(root, ignore_errors=True)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
