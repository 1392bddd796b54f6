#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Local static file server

Serves a directory over HTTP for the duration of a console-log capture.
HTML pages and directory listings carry a small script that writes to the
browser console, so a capture always has something to report.
"""

import asyncio
import html
import json
import logging
import os
import posixpath
import socket
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from ..utils.constants import (
    CONTENT_TYPES,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)

logger = logging.getLogger('imageprobe.local_server')


def _listing_page(title: str, links: str, loaded_message: str, file_count: int, label: str) -> str:
    return f"""<html>
  <head><title>{html.escape(title)}</title></head>
  <body>
    <h1>{html.escape(title)}</h1>
    <ul>
      {links}
    </ul>
    <script>
      console.log({json.dumps(loaded_message)}, new Date().toISOString());
      console.log({json.dumps(f"{label} listing rendered with {file_count} files")});
    </script>
  </body>
</html>
"""


def render_root_listing(directory: Path) -> str:
    """Directory listing for '/' when there is no index.html"""
    files = sorted(os.listdir(directory))
    links = ''.join(
        f'<li><a href="/{html.escape(name)}">{html.escape(name)}</a></li>' for name in files
    )
    return _listing_page(
        'Directory Listing', links,
        'Browser console log: Page loaded at', len(files), 'Directory',
    )


def render_subdirectory_listing(directory: Path, pathname: str) -> str:
    """Directory listing for a nested path, with a parent link"""
    files = sorted(os.listdir(directory))
    parent = '' if pathname == '/' else pathname.rstrip('/')
    links = f'<li><a href="{html.escape(parent)}/..">..</a></li>' + ''.join(
        f'<li><a href="{html.escape(posixpath.join(pathname, name))}">{html.escape(name)}</a></li>'
        for name in files
    )
    return _listing_page(
        f'Directory Listing - {pathname}', links,
        'Browser console log: Directory page loaded at', len(files), 'Subdirectory',
    )


def inject_console_script(content: str, pathname: str, content_type: str, file_size: int) -> str:
    """Add a console logging script before </body>, or at the end of the page"""
    script = f"""
<script>
  console.log({json.dumps(f'Browser console log: Page "{pathname}" loaded at')}, new Date().toISOString());
  console.log({json.dumps(f'Content type: {content_type}')});
  console.log({json.dumps(f'File size: {file_size} bytes')});
</script>
"""
    if '</body>' in content:
        return content.replace('</body>', script + '</body>', 1)
    return content + script


def content_type_for(path: Path) -> str:
    return CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)


def create_app(directory: str) -> FastAPI:
    """
    Build the static file application for one directory

    Args:
        directory: Directory to serve

    Returns:
        FastAPI application
    """
    root = Path(directory).resolve()
    app = FastAPI(title="imageprobe static server", docs_url=None, redoc_url=None, openapi_url=None)

    @app.get("/{request_path:path}")
    def serve(request_path: str):
        pathname = '/' + request_path

        if pathname == '/':
            if (root / 'index.html').is_file():
                pathname = '/index.html'
            else:
                try:
                    return HTMLResponse(render_root_listing(root))
                except OSError as e:
                    return PlainTextResponse(f"500 Internal Server Error: {e}", status_code=500)

        target = (root / pathname.lstrip('/')).resolve()
        if target != root and root not in target.parents:
            return PlainTextResponse("404 Not Found", status_code=404)

        try:
            stats = target.stat()
        except OSError:
            return PlainTextResponse("404 Not Found", status_code=404)

        if target.is_dir():
            try:
                return HTMLResponse(render_subdirectory_listing(target, pathname))
            except OSError as e:
                return PlainTextResponse(f"500 Internal Server Error: {e}", status_code=500)

        try:
            data = target.read_bytes()
        except OSError:
            return PlainTextResponse("500 Internal Server Error", status_code=500)

        content_type = content_type_for(target)
        if content_type == 'text/html':
            page = inject_console_script(
                data.decode('utf-8', errors='replace'), pathname, content_type, stats.st_size
            )
            data = page.encode('utf-8')
        return Response(content=data, media_type=content_type)

    return app


class LocalStaticServer:
    """
    Runs the static file application with uvicorn inside the current event loop

    Usage:
        async with LocalStaticServer(directory, port) as server:
            ... visit server.url ...
    """

    def __init__(self, directory: str, port: int = DEFAULT_SERVER_PORT,
                 host: str = DEFAULT_SERVER_HOST, startup_timeout: float = 10.0):
        self.directory = directory
        self.port = port
        self.host = host
        self.startup_timeout = startup_timeout
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None
        self._socket: Optional[socket.socket] = None

    @property
    def url(self) -> str:
        host = 'localhost' if self.host in ('127.0.0.1', '0.0.0.0', 'localhost') else self.host
        return f"http://{host}:{self.port}/"

    async def start(self):
        """Bind the port and start serving; bind failures raise OSError here"""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError:
            sock.close()
            raise
        self._socket = sock
        self.port = sock.getsockname()[1]

        config = uvicorn.Config(
            create_app(self.directory),
            log_config=None,
            log_level="warning",
            access_log=False,
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[sock]))

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.startup_timeout
        while not self._server.started:
            if self._task.done():
                await self.stop()
                raise RuntimeError(f"Local server failed to start on port {self.port}")
            if loop.time() > deadline:
                await self.stop()
                raise TimeoutError(f"Local server did not start within {self.startup_timeout}s")
            await asyncio.sleep(0.05)

        logger.info(f"Local server running at {self.url}")

    async def stop(self):
        """Shut the server down and release the port"""
        if self._server is not None:
            self._server.should_exit = True
        if self._task is not None:
            try:
                await self._task
            except Exception as e:
                logger.warning(f"Local server stopped with error: {e}")
            self._task = None
        if self._socket is not None:
            self._socket.close()
            self._socket = None
        if self._server is not None:
            self._server = None
            logger.info("Local server has been shut down")

    async def __aenter__(self) -> 'LocalStaticServer':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()
