#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
imageprobe MCP Server Main Module
Implemented using official MCP SDK, exposing tools and resources to LLM hosts
Supporting image directory scanning and browser console log capture
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

# Official MCP SDK
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import (
    Tool,
    Resource,
    TextContent,
    ResourceTemplate,
)

from .. import __version__
from ..browser.console_capture import ConsoleLogCapturer
from ..browser.local_server import LocalStaticServer
from ..core.diagnostics import DiagnosticSink, LoggingDiagnosticSink
from ..core.errors import ToolArgumentError
from ..core.extractor import MetadataExtractor
from ..core.report import (
    format_console_logs,
    scan_location,
    serialize,
    serialize_console_logs,
    summarize,
)
from ..core.walker import DirectoryWalker
from ..utils.config import Config
from ..utils.constants import RESOURCE_SCHEME, SERVER_NAME
from ..utils.helpers import (
    coerce_bool,
    coerce_int,
    coerce_str,
    resolve_directory,
    setup_logging,
)


SERVER_INSTRUCTIONS = """Image scanning and browser console tools.

- list-images: list image files in a directory (jpg, jpeg, png, gif, bmp, webp,
  svg, tiff, ico), optionally with width/height/type/size or as a readable summary.
  Always pass ABSOLUTE directory paths.
- capture-console-logs: open a URL in a headless browser and return what the page
  printed to the console.
- run-local-server: serve a directory on localhost, open it in a headless browser
  and return the captured console logs.
"""

OUTPUT_FORMATS = ('json', 'summary')


class MCPServer:
    """
    imageprobe MCP Server

    Using official MCP SDK to expose image scanning and console capture to hosts.
    Every tool call returns a single text payload; failures are reported as text,
    never raised into the transport.
    """

    def __init__(self, config: Optional[Config] = None,
                 sink: Optional[DiagnosticSink] = None,
                 capturer: Optional[ConsoleLogCapturer] = None):
        """
        Initialize MCP Server

        Args:
            config: imageprobe configuration object, uses default configuration when None
            sink: Diagnostic sink for scan problems, logs them when None
            capturer: Console log capturer, headless Chrome when None
        """
        self.config = config or Config()
        self.logger = logging.getLogger('imageprobe.mcp_server')
        self.sink = sink or LoggingDiagnosticSink()
        self.capturer = capturer or ConsoleLogCapturer(self.config.browser)

        # Create MCP Server instance
        self.server = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

        # Register handlers
        self._register_handlers()

        self.logger.info("imageprobe MCP Server initialization completed")

    def _register_handlers(self):
        """Register all MCP handlers"""

        @self.server.list_tools()
        async def list_tools() -> List[Tool]:
            """Return available tools list"""
            return self._get_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
            """Handle tool calls"""
            return await self._handle_tool_call(name, arguments)

        @self.server.list_resources()
        async def list_resources() -> List[Resource]:
            """Return available resources list"""
            return self._get_resources()

        @self.server.read_resource()
        async def read_resource(uri) -> List[ReadResourceContents]:
            """Read resource content"""
            content = await self._handle_resource_read(uri)
            return [ReadResourceContents(content=content, mime_type="application/json")]

        @self.server.list_resource_templates()
        async def list_resource_templates() -> List[ResourceTemplate]:
            """Return resource templates list"""
            return [
                ResourceTemplate(
                    uriTemplate=f"{RESOURCE_SCHEME}://images{{?directory,recursive}}",
                    name="Images in Directory",
                    description="Image files in a directory, with metadata (path, width, height, type, size)",
                    mimeType="application/json"
                ),
                ResourceTemplate(
                    uriTemplate=f"{RESOURCE_SCHEME}://console-logs{{?url,waitTimeMs}}",
                    name="Console Logs",
                    description="Console logs captured from a website",
                    mimeType="application/json"
                ),
            ]

    def _get_tools(self) -> List[Tool]:
        """Get tools list"""
        return [
            Tool(
                name="list-images",
                description="List image files in the specified directory (with optional metadata)",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "directory": {
                            "type": "string",
                            "description": "Absolute directory path. MAKE SURE TO USE ABSOLUTE PATHS!",
                            "default": self.config.scan.default_directory
                        },
                        "recursive": {
                            "type": "boolean",
                            "description": "Whether to scan subdirectories recursively",
                            "default": self.config.scan.default_recursive
                        },
                        "withMetadata": {
                            "type": "boolean",
                            "description": "Return image metadata (width, height, type, size) if true, else just file paths",
                            "default": False
                        },
                        "format": {
                            "type": "string",
                            "enum": list(OUTPUT_FORMATS),
                            "description": "json: structured list; summary: human-readable report with total size",
                            "default": "json"
                        }
                    }
                }
            ),
            Tool(
                name="capture-console-logs",
                description="Capture browser console logs from a specified website",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "url": {
                            "type": "string",
                            "description": "URL to visit and capture console logs from",
                            "default": self.config.browser.default_url
                        },
                        "waitTimeMs": {
                            "type": "number",
                            "description": "Time to wait in milliseconds after page load before returning logs",
                            "default": self.config.browser.default_wait_time_ms
                        },
                        "formatOutput": {
                            "type": "boolean",
                            "description": "Format the output as human-readable text if true, else return JSON",
                            "default": True
                        }
                    }
                }
            ),
            Tool(
                name="run-local-server",
                description="Run a local static file server and capture console logs from browsers visiting it",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "port": {
                            "type": "number",
                            "description": "Port to run the server on",
                            "default": self.config.local_server.default_port
                        },
                        "directory": {
                            "type": "string",
                            "description": "Absolute directory path. MAKE SURE TO USE ABSOLUTE PATHS!",
                            "default": self.config.scan.default_directory
                        },
                        "waitTimeMs": {
                            "type": "number",
                            "description": "Time to wait in milliseconds after page load before returning logs",
                            "default": self.config.browser.default_wait_time_ms
                        }
                    }
                }
            ),
        ]

    def _get_resources(self) -> List[Resource]:
        """Get resource list"""
        return [
            Resource(
                uri=f"{RESOURCE_SCHEME}://images",
                name="Images",
                description="Image files in the current directory, with metadata (path, width, height, type, size)",
                mimeType="application/json"
            ),
            Resource(
                uri=f"{RESOURCE_SCHEME}://console-logs",
                name="Console Logs",
                description="Console logs captured from the default URL",
                mimeType="application/json"
            ),
        ]

    async def _handle_tool_call(self, name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
        """Handle tool calls"""
        try:
            self.logger.debug(f"Tool call: {name}, args: {arguments}")

            handlers = {
                "list-images": self._tool_list_images,
                "capture-console-logs": self._tool_capture_console_logs,
                "run-local-server": self._tool_run_local_server,
            }

            handler = handlers.get(name)
            if handler:
                text = await handler(arguments or {})
            else:
                text = f"Unknown tool: {name}"

            return [TextContent(type="text", text=text)]

        except Exception as e:
            self.logger.error(f"Tool call failed: {name}, error: {e}", exc_info=True)
            return [TextContent(type="text", text=f"Error: {e}")]

    # ==================== Image Tools ====================

    def _create_walker(self) -> DirectoryWalker:
        extractor = MetadataExtractor(self.config.image_extensions, self.sink)
        return DirectoryWalker(extractor, self.sink)

    async def scan(self, directory: str, recursive: bool):
        """Scan an absolute directory path with the configured extensions"""
        return await self._create_walker().walk(directory, recursive)

    async def _tool_list_images(self, args: Dict[str, Any]) -> str:
        """List image files, as JSON or as a summary"""
        try:
            directory = resolve_directory(
                coerce_str('directory', args.get('directory'), self.config.scan.default_directory)
            )
            recursive = coerce_bool('recursive', args.get('recursive'), self.config.scan.default_recursive)
            with_metadata = coerce_bool('withMetadata', args.get('withMetadata'), False)
            output_format = coerce_str('format', args.get('format'), 'json')
            if output_format not in OUTPUT_FORMATS:
                raise ToolArgumentError(f"'format' must be one of {', '.join(OUTPUT_FORMATS)}, got {output_format!r}")
        except ToolArgumentError as e:
            return f"Invalid arguments: {e}"

        try:
            records = await self.scan(directory, recursive)

            if not records:
                return f"No images found in {scan_location(directory, recursive)}."

            if output_format == 'summary':
                return summarize(records, directory, recursive)

            return json.dumps(serialize(records, with_metadata), indent=2, ensure_ascii=False)

        except Exception as e:
            self.logger.error(f"Error in list-images: {e}", exc_info=True)
            return f"Error scanning directory: {e}"

    # ==================== Browser Tools ====================

    async def _tool_capture_console_logs(self, args: Dict[str, Any]) -> str:
        """Capture console logs from a URL"""
        try:
            url = coerce_str('url', args.get('url'), self.config.browser.default_url)
            wait_time_ms = coerce_int('waitTimeMs', args.get('waitTimeMs'), self.config.browser.default_wait_time_ms)
            format_output = coerce_bool('formatOutput', args.get('formatOutput'), True)
        except ToolArgumentError as e:
            return f"Invalid arguments: {e}"

        try:
            logs = await self.capturer.capture(url, wait_time_ms)

            if not logs:
                return f"No console logs captured from {url}."

            if format_output:
                return f"Captured {len(logs)} console logs from {url}:\n\n{format_console_logs(logs)}"

            return json.dumps(serialize_console_logs(logs), indent=2, ensure_ascii=False)

        except Exception as e:
            self.logger.error(f"Error in capture-console-logs: {e}", exc_info=True)
            return f"Error capturing console logs: {e}"

    async def _tool_run_local_server(self, args: Dict[str, Any]) -> str:
        """Serve a directory locally and capture console logs from it"""
        try:
            port = coerce_int('port', args.get('port'), self.config.local_server.default_port)
            directory = resolve_directory(
                coerce_str('directory', args.get('directory'), self.config.scan.default_directory)
            )
            wait_time_ms = coerce_int('waitTimeMs', args.get('waitTimeMs'), self.config.browser.default_wait_time_ms)
        except ToolArgumentError as e:
            return f"Invalid arguments: {e}"

        if not Path(directory).is_dir():
            return f"Error running local server: {directory} is not a directory"

        logs = []
        error_msg = ''
        http_server = LocalStaticServer(
            directory,
            port=port,
            host=self.config.local_server.host,
            startup_timeout=self.config.local_server.startup_timeout_seconds,
        )

        try:
            async with http_server:
                try:
                    logs = await self.capturer.capture(http_server.url, wait_time_ms)
                except Exception as e:
                    self.logger.error(f"Error capturing console logs from local server: {e}", exc_info=True)
                    error_msg = str(e)
        except Exception as e:
            self.logger.error(f"Error in run-local-server: {e}", exc_info=True)
            return f"Error running local server on port {port}: {e}"

        if error_msg:
            return f"Error capturing console logs: {error_msg}\n\n(HTTP server was properly shut down)"

        return (
            f"Local server ran on port {http_server.port}, serving directory {directory}.\n\n"
            f"Captured {len(logs)} console logs:\n\n{format_console_logs(logs)}"
        )

    # ==================== Resources ====================

    async def _handle_resource_read(self, uri) -> str:
        """Handle resource reading"""
        try:
            # Convert AnyUrl to string if needed
            parts = urlsplit(str(uri))
            params = {key: values[-1] for key, values in parse_qs(parts.query).items()}

            if parts.scheme != RESOURCE_SCHEME:
                return json.dumps({"error": f"Unknown resource: {uri}"})

            if parts.netloc == "images":
                return await self._resource_images(params)
            elif parts.netloc == "console-logs":
                return await self._resource_console_logs(params)
            else:
                return json.dumps({"error": f"Unknown resource: {uri}"})

        except Exception as e:
            self.logger.error(f"Resource read failed: {uri}, error: {e}", exc_info=True)
            return json.dumps({"error": str(e)})

    async def _resource_images(self, params: Dict[str, str]) -> str:
        directory = resolve_directory(params.get('directory') or self.config.scan.default_directory)
        recursive = coerce_bool('recursive', params.get('recursive'), self.config.scan.default_recursive)
        records = await self.scan(directory, recursive)
        return json.dumps(serialize(records, with_metadata=True), indent=2, ensure_ascii=False)

    async def _resource_console_logs(self, params: Dict[str, str]) -> str:
        url = params.get('url') or self.config.browser.default_url
        wait_time_ms = coerce_int('waitTimeMs', params.get('waitTimeMs'), self.config.browser.default_wait_time_ms)
        logs = await self.capturer.capture(url, wait_time_ms)
        return json.dumps(serialize_console_logs(logs), indent=2, ensure_ascii=False)

    async def run(self):
        """Run MCP Server"""
        self.logger.info("Image Size and Console Logs MCP Server running on stdio")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options()
            )


async def run_server(config_path: Optional[str] = None, verbose: bool = False):
    """Start MCP Server"""
    config = Config(config_path)
    log_dir = config.get_log_dir() if config.logging.file_enabled else None
    setup_logging(verbose=verbose, log_dir=log_dir, level=config.logging.level)

    server = MCPServer(config)
    await server.run()


def main():
    """MCP server entry point"""
    parser = argparse.ArgumentParser(description="imageprobe MCP server (stdio)")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    try:
        asyncio.run(run_server(args.config, args.verbose))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logging.getLogger('imageprobe').critical(f"Fatal error in main(): {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
