#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
imageprobe MCP Server Module
Provides Model Context Protocol support, so LLM hosts can invoke imageprobe tools
"""

from .server import MCPServer, run_server

__all__ = ['MCPServer', 'run_server']
