#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
imageprobe - Image scanning and console capture for LLM hosts
Exposes directory image-metadata scanning and headless-browser console log
capture as MCP tools and resources

Version: 1.0.0
Author: imageprobe Development Team
"""

__version__ = "1.0.0"
__author__ = "imageprobe Development Team"
__description__ = "MCP server for image metadata scanning and browser console log capture"
