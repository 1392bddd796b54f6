#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management module
Handles configuration file loading and management for the imageprobe system
"""

import copy
import logging
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, fields, asdict

from .constants import (
    IMAGE_EXTENSIONS,
    DEFAULT_CAPTURE_URL,
    DEFAULT_WAIT_TIME_MS,
    PAGE_LOAD_TIMEOUT_SECONDS,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
)

CONFIG_ENV_VAR = 'IMAGEPROBE_CONFIG'

logger = logging.getLogger('imageprobe.config')


@dataclass
class ScanConfig:
    """Image scanning configuration"""
    image_extensions: list = field(default_factory=lambda: sorted(IMAGE_EXTENSIONS))
    default_directory: str = "./"
    default_recursive: bool = False


@dataclass
class BrowserConfig:
    """Headless browser configuration"""
    headless: bool = True
    page_load_timeout_seconds: int = PAGE_LOAD_TIMEOUT_SECONDS
    default_url: str = DEFAULT_CAPTURE_URL
    default_wait_time_ms: int = DEFAULT_WAIT_TIME_MS
    window_size: str = "1920,1080"
    chrome_arguments: list = field(default_factory=lambda: ['--no-sandbox', '--disable-dev-shm-usage'])


@dataclass
class LocalServerConfig:
    """Local static file server configuration"""
    host: str = DEFAULT_SERVER_HOST
    default_port: int = DEFAULT_SERVER_PORT
    startup_timeout_seconds: float = 10.0


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    file_enabled: bool = False
    log_dir: str = "~/.imageprobe/logs"


DEFAULT_CONFIG: Dict[str, Any] = {
    'scan': asdict(ScanConfig()),
    'browser': asdict(BrowserConfig()),
    'local_server': asdict(LocalServerConfig()),
    'logging': asdict(LoggingConfig()),
}


class Config:
    """Main configuration class"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration

        Args:
            config_path: Configuration file path; falls back to $IMAGEPROBE_CONFIG,
                then ~/.imageprobe/config.yaml
        """
        self.config_path = self._resolve_config_path(config_path)
        self._load_config()

    def _resolve_config_path(self, config_path: Optional[str]) -> Path:
        """Resolve configuration file path"""
        if config_path:
            return Path(config_path).expanduser()
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path).expanduser()
        return Path.home() / '.imageprobe' / 'config.yaml'

    def _load_config(self):
        """Load configuration file, merged over the defaults"""
        default_config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}
                self._config_data = self._deep_merge(default_config, user_config)
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load configuration file {self.config_path}: {e}")
                self._config_data = default_config
        else:
            self._config_data = default_config

        self.scan = self._build_section(ScanConfig, 'scan')
        self.browser = self._build_section(BrowserConfig, 'browser')
        self.local_server = self._build_section(LocalServerConfig, 'local_server')
        self.logging = self._build_section(LoggingConfig, 'logging')

    def _build_section(self, section_cls, name: str):
        """Create a section dataclass, ignoring unknown keys"""
        data = self._config_data.get(name) or {}
        known = {f.name for f in fields(section_cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown {name} options: {sorted(unknown)}")
        return section_cls(**{k: v for k, v in data.items() if k in known})

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries"""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    @property
    def image_extensions(self) -> set:
        """Normalized extension allow-list ('.png' form, lower case)"""
        return {
            ext.lower() if ext.startswith('.') else f'.{ext.lower()}'
            for ext in self.scan.image_extensions
        }

    def get_log_dir(self) -> Path:
        """Get log directory"""
        return Path(self.logging.log_dir).expanduser()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scan': asdict(self.scan),
            'browser': asdict(self.browser),
            'local_server': asdict(self.local_server),
            'logging': asdict(self.logging),
        }

    def save(self):
        """Save current configuration to file"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False,
                      allow_unicode=True, indent=2)
