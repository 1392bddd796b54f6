#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Browser console log capture

Loads a page in headless Chrome through Selenium, waits for a while and
collects everything the page wrote to the browser console.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import BrowserCaptureError
from ..utils.config import BrowserConfig
from ..utils.constants import CHROME_LEVEL_TYPES

logger = logging.getLogger('imageprobe.browser')


@dataclass
class ConsoleLogEntry:
    """Console log entry"""
    type: str    # log, info, warning, error, debug
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def iso_timestamp(self) -> str:
        ts = self.timestamp.astimezone(timezone.utc)
        return ts.isoformat(timespec='milliseconds').replace('+00:00', 'Z')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type,
            'text': self.text,
            'timestamp': self.iso_timestamp,
        }

    @classmethod
    def from_chrome_entry(cls, entry: Dict[str, Any]) -> 'ConsoleLogEntry':
        """Convert one driver.get_log('browser') entry"""
        level = str(entry.get('level', 'INFO')).upper()
        raw_ts = entry.get('timestamp')
        if isinstance(raw_ts, (int, float)):
            timestamp = datetime.fromtimestamp(raw_ts / 1000.0, tz=timezone.utc)
        else:
            timestamp = datetime.now(timezone.utc)
        return cls(
            type=CHROME_LEVEL_TYPES.get(level, level.lower()),
            text=str(entry.get('message', '')),
            timestamp=timestamp,
        )


def create_chrome_driver(config: BrowserConfig):
    """Launch a Chrome WebDriver with browser console logging enabled"""
    from selenium import webdriver
    from selenium.webdriver.chrome.options import Options

    chrome_options = Options()
    if config.headless:
        chrome_options.add_argument('--headless=new')
    for argument in config.chrome_arguments:
        chrome_options.add_argument(argument)
    chrome_options.add_argument(f'--window-size={config.window_size}')
    chrome_options.set_capability('goog:loggingPrefs', {'browser': 'ALL'})

    driver = webdriver.Chrome(options=chrome_options)
    driver.set_page_load_timeout(config.page_load_timeout_seconds)
    return driver


class ConsoleLogCapturer:
    """
    Captures console output of a web page with a headless browser
    """

    def __init__(self, config: Optional[BrowserConfig] = None,
                 driver_factory: Optional[Callable[[BrowserConfig], Any]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize capturer

        Args:
            config: Browser configuration
            driver_factory: Callable returning a WebDriver-like object, defaults to Chrome
            sleep: Blocking sleep used for the post-load wait
        """
        self.config = config or BrowserConfig()
        self.driver_factory = driver_factory or create_chrome_driver
        self._sleep = sleep

    async def capture(self, url: str, wait_time_ms: int) -> List[ConsoleLogEntry]:
        """
        Capture console logs from a website

        Args:
            url: Page to visit
            wait_time_ms: Time to keep collecting after the page has loaded

        Returns:
            Captured entries (whatever was collected if navigation failed)

        Raises:
            BrowserCaptureError: the browser could not be started
        """
        return await asyncio.to_thread(self._capture_blocking, url, wait_time_ms)

    def _capture_blocking(self, url: str, wait_time_ms: int) -> List[ConsoleLogEntry]:
        logger.info(f"Launching headless browser to capture logs from {url}...")
        try:
            driver = self.driver_factory(self.config)
        except Exception as e:
            raise BrowserCaptureError(f"Failed to launch browser: {e}") from e

        logs: List[ConsoleLogEntry] = []
        try:
            try:
                logger.info(f"Navigating to {url}")
                driver.get(url)
                logger.info(f"Waiting for {wait_time_ms / 1000} seconds to collect logs...")
                self._sleep(wait_time_ms / 1000.0)
            except Exception as e:
                logger.error(f"Error navigating to {url}: {e}")

            try:
                logs = [ConsoleLogEntry.from_chrome_entry(entry) for entry in driver.get_log('browser')]
            except Exception as e:
                logger.error(f"Failed to read browser console log: {e}")
            return logs
        finally:
            try:
                driver.quit()
                logger.info("Browser closed")
            except Exception as e:
                logger.warning(f"Failed to close browser: {e}")
