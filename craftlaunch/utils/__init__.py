"""Common utilities."""

from .async_http import AsyncHTTPClient
from .logger import setup_logging
from .platform import OperatingSystem, Platform

__all__ = ["AsyncHTTPClient", "setup_logging", "OperatingSystem", "Platform"]
