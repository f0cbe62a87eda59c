"""Logging setup and REST request logging"""

from .logging import setup_logging
from .request_logging import RequestLoggingMiddleware

__all__ = ["setup_logging", "RequestLoggingMiddleware"]
