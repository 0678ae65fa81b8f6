"""
Utilities for WindWatch-NG.
"""

from .logging import setup_logging, PerformanceLogger, AlertLogger

__all__ = [
    "setup_logging",
    "PerformanceLogger",
    "AlertLogger",
]
