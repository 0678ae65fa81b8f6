"""
Database components for WindWatch-NG.
"""

from .models import AlertRecord
from .manager import DatabaseManager, DatabaseError

__all__ = [
    "AlertRecord",
    "DatabaseManager",
    "DatabaseError",
]
