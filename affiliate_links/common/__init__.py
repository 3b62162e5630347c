# Common utilities and shared modules
"""
Shared components used by the link store and its CLI:
- Database utilities
- Logging configuration
- Project configuration
"""

from .config import settings, PROJECT_ROOT, DATA_DIR
from .database import create_schema, get_connection, init_db
from .logging import setup_logging

__all__ = [
    "settings",
    "PROJECT_ROOT",
    "DATA_DIR",
    "create_schema",
    "get_connection",
    "init_db",
    "setup_logging",
]
