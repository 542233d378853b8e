"""
Database session helpers for the backend.

Re-exports the devconnector.db module. Database initialization is handled
explicitly in main.py startup, not at import time.
"""

from devconnector.db import db, get_db

__all__ = ["db", "get_db"]
