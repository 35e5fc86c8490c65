"""
Database access: connection management, schema and repositories.
"""

from .connection import ConnDB, close_database, get_db_connection, initialize_database

__all__ = ["ConnDB", "close_database", "get_db_connection", "initialize_database"]
