# storage/__init__.py
"""
Storage Module

Provides the SQLite data layer: schema creation and a parameterized-query
primitive shared by the services and the chatbot.
"""

from storage.database import Database, get_db
from storage.schema import init_database

__all__ = [
    'Database',
    'get_db',
    'init_database',
]
