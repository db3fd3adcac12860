"""
Configuration package for CulinariaLegacy application.
"""

from .database_config import DatabaseConfig, create_database_service, get_database_info

__all__ = [
    'DatabaseConfig',
    'create_database_service',
    'get_database_info'
]
