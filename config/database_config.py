"""
Database configuration for CulinariaLegacy application.

Chooses between the local SQLite database and hosted PostgreSQL.
"""

import os
from typing import Dict, Any, Optional

import streamlit as st

from utils.config import get_config


class DatabaseConfig:
    """Database configuration manager"""

    @staticmethod
    def get_database_config() -> Dict[str, Any]:
        """Get database configuration"""
        config = get_config()
        db_type = os.getenv('DATABASE_TYPE', config.database_type).lower()

        if db_type == 'postgresql':
            return {
                'type': 'postgresql',
                'url': DatabaseConfig._get_secret('DATABASE_URL') or config.database_url,
                'description': 'Hosted PostgreSQL Database'
            }
        return {
            'type': 'sqlite',
            'path': DatabaseConfig._get_secret('DATABASE_PATH') or config.database_path,
            'description': 'Local SQLite Database'
        }

    @staticmethod
    def _get_secret(key: str) -> Optional[str]:
        """Read a value from Streamlit secrets when they exist"""
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return st.secrets[key]
        except FileNotFoundError:
            pass
        return None


def create_database_service(db_path: Optional[str] = None):
    """Create the database service for the configured backend"""
    if db_path:
        from services.database_service import DatabaseService
        return DatabaseService(db_path)

    config = DatabaseConfig.get_database_config()
    if config['type'] == 'postgresql':
        from services.postgresql_service import PostgreSQLService
        return PostgreSQLService(config['url'])

    from services.database_service import DatabaseService
    return DatabaseService(config['path'])


def get_database_info() -> Dict[str, Any]:
    """Get database configuration info"""
    config = DatabaseConfig.get_database_config()

    return {
        'type': config['type'],
        'description': config['description'],
        'location': 'Remote' if config['type'] == 'postgresql' else config.get('path', 'Unknown')
    }
