"""
Database service for CulinariaLegacy application.

Owns the schema and exposes the small query surface every other service
uses: select with filters, insert, update, delete and count, plus a
transaction scope so multi-step workflows commit or roll back as a unit.
SQLite is the default backend; PostgreSQLService reuses the same surface.
"""

import sqlite3
import json
import logging
import uuid
from pathlib import Path
from typing import List, Optional, Dict, Any, Iterable
from contextlib import contextmanager
from datetime import date, datetime

from .errors import ServiceError, AlreadyExistsError, ErrorKind

logger = logging.getLogger(__name__)


SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        full_name TEXT DEFAULT '',
        is_active BOOLEAN DEFAULT TRUE,
        created_at TEXT,
        last_login TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_sessions (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        session_token TEXT UNIQUE NOT NULL,
        created_at TEXT,
        expires_at TEXT,
        last_activity TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS family_groups (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT DEFAULT '',
        created_by TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS family_group_members (
        id TEXT PRIMARY KEY,
        group_id TEXT NOT NULL REFERENCES family_groups(id) ON DELETE CASCADE,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        role TEXT NOT NULL DEFAULT 'member' CHECK (role IN ('admin', 'member')),
        joined_at TEXT,
        UNIQUE (group_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS family_group_invites (
        id TEXT PRIMARY KEY,
        group_id TEXT NOT NULL REFERENCES family_groups(id) ON DELETE CASCADE,
        code TEXT UNIQUE NOT NULL,
        expiry_date TEXT,
        created_by TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS recipes (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT DEFAULT '',
        image_url TEXT DEFAULT '',
        prep_time INTEGER DEFAULT 0,
        cook_time INTEGER DEFAULT 0,
        servings INTEGER DEFAULT 0,
        difficulty TEXT DEFAULT 'Facile',
        category TEXT DEFAULT '',
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        family_group_id TEXT REFERENCES family_groups(id) ON DELETE SET NULL,
        is_public BOOLEAN DEFAULT FALSE,
        ingredients TEXT DEFAULT '[]',
        instructions TEXT DEFAULT '[]',
        created_at TEXT,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS meal_plans (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        date TEXT NOT NULL,
        meal_type TEXT NOT NULL,
        recipe_id TEXT REFERENCES recipes(id) ON DELETE SET NULL,
        custom_meal TEXT,
        notes TEXT,
        created_at TEXT,
        UNIQUE (user_id, date, meal_type)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS favorites (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
        recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
        created_at TEXT,
        UNIQUE (user_id, recipe_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_recipes_user ON recipes (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_recipes_group ON recipes (family_group_id)",
    "CREATE INDEX IF NOT EXISTS idx_members_user ON family_group_members (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_meal_plans_user_date ON meal_plans (user_id, date)",
]

# Whitelist used to build queries; table and column names never come from input
TABLE_COLUMNS = {
    'users': ('id', 'email', 'password_hash', 'full_name', 'is_active', 'created_at', 'last_login'),
    'user_sessions': ('id', 'user_id', 'session_token', 'created_at', 'expires_at', 'last_activity'),
    'family_groups': ('id', 'name', 'description', 'created_by', 'created_at'),
    'family_group_members': ('id', 'group_id', 'user_id', 'role', 'joined_at'),
    'family_group_invites': ('id', 'group_id', 'code', 'expiry_date', 'created_by', 'created_at'),
    'recipes': ('id', 'title', 'description', 'image_url', 'prep_time', 'cook_time', 'servings',
                'difficulty', 'category', 'user_id', 'family_group_id', 'is_public',
                'ingredients', 'instructions', 'created_at', 'updated_at'),
    'meal_plans': ('id', 'user_id', 'date', 'meal_type', 'recipe_id', 'custom_meal', 'notes',
                   'created_at'),
    'favorites': ('id', 'user_id', 'recipe_id', 'created_at'),
}


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Read a stored ISO timestamp back into a datetime"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return datetime.fromisoformat(str(value))


def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def new_id() -> str:
    return str(uuid.uuid4())


class DatabaseService:
    """
    Centralized database service for all SQLite operations.
    Services call the generic query methods; passing conn= runs the call
    inside a caller-owned transaction instead of committing on its own.
    """

    placeholder = "?"
    integrity_errors = (sqlite3.IntegrityError,)
    driver_errors = (sqlite3.Error,)

    def __init__(self, db_path: str = "culinaria_legacy.db"):
        self.db_path = db_path
        # Keep persistent connection for in-memory databases
        self._persistent_conn = None
        if db_path == ":memory:":
            self._persistent_conn = self._open_connection()
        elif Path(db_path).parent != Path("."):
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.initialize_database()

    def _open_connection(self):
        conn = sqlite3.connect(self.db_path, timeout=10)
        conn.row_factory = sqlite3.Row  # Enable dict-like access
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def get_connection(self):
        """Context manager for database connections with proper cleanup"""
        if self._persistent_conn:
            try:
                yield self._persistent_conn
            except Exception as e:
                self._persistent_conn.rollback()
                self._raise_translated(e)
        else:
            conn = None
            try:
                conn = self._open_connection()
                yield conn
            except Exception as e:
                if conn:
                    conn.rollback()
                self._raise_translated(e)
            finally:
                if conn:
                    conn.close()

    def _raise_translated(self, error: Exception):
        """Re-raise driver errors as ServiceError so callers branch on kind"""
        if isinstance(error, ServiceError):
            logger.debug(f"Transaction rolled back: {error!r}")
            raise error
        if isinstance(error, self.integrity_errors):
            logger.warning(f"Constraint violation: {error}")
            raise AlreadyExistsError(str(error)) from error
        if isinstance(error, self.driver_errors):
            logger.error(f"Database error: {error}")
            raise ServiceError(str(error), ErrorKind.UNKNOWN) from error
        logger.error(f"Unexpected error during database operation: {error}")
        raise error

    @contextmanager
    def transaction(self):
        """Run several operations on one connection and commit them together"""
        with self.get_connection() as conn:
            yield conn
            conn.commit()

    @contextmanager
    def _use(self, conn=None):
        if conn is not None:
            yield conn
        else:
            with self.transaction() as own_conn:
                yield own_conn

    def initialize_database(self):
        """Create tables and indexes if they don't exist"""
        with self.transaction() as conn:
            cursor = conn.cursor()
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)
        logger.info(f"Database initialized successfully: {self.db_path}")

    # Query surface

    def select(self, table: str, filters: Dict[str, Any] = None, *,
               gte: Dict[str, Any] = None, lte: Dict[str, Any] = None,
               order_by: str = None, limit: int = None, conn=None) -> List[Dict[str, Any]]:
        """
        Select rows matching all filters.

        Filter values match by equality; list/tuple/set values match with IN;
        None matches NULL. gte/lte add inclusive range bounds. order_by takes a
        column name, prefixed with '-' for descending order.
        """
        where, params = self._build_where(table, filters, gte, lte)
        sql = f"SELECT * FROM {self._check_table(table)}{where}"
        if order_by:
            descending = order_by.startswith('-')
            column = self._check_column(table, order_by.lstrip('-'))
            sql += f" ORDER BY {column} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        with self._use(conn) as c:
            cursor = c.cursor()
            cursor.execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]

    def select_one(self, table: str, filters: Dict[str, Any], *, conn=None) -> Optional[Dict[str, Any]]:
        rows = self.select(table, filters, limit=1, conn=conn)
        return rows[0] if rows else None

    def count(self, table: str, filters: Dict[str, Any] = None, *, conn=None) -> int:
        where, params = self._build_where(table, filters)
        sql = f"SELECT COUNT(*) AS row_count FROM {self._check_table(table)}{where}"
        with self._use(conn) as c:
            cursor = c.cursor()
            cursor.execute(sql, params)
            row = cursor.fetchone()
            return int(row['row_count']) if row else 0

    def insert(self, table: str, values: Dict[str, Any], *, conn=None) -> Dict[str, Any]:
        """Insert one row and return the stored values (id included)"""
        row = dict(values)
        if 'id' in TABLE_COLUMNS[self._check_table(table)] and not row.get('id'):
            row['id'] = new_id()
        columns = [self._check_column(table, column) for column in row]
        params = [self._prepare_value(row[column]) for column in row]
        placeholders = ", ".join([self.placeholder] * len(columns))
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        with self._use(conn) as c:
            cursor = c.cursor()
            cursor.execute(sql, params)
        return {column: value for column, value in zip(columns, params)}

    def update(self, table: str, values: Dict[str, Any], filters: Dict[str, Any], *, conn=None) -> int:
        """Replace the given columns on every matching row; returns rows changed"""
        if not filters:
            raise ValueError("update() requires at least one filter")
        assignments = [f"{self._check_column(table, column)} = {self.placeholder}" for column in values]
        params = [self._prepare_value(value) for value in values.values()]
        where, where_params = self._build_where(table, filters)
        sql = f"UPDATE {table} SET {', '.join(assignments)}{where}"
        with self._use(conn) as c:
            cursor = c.cursor()
            cursor.execute(sql, params + where_params)
            return cursor.rowcount

    def delete(self, table: str, filters: Dict[str, Any], *, conn=None) -> int:
        """Delete matching rows; returns rows deleted"""
        if not filters:
            raise ValueError("delete() requires at least one filter")
        where, params = self._build_where(table, filters)
        sql = f"DELETE FROM {self._check_table(table)}{where}"
        with self._use(conn) as c:
            cursor = c.cursor()
            cursor.execute(sql, params)
            return cursor.rowcount

    def get_database_stats(self) -> Dict[str, Any]:
        """Row counts for every table"""
        stats = {}
        with self.transaction() as conn:
            for table in TABLE_COLUMNS:
                stats[table] = self.count(table, conn=conn)
        return stats

    # Helper Methods

    def _check_table(self, table: str) -> str:
        if table not in TABLE_COLUMNS:
            raise ValueError(f"Unknown table: {table}")
        return table

    def _check_column(self, table: str, column: str) -> str:
        if column not in TABLE_COLUMNS[self._check_table(table)]:
            raise ValueError(f"Unknown column {column!r} for table {table}")
        return column

    def _build_where(self, table: str, filters: Dict[str, Any] = None,
                     gte: Dict[str, Any] = None, lte: Dict[str, Any] = None):
        clauses = []
        params = []
        for column, value in (filters or {}).items():
            self._check_column(table, column)
            if isinstance(value, (list, tuple, set, frozenset)):
                values = [self._prepare_value(v) for v in value]
                if not values:
                    clauses.append("1 = 0")
                    continue
                clauses.append(f"{column} IN ({', '.join([self.placeholder] * len(values))})")
                params.extend(values)
            elif value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = {self.placeholder}")
                params.append(self._prepare_value(value))
        for bounds, operator in ((gte, '>='), (lte, '<=')):
            for column, value in (bounds or {}).items():
                self._check_column(table, column)
                clauses.append(f"{column} {operator} {self.placeholder}")
                params.append(self._prepare_value(value))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def _prepare_value(self, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, (list, dict)):
            return json.dumps(value, ensure_ascii=False)
        return value


def rows_by(rows: Iterable[Dict[str, Any]], key: str) -> Dict[Any, Dict[str, Any]]:
    """Index rows by one column"""
    return {row[key]: row for row in rows}


# Global database service instance
_database_service: Optional[DatabaseService] = None


def get_database_service(db_path: str = None) -> DatabaseService:
    """Get singleton database service instance"""
    global _database_service
    if _database_service is None:
        from config.database_config import create_database_service
        _database_service = create_database_service(db_path)
    return _database_service


def initialize_database_for_testing(db_path: str = ":memory:") -> DatabaseService:
    """Create database service for testing with in-memory database"""
    return DatabaseService(db_path)
