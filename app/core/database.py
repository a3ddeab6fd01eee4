"""
Database connection and management module.
Handles the PostgreSQL connection pool shared by all tenants.
"""

from psycopg2 import pool
from psycopg2.extensions import connection as Connection
from contextlib import contextmanager
from typing import Generator, Optional, Dict, Any
import logging

from app.config import settings
from app.core.exceptions import AppException, DatabaseException

logger = logging.getLogger(__name__)

class DatabaseManager:
    """Manages the connection pool; tenants are isolated by key, not by database."""

    _instance: Optional["DatabaseManager"] = None
    _pool: Optional[pool.ThreadedConnectionPool] = None

    def __new__(cls):
        """Singleton pattern for DatabaseManager."""
        if cls._instance is None:
            cls._instance = super(DatabaseManager, cls).__new__(cls)
            cls._instance._initialize_pool()
        return cls._instance

    def _initialize_pool(self) -> None:
        """Initialize database connection pool."""
        try:
            self._pool = pool.ThreadedConnectionPool(
                minconn=settings.DB_POOL_MIN_SIZE,
                maxconn=settings.DB_POOL_SIZE,
                dsn=settings.DATABASE_URL
            )
            logger.info("Database connection pool initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database pool: {str(e)}")
            raise DatabaseException(f"Database pool initialization failed: {str(e)}")

    @contextmanager
    def get_connection(self) -> Generator[Connection, None, None]:
        """
        Get a pooled connection.

        The transaction is committed when the block exits cleanly and rolled
        back otherwise. Application exceptions pass through untouched, any
        other error is wrapped in DatabaseException.

        Yields:
            Database connection
        """
        connection = None
        try:
            if not self._pool:
                raise DatabaseException("Connection pool not initialized")

            connection = self._pool.getconn()
            yield connection
            connection.commit()

        except AppException:
            if connection:
                connection.rollback()
            raise
        except Exception as e:
            if connection:
                connection.rollback()
            logger.error(f"Database error: {str(e)}")
            raise DatabaseException(f"Database operation failed: {str(e)}")
        finally:
            if connection and self._pool:
                self._pool.putconn(connection)

    def execute_query(
        self,
        query: str,
        params: tuple = (),
        fetch_one: bool = False
    ):
        """
        Execute a database query.

        Args:
            query: SQL query string
            params: Query parameters
            fetch_one: Whether to fetch single row

        Returns:
            Query result(s)
        """
        with self.get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(query, params)
                if fetch_one:
                    return cursor.fetchone()
                return cursor.fetchall()
            finally:
                cursor.close()

    def get_pool_status(self) -> Dict[str, Any]:
        """
        Get status of the connection pool.

        Returns:
            Dictionary with pool status information
        """
        return {
            "initialized": self._pool is not None and not self._pool.closed,
            "min_connections": settings.DB_POOL_MIN_SIZE,
            "max_connections": settings.DB_POOL_SIZE
        }

    def validate_connection(self) -> bool:
        """
        Validate that the database connection is working.

        Returns:
            True if connection is valid

        Raises:
            DatabaseException: If connection validation fails
        """
        try:
            self.execute_query("SELECT 1", fetch_one=True)
            return True
        except Exception as e:
            logger.error(f"Connection validation failed: {str(e)}")
            raise DatabaseException(f"Connection validation failed: {str(e)}")

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool:
            self._pool.closeall()
            logger.info("Database connection pool closed")

def get_db_manager() -> DatabaseManager:
    """Get DatabaseManager singleton instance."""
    return DatabaseManager()
