"""
Database connection and transaction management using raw SQLite
Every call opens its own connection and closes it when the scope ends
"""
import logging
import os
import sqlite3
import sys
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

# Support running this module directly (``python database/database.py``)
if __package__ in (None, ""):
    # Add repository root so ``import database.models`` resolves
    current_dir = Path(__file__).resolve().parent
    repo_root = current_dir.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))

load_dotenv()

logger = logging.getLogger(__name__)

DB_FILE = 'database.db'


class DatabaseError(RuntimeError):
    """Base class for storage failures"""


class StorageOpenError(DatabaseError):
    """Raised when the database file cannot be opened or created"""


class StatementError(DatabaseError):
    """Raised when the engine rejects a statement"""


class DatabaseManager:
    """
    Database manager with scoped connections and transaction support
    """

    def __init__(self, database_path=None, echo=False):
        """
        Initialize database manager

        Args:
            database_path: Path of the SQLite file (defaults to env variable)
            echo: Whether to log SQL statements
        """
        self.database_path = str(database_path or os.getenv('AIRLINE_DB_PATH', DB_FILE))
        self.echo = echo or os.getenv('DB_ECHO', 'False').lower() == 'true'

    def get_connection(self):
        """Open a new connection to the database file"""
        try:
            conn = sqlite3.connect(self.database_path)
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise StorageOpenError(f"Can't open database: {e}") from e

        conn.row_factory = sqlite3.Row
        if self.echo:
            conn.set_trace_callback(lambda statement: logger.debug("SQL: %s", statement))
        return conn

    def create_tables(self):
        """Create all database tables from schema"""
        schema_file = Path(__file__).parent / 'schema.sql'

        if not schema_file.exists():
            raise FileNotFoundError(f"Schema file not found: {schema_file}")

        with open(schema_file, 'r') as f:
            schema_sql = f.read()

        conn = self.get_connection()
        try:
            conn.executescript(schema_sql)
            conn.commit()
        except sqlite3.Error as e:
            raise StatementError(f"SQL error: {e}") from e
        finally:
            conn.close()

    def drop_tables(self):
        """Drop all database tables (use with caution!)"""
        conn = self.get_connection()
        try:
            conn.execute("DROP TABLE IF EXISTS Users")
            conn.execute("DROP TABLE IF EXISTS Flights")
            conn.commit()
        finally:
            conn.close()

    def initialize_database(self) -> bool:
        """
        Create the schema if needed

        A database that cannot be opened is logged, not raised, so the
        console can still start.
        """
        try:
            self.create_tables()
        except DatabaseError as e:
            logger.error("%s", e)
            return False

        logger.info("Database initialized successfully")
        return True

    @contextmanager
    def get_cursor(self):
        """
        Get a cursor with automatic connection management

        Usage:
            with db.get_cursor() as cursor:
                cursor.execute("SELECT * FROM Flights")
                results = cursor.fetchall()
        """
        conn = self.get_connection()
        cursor = conn.cursor()

        try:
            yield cursor
            conn.commit()
        except (sqlite3.Error, OverflowError) as e:
            conn.rollback()
            raise StatementError(f"SQL error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            cursor.close()
            conn.close()

    @contextmanager
    def transaction(self):
        """
        Provide a transactional scope with a connection

        Usage:
            with db.transaction() as conn:
                conn.execute("INSERT INTO Users ...")
                conn.execute("UPDATE Flights ...")
        """
        conn = self.get_connection()

        try:
            yield conn
            conn.commit()
        except (sqlite3.Error, OverflowError) as e:
            conn.rollback()
            raise StatementError(f"SQL error: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def execute_statement(self, sql, params=()) -> bool:
        """
        Run a single statement that returns no rows

        Returns:
            True on success, False if the engine reported an error
        """
        try:
            with self.get_cursor() as cursor:
                cursor.execute(sql, params)
        except DatabaseError as e:
            logger.error("%s", e)
            return False
        return True

    def execute_query(self, sql, params=(), row_handler=None) -> bool:
        """
        Run a query and hand every row to ``row_handler``

        Returns:
            True on success, False if the engine reported an error
        """
        try:
            with self.get_cursor() as cursor:
                cursor.execute(sql, params)
                for row in cursor:
                    if row_handler is not None:
                        row_handler(row)
        except DatabaseError as e:
            logger.error("%s", e)
            return False
        return True


# Global database manager instance
_db_manager = None


def get_db_manager() -> DatabaseManager:
    """Get or create global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def set_db_manager(db_manager: DatabaseManager | None) -> None:
    """Override the global database manager instance.

    This is primarily used in test fixtures so that the service layer operates on
    a temporary database file instead of the default one.
    Passing ``None`` resets the singleton so the next
    ``get_db_manager`` call recreates it with default settings.
    """
    global _db_manager
    _db_manager = db_manager


def init_db():
    """Initialize database with tables"""
    db_manager = get_db_manager()
    if db_manager.initialize_database():
        print("Database initialized successfully!")


if __name__ == "__main__":
    # Initialize database when run directly
    init_db()
