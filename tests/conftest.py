"""Pytest configuration and fixtures."""
import os
import sys

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.database import DatabaseManager, set_db_manager
from backend.flight_service import FlightService
from backend.user_service import UserService


@pytest.fixture(scope='function')
def db_manager(tmp_path):
    """Create a database manager on a fresh SQLite file."""
    db = DatabaseManager(database_path=tmp_path / 'test_airline.db', echo=False)
    db.create_tables()
    set_db_manager(db)
    yield db
    set_db_manager(None)
    db.drop_tables()  # Cleanup after test


@pytest.fixture(scope='function')
def test_flight(db_manager):
    """Create a test flight with two seats"""
    return FlightService.add_flight(
        flight_number='AA100',
        airline_name='Delta',
        starting_point='New York',
        destination='Los Angeles',
        total_tickets=2
    )


@pytest.fixture(scope='function')
def large_flight(db_manager):
    """Create a test flight with room for many passengers"""
    return FlightService.add_flight(
        flight_number='UA200',
        airline_name='United',
        starting_point='Chicago',
        destination='Denver',
        total_tickets=50
    )


@pytest.fixture(scope='function')
def test_user(db_manager, test_flight):
    """Create a passenger in seat 1 of the test flight"""
    return UserService.add_user('U1', 'John Doe', test_flight.flight_number, 1)


@pytest.fixture(scope='function')
def count_rows(db_manager):
    """Count rows of a table directly, bypassing the service layer."""
    def _count(table: str) -> int:
        with db_manager.get_cursor() as cursor:
            cursor.execute(f"SELECT COUNT(*) AS n FROM {table}")
            return cursor.fetchone()['n']
    return _count
