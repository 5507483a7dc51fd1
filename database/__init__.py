"""Database package initialization"""
from .models import (
    Flight, User, SeatMap, CounterDrift,
    FLIGHT_COLUMNS, USER_COLUMNS,
    row_to_flight, row_to_user
)
from .database import (
    DatabaseManager, DatabaseError, StorageOpenError, StatementError,
    DB_FILE, get_db_manager, set_db_manager
)

__all__ = [
    'Flight', 'User', 'SeatMap', 'CounterDrift',
    'FLIGHT_COLUMNS', 'USER_COLUMNS',
    'row_to_flight', 'row_to_user',
    'DatabaseManager', 'DatabaseError', 'StorageOpenError', 'StatementError',
    'DB_FILE', 'get_db_manager', 'set_db_manager'
]
