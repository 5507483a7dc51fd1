"""
Existence and availability checks shared by the reservation services
Each check runs on the caller's connection when one is given, otherwise
it opens its own scoped cursor
"""
from contextlib import contextmanager
from typing import List, Optional

from database import get_db_manager


class ValidationError(ValueError):
    """Raised when an operation is rejected before touching the database"""


@contextmanager
def _executor(conn=None):
    if conn is not None:
        yield conn
        return
    with get_db_manager().get_cursor() as cursor:
        yield cursor


def flight_exists(flight_number: str, conn=None) -> bool:
    """True iff a Flight row with that key exists"""
    with _executor(conn) as executor:
        row = executor.execute(
            "SELECT 1 FROM Flights WHERE flightNumber = ?", (flight_number,)
        ).fetchone()
        return row is not None


def user_exists(user_id: str, conn=None) -> bool:
    """True iff a User row with that key exists"""
    with _executor(conn) as executor:
        row = executor.execute(
            "SELECT 1 FROM Users WHERE userID = ?", (user_id,)
        ).fetchone()
        return row is not None


def is_seat_available(flight_number: str, seat_number: int, conn=None) -> bool:
    """True iff nobody holds ``seat_number`` on the flight"""
    with _executor(conn) as executor:
        row = executor.execute(
            "SELECT 1 FROM Users WHERE flightNumber = ? AND seatNumber = ?",
            (flight_number, seat_number)
        ).fetchone()
        return row is None


def is_seat_taken_by_other(flight_number: str, seat_number: int, user_id: str, conn=None) -> bool:
    """True iff a user other than ``user_id`` holds the seat"""
    with _executor(conn) as executor:
        row = executor.execute(
            "SELECT 1 FROM Users WHERE flightNumber = ? AND seatNumber = ? AND userID != ?",
            (flight_number, seat_number, user_id)
        ).fetchone()
        return row is not None


def get_taken_seats(flight_number: str, conn=None) -> List[int]:
    """Seat numbers booked on a flight, in the order storage returns them"""
    with _executor(conn) as executor:
        rows = executor.execute(
            "SELECT seatNumber FROM Users WHERE flightNumber = ?", (flight_number,)
        ).fetchall()
        return [row['seatNumber'] for row in rows]


def get_available_tickets(flight_number: str, conn=None) -> Optional[int]:
    """Current availableTickets counter, or None when the flight is unknown"""
    with _executor(conn) as executor:
        row = executor.execute(
            "SELECT availableTickets FROM Flights WHERE flightNumber = ?", (flight_number,)
        ).fetchone()
        return row['availableTickets'] if row else None


def get_booked_flight(user_id: str, conn=None) -> Optional[str]:
    """Flight number a user is booked on, or None when the user is unknown"""
    with _executor(conn) as executor:
        row = executor.execute(
            "SELECT flightNumber FROM Users WHERE userID = ?", (user_id,)
        ).fetchone()
        return row['flightNumber'] if row else None
