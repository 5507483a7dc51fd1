"""
Passenger management service
Each passenger holds exactly one seat, so adding or removing a passenger
also moves the flight's ticket counter
"""
import os
from typing import List, Optional

from database import User, USER_COLUMNS, row_to_user, get_db_manager
from backend.validators import (
    ValidationError, flight_exists, user_exists, is_seat_available,
    is_seat_taken_by_other, get_booked_flight
)

# Whether modify_user moves tickets between flights when a passenger changes flight
ADJUST_TICKETS_ON_MODIFY = os.getenv('ADJUST_TICKETS_ON_MODIFY', 'False').lower() == 'true'


def insert_booking(conn, user_id: str, name: str, flight_number: str, seat_number: int) -> User:
    """Insert the passenger row and take one ticket off the flight"""
    conn.execute(f"""
        INSERT INTO Users ({USER_COLUMNS})
        VALUES (?, ?, ?, ?)
    """, (user_id, name, flight_number, seat_number))
    conn.execute("""
        UPDATE Flights
        SET availableTickets = availableTickets - 1
        WHERE flightNumber = ?
    """, (flight_number,))
    return User(user_id=user_id, name=name, flight_number=flight_number, seat_number=seat_number)


def remove_booking(conn, user_id: str) -> User:
    """Delete the passenger row and give the ticket back to its flight"""
    row = conn.execute(
        f"SELECT {USER_COLUMNS} FROM Users WHERE userID = ?", (user_id,)
    ).fetchone()
    if not row:
        raise ValidationError("User not found!")

    user = row_to_user(row)
    conn.execute("DELETE FROM Users WHERE userID = ?", (user_id,))
    if user.flight_number:
        conn.execute("""
            UPDATE Flights
            SET availableTickets = availableTickets + 1
            WHERE flightNumber = ?
        """, (user.flight_number,))
    return user


class UserService:
    """Service for passenger management operations"""

    @staticmethod
    def add_user(user_id: str, name: str, flight_number: str, seat_number: int) -> User:
        """
        Register a passenger on a seat

        The flight's remaining capacity is not checked here; use
        ReservationService.make_reservation for a capacity-aware booking.

        Args:
            user_id: Unique passenger ID
            name: Passenger name
            flight_number: Flight to board
            seat_number: Requested seat, any integer

        Returns:
            Created user object

        Raises:
            ValidationError: If the ID is taken, the flight is unknown or the seat is occupied
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            if user_exists(user_id, conn=conn):
                raise ValidationError("User with this ID already exists!")
            if not flight_exists(flight_number, conn=conn):
                raise ValidationError("Flight doesn't exist!")
            if not is_seat_available(flight_number, seat_number, conn=conn):
                raise ValidationError(f"Seat {seat_number} is already taken on this flight!")

            return insert_booking(conn, user_id, name, flight_number, seat_number)

    @staticmethod
    def modify_user(user_id: str, name: str, flight_number: str, seat_number: int,
                    adjust_tickets: Optional[bool] = None) -> User:
        """
        Overwrite a passenger's name, flight and seat

        Args:
            user_id: Passenger to modify
            name: New name
            flight_number: New flight
            seat_number: New seat
            adjust_tickets: Move one ticket from the new flight back to the old
                one when the flight changes. Defaults to ADJUST_TICKETS_ON_MODIFY;
                when off, both counters are left as they were.

        Returns:
            Updated user object

        Raises:
            ValidationError: If the user or the new flight is unknown, or
                another passenger holds the seat
        """
        if adjust_tickets is None:
            adjust_tickets = ADJUST_TICKETS_ON_MODIFY

        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            old_flight = get_booked_flight(user_id, conn=conn)
            if old_flight is None:
                raise ValidationError("User not found!")
            if not flight_exists(flight_number, conn=conn):
                raise ValidationError("Flight doesn't exist!")
            if is_seat_taken_by_other(flight_number, seat_number, user_id, conn=conn):
                raise ValidationError(f"Seat {seat_number} is already taken on this flight!")

            conn.execute("""
                UPDATE Users
                SET name = ?, flightNumber = ?, seatNumber = ?
                WHERE userID = ?
            """, (name, flight_number, seat_number, user_id))

            if adjust_tickets and old_flight != flight_number:
                conn.execute("""
                    UPDATE Flights SET availableTickets = availableTickets + 1
                    WHERE flightNumber = ?
                """, (old_flight,))
                conn.execute("""
                    UPDATE Flights SET availableTickets = availableTickets - 1
                    WHERE flightNumber = ?
                """, (flight_number,))

            return User(user_id=user_id, name=name, flight_number=flight_number, seat_number=seat_number)

    @staticmethod
    def delete_user(user_id: str) -> User:
        """
        Remove a passenger and release the ticket

        Returns:
            The deleted user

        Raises:
            ValidationError: If the user does not exist
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            return remove_booking(conn, user_id)

    @staticmethod
    def get_user(user_id: str) -> Optional[User]:
        """Get user by ID"""
        db_manager = get_db_manager()

        with db_manager.get_cursor() as cursor:
            cursor.execute(f"SELECT {USER_COLUMNS} FROM Users WHERE userID = ?", (user_id,))
            return row_to_user(cursor.fetchone())

    @staticmethod
    def list_users() -> List[User]:
        """List all users ordered by ID"""
        users = []
        get_db_manager().execute_query(
            f"SELECT {USER_COLUMNS} FROM Users ORDER BY userID",
            row_handler=lambda row: users.append(row_to_user(row))
        )
        return users

    @staticmethod
    def list_users_on_flight(flight_number: str) -> List[User]:
        """List the passengers booked on a flight, ordered by seat"""
        db_manager = get_db_manager()

        with db_manager.get_cursor() as cursor:
            cursor.execute(f"""
                SELECT {USER_COLUMNS} FROM Users
                WHERE flightNumber = ?
                ORDER BY seatNumber
            """, (flight_number,))
            return [row_to_user(row) for row in cursor.fetchall()]
