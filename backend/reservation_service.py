"""
Reservation service
Booking entry point that checks remaining capacity before taking a seat
"""
from database import User, get_db_manager
from backend.user_service import insert_booking, remove_booking
from backend.validators import (
    ValidationError, user_exists, is_seat_available, get_available_tickets
)


class ReservationService:
    """Service for making and cancelling reservations"""

    @staticmethod
    def make_reservation(user_id: str, name: str, flight_number: str, seat_number: int) -> User:
        """
        Book a seat for a new passenger

        Unlike UserService.add_user, a flight with no tickets left is refused.

        Args:
            user_id: ID for the new passenger (must not exist yet)
            name: Passenger name
            flight_number: Flight to book
            seat_number: Requested seat

        Returns:
            Created user object

        Raises:
            ValidationError: If the ID is taken, the flight is unknown or full,
                or the seat is occupied
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            if user_exists(user_id, conn=conn):
                raise ValidationError("User with this ID already exists!")

            available = get_available_tickets(flight_number, conn=conn)
            if available is None:
                raise ValidationError("Flight not found.")
            if available <= 0:
                raise ValidationError("No available tickets for this flight.")

            if not is_seat_available(flight_number, seat_number, conn=conn):
                raise ValidationError(f"Seat {seat_number} is already taken on this flight!")

            return insert_booking(conn, user_id, name, flight_number, seat_number)

    @staticmethod
    def cancel_reservation(user_id: str) -> User:
        """
        Cancel a passenger's reservation, freeing the seat and the ticket

        Raises:
            ValidationError: If the user does not exist
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            return remove_booking(conn, user_id)
