"""
Flight management service
Handles CRUD operations for flights and the seat map shown to customers
"""
from typing import List, Optional

from database import Flight, SeatMap, FLIGHT_COLUMNS, row_to_flight, get_db_manager
from backend.validators import ValidationError, flight_exists, get_taken_seats


class FlightService:
    """Service for flight management operations"""

    @staticmethod
    def add_flight(flight_number: str, airline_name: str, starting_point: str,
                   destination: str, total_tickets: int) -> Flight:
        """
        Create a new flight with every ticket available

        Args:
            flight_number: Unique flight number
            airline_name: Operating airline
            starting_point: Departure location
            destination: Arrival location
            total_tickets: Seating capacity

        Returns:
            Created flight object

        Raises:
            ValidationError: If the flight number is already taken
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            if flight_exists(flight_number, conn=conn):
                raise ValidationError("Flight with this number already exists!")

            conn.execute(f"""
                INSERT INTO Flights ({FLIGHT_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?)
            """, (flight_number, airline_name, starting_point, destination,
                  total_tickets, total_tickets))

            return Flight(
                flight_number=flight_number,
                airline_name=airline_name,
                starting_point=starting_point,
                destination=destination,
                total_tickets=total_tickets,
                available_tickets=total_tickets
            )

    @staticmethod
    def modify_flight(flight_number: str, airline_name: str, starting_point: str,
                      destination: str, total_tickets: int, available_tickets: int) -> Flight:
        """
        Overwrite every attribute of an existing flight

        The new counters are stored as given; they are not checked against
        each other or against the bookings already on the flight.

        Raises:
            ValidationError: If the flight does not exist
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            if not flight_exists(flight_number, conn=conn):
                raise ValidationError("Flight not found!")

            conn.execute("""
                UPDATE Flights
                SET airlineName = ?, startingPoint = ?, destination = ?,
                    totalTickets = ?, availableTickets = ?
                WHERE flightNumber = ?
            """, (airline_name, starting_point, destination,
                  total_tickets, available_tickets, flight_number))

            row = conn.execute(
                f"SELECT {FLIGHT_COLUMNS} FROM Flights WHERE flightNumber = ?", (flight_number,)
            ).fetchone()
            return row_to_flight(row)

    @staticmethod
    def delete_flight(flight_number: str) -> int:
        """
        Delete a flight together with every passenger booked on it

        Returns:
            Number of passengers removed

        Raises:
            ValidationError: If the flight does not exist
        """
        db_manager = get_db_manager()

        with db_manager.transaction() as conn:
            if not flight_exists(flight_number, conn=conn):
                raise ValidationError("Flight not found!")

            removed = conn.execute(
                "DELETE FROM Users WHERE flightNumber = ?", (flight_number,)
            ).rowcount
            conn.execute("DELETE FROM Flights WHERE flightNumber = ?", (flight_number,))
            return removed

    @staticmethod
    def get_flight(flight_number: str) -> Optional[Flight]:
        """Get flight by flight number"""
        db_manager = get_db_manager()

        with db_manager.get_cursor() as cursor:
            cursor.execute(
                f"SELECT {FLIGHT_COLUMNS} FROM Flights WHERE flightNumber = ?", (flight_number,)
            )
            return row_to_flight(cursor.fetchone())

    @staticmethod
    def list_flights() -> List[Flight]:
        """List all flights ordered by flight number"""
        flights = []
        get_db_manager().execute_query(
            f"SELECT {FLIGHT_COLUMNS} FROM Flights ORDER BY flightNumber",
            row_handler=lambda row: flights.append(row_to_flight(row))
        )
        return flights

    @staticmethod
    def get_seat_map(flight_number: str) -> SeatMap:
        """
        Taken seats plus the free seat ranges between 1 and the capacity

        Seats booked outside that range still show up as taken.

        Raises:
            ValidationError: If the flight does not exist
        """
        flight = FlightService.get_flight(flight_number)
        if flight is None:
            raise ValidationError("Flight not found!")

        taken = get_taken_seats(flight_number)

        free_ranges = []
        next_free = 1
        for seat in sorted(set(taken)):
            if seat < next_free:
                continue
            if seat > flight.total_tickets:
                break
            if seat > next_free:
                free_ranges.append((next_free, seat - 1))
            next_free = seat + 1
        if next_free <= flight.total_tickets:
            free_ranges.append((next_free, flight.total_tickets))

        return SeatMap(flight_number=flight_number, taken=taken, free_ranges=free_ranges)
