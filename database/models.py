"""
Database models for Airline Reservation System
Plain Python classes (no ORM)
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class Flight:
    """Flight model with route and ticket counters"""
    flight_number: Optional[str] = None
    airline_name: Optional[str] = None
    starting_point: Optional[str] = None
    destination: Optional[str] = None
    total_tickets: Optional[int] = None
    available_tickets: Optional[int] = None

    def __repr__(self):
        return (f"<Flight(number='{self.flight_number}', route='{self.starting_point}->{self.destination}', "
                f"available={self.available_tickets}/{self.total_tickets})>")

    def as_row(self):
        return [
            self.flight_number,
            self.airline_name,
            self.starting_point,
            self.destination,
            self.total_tickets,
            self.available_tickets,
        ]


@dataclass
class User:
    """Passenger holding one seat on one flight"""
    user_id: Optional[str] = None
    name: Optional[str] = None
    flight_number: Optional[str] = None
    seat_number: Optional[int] = None

    def __repr__(self):
        return f"<User(id='{self.user_id}', name='{self.name}', flight='{self.flight_number}', seat={self.seat_number})>"

    def as_row(self):
        return [self.user_id, self.name, self.flight_number, self.seat_number]


@dataclass(frozen=True)
class SeatMap:
    """
    Taken and free seats of a flight

    Free seats are kept as inclusive (first, last) ranges so the map stays
    small whatever the capacity.
    """
    flight_number: str
    taken: list
    free_ranges: list

    @property
    def free_count(self) -> int:
        return sum(last - first + 1 for first, last in self.free_ranges)

    def nth_free(self, index: int) -> int:
        """Seat number of the ``index``-th free seat, counting from 0"""
        if index < 0:
            raise IndexError("free seat index out of range")
        for first, last in self.free_ranges:
            size = last - first + 1
            if index < size:
                return first + index
            index -= size
        raise IndexError("free seat index out of range")

    def format_free(self) -> str:
        return " ".join(
            str(first) if first == last else f"{first}-{last}"
            for first, last in self.free_ranges
        )


@dataclass(frozen=True)
class CounterDrift:
    """A flight whose availableTickets disagrees with its bookings"""
    flight_number: str
    recorded: int
    expected: int


FLIGHT_COLUMNS = "flightNumber, airlineName, startingPoint, destination, totalTickets, availableTickets"
USER_COLUMNS = "userID, name, flightNumber, seatNumber"


def row_to_flight(row) -> Flight:
    """Convert database row to Flight object"""
    if not row:
        return None
    return Flight(
        flight_number=row['flightNumber'],
        airline_name=row['airlineName'],
        starting_point=row['startingPoint'],
        destination=row['destination'],
        total_tickets=row['totalTickets'],
        available_tickets=row['availableTickets']
    )


def row_to_user(row) -> User:
    """Convert database row to User object"""
    if not row:
        return None
    return User(
        user_id=row['userID'],
        name=row['name'],
        flight_number=row['flightNumber'],
        seat_number=row['seatNumber']
    )
