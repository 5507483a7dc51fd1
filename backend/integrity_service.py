"""
Cross-table consistency checks
Ticket counters are maintained incrementally, so they can drift from the
real booking count after a flight is modified by hand
"""
from typing import List, Tuple

from database import CounterDrift, User, USER_COLUMNS, row_to_user, get_db_manager


_COUNTER_QUERY = """
    SELECT f.flightNumber, f.totalTickets, f.availableTickets,
           COUNT(u.userID) AS booked
    FROM Flights f
    LEFT JOIN Users u ON u.flightNumber = f.flightNumber
    GROUP BY f.flightNumber
    ORDER BY f.flightNumber
"""


class IntegrityService:
    """Detect and repair violations of the reservation invariants"""

    @staticmethod
    def find_counter_drift() -> List[CounterDrift]:
        """Flights whose availableTickets is not totalTickets minus bookings"""
        db_manager = get_db_manager()

        with db_manager.get_cursor() as cursor:
            cursor.execute(_COUNTER_QUERY)
            drift = []
            for row in cursor.fetchall():
                expected = row['totalTickets'] - row['booked']
                if row['availableTickets'] != expected:
                    drift.append(CounterDrift(
                        flight_number=row['flightNumber'],
                        recorded=row['availableTickets'],
                        expected=expected
                    ))
            return drift

    @staticmethod
    def find_orphaned_users() -> List[User]:
        """Users whose flight no longer exists"""
        db_manager = get_db_manager()

        with db_manager.get_cursor() as cursor:
            cursor.execute(f"""
                SELECT {USER_COLUMNS} FROM Users
                WHERE flightNumber NOT IN (SELECT flightNumber FROM Flights)
                ORDER BY userID
            """)
            return [row_to_user(row) for row in cursor.fetchall()]

    @staticmethod
    def find_duplicate_seats() -> List[Tuple[str, int]]:
        """(flight, seat) pairs held by more than one user"""
        db_manager = get_db_manager()

        with db_manager.get_cursor() as cursor:
            cursor.execute("""
                SELECT flightNumber, seatNumber FROM Users
                GROUP BY flightNumber, seatNumber
                HAVING COUNT(*) > 1
            """)
            return [(row['flightNumber'], row['seatNumber']) for row in cursor.fetchall()]

    @staticmethod
    def check_invariants() -> List[str]:
        """Human readable list of violations, empty when the data is consistent"""
        problems = []
        for drift in IntegrityService.find_counter_drift():
            problems.append(
                f"Flight {drift.flight_number}: availableTickets is {drift.recorded}, expected {drift.expected}"
            )
        for user in IntegrityService.find_orphaned_users():
            problems.append(f"User {user.user_id} references missing flight {user.flight_number}")
        for flight_number, seat_number in IntegrityService.find_duplicate_seats():
            problems.append(f"Seat {seat_number} on flight {flight_number} is booked more than once")
        return problems

    @staticmethod
    def reconcile_available_tickets() -> int:
        """
        Recompute availableTickets from the bookings of every drifting flight

        Returns:
            Number of flights corrected
        """
        drift = IntegrityService.find_counter_drift()
        if not drift:
            return 0

        db_manager = get_db_manager()
        with db_manager.transaction() as conn:
            conn.executemany(
                "UPDATE Flights SET availableTickets = ? WHERE flightNumber = ?",
                [(item.expected, item.flight_number) for item in drift]
            )
        return len(drift)
