"""
Functional tests for CRUD operations
Tests flights, passengers and reservations and their relationships
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
from backend.flight_service import FlightService
from backend.user_service import UserService, insert_booking, remove_booking
from backend.reservation_service import ReservationService
from backend.integrity_service import IntegrityService
from backend import validators
from backend.validators import ValidationError


class TestValidators:
    """Test existence and availability checks"""

    def test_flight_exists(self, db_manager, test_flight):
        """Test flight lookup by number"""
        assert validators.flight_exists('AA100')
        assert not validators.flight_exists('ZZ999')

    def test_user_exists(self, db_manager, test_user):
        """Test user lookup by ID"""
        assert validators.user_exists('U1')
        assert not validators.user_exists('U2')

    def test_seat_availability(self, db_manager, test_user):
        """Test seat is reported taken only on its own flight"""
        assert not validators.is_seat_available('AA100', 1)
        assert validators.is_seat_available('AA100', 2)
        assert validators.is_seat_available('UA200', 1)

    def test_seat_taken_by_other_excludes_holder(self, db_manager, test_user):
        """Test the holder of a seat is not counted as someone else"""
        assert not validators.is_seat_taken_by_other('AA100', 1, 'U1')
        assert validators.is_seat_taken_by_other('AA100', 1, 'U9')

    def test_taken_seats_empty_flight(self, db_manager, test_flight):
        """Test a flight without bookings has no taken seats"""
        assert validators.get_taken_seats('AA100') == []

    def test_taken_seats_lists_bookings(self, db_manager, large_flight):
        """Test every booked seat is returned"""
        for user_id, seat in (('U1', 7), ('U2', 3), ('U3', 12)):
            UserService.add_user(user_id, 'Passenger', 'UA200', seat)

        assert sorted(validators.get_taken_seats('UA200')) == [3, 7, 12]

    def test_available_tickets_unknown_flight(self, db_manager):
        """Test unknown flight has no counter"""
        assert validators.get_available_tickets('ZZ999') is None


class TestFlightService:
    """Test flight management"""

    def test_add_flight(self, db_manager):
        """Test flight creation starts with every ticket available"""
        flight = FlightService.add_flight('DL300', 'Delta', 'Atlanta', 'Boston', 120)

        assert validators.flight_exists('DL300')
        stored = FlightService.get_flight('DL300')
        assert stored == flight
        assert stored.available_tickets == stored.total_tickets == 120

    def test_add_duplicate_flight(self, db_manager, test_flight):
        """Test duplicate flight number is rejected without changes"""
        with pytest.raises(ValidationError, match="already exists"):
            FlightService.add_flight('AA100', 'Other', 'Miami', 'Seattle', 10)

        stored = FlightService.get_flight('AA100')
        assert stored.airline_name == 'Delta'
        assert stored.total_tickets == 2

    def test_modify_flight(self, db_manager, test_flight):
        """Test every field is overwritten"""
        updated = FlightService.modify_flight('AA100', 'American', 'Dallas', 'Phoenix', 10, 8)

        assert updated.airline_name == 'American'
        assert updated.starting_point == 'Dallas'
        assert updated.destination == 'Phoenix'
        assert updated.total_tickets == 10
        assert updated.available_tickets == 8
        assert FlightService.get_flight('AA100') == updated

    def test_modify_flight_accepts_inconsistent_counters(self, db_manager, test_flight):
        """Test available tickets above capacity are stored as given"""
        updated = FlightService.modify_flight('AA100', 'Delta', 'New York', 'Los Angeles', 2, 5)
        assert updated.available_tickets == 5

    def test_modify_missing_flight(self, db_manager):
        """Test modifying an unknown flight fails"""
        with pytest.raises(ValidationError, match="Flight not found"):
            FlightService.modify_flight('ZZ999', 'X', 'A', 'B', 1, 1)

    def test_delete_flight_cascades_to_users(self, db_manager, large_flight, test_flight, count_rows):
        """Test deleting a flight removes its passengers only"""
        UserService.add_user('U1', 'Ann', 'UA200', 1)
        UserService.add_user('U2', 'Bob', 'UA200', 2)
        UserService.add_user('U3', 'Cid', 'AA100', 1)

        removed = FlightService.delete_flight('UA200')

        assert removed == 2
        assert not validators.flight_exists('UA200')
        assert not validators.user_exists('U1')
        assert not validators.user_exists('U2')
        assert validators.user_exists('U3')
        assert count_rows('Flights') == 1
        assert IntegrityService.check_invariants() == []

    def test_delete_missing_flight(self, db_manager):
        """Test deleting an unknown flight fails"""
        with pytest.raises(ValidationError, match="Flight not found"):
            FlightService.delete_flight('ZZ999')

    def test_list_flights_ordered(self, db_manager):
        """Test flights are listed by flight number"""
        for number in ('UA1', 'AA1', 'DL1'):
            FlightService.add_flight(number, 'Air', 'A', 'B', 5)

        assert [f.flight_number for f in FlightService.list_flights()] == ['AA1', 'DL1', 'UA1']

    def test_seat_map(self, db_manager, large_flight):
        """Test seat map splits capacity into taken and free seats"""
        FlightService.modify_flight('UA200', 'United', 'Chicago', 'Denver', 5, 5)
        UserService.add_user('U1', 'Ann', 'UA200', 2)
        UserService.add_user('U2', 'Bob', 'UA200', 9)

        seat_map = FlightService.get_seat_map('UA200')

        assert sorted(seat_map.taken) == [2, 9]
        assert seat_map.free_ranges == [(1, 1), (3, 5)]
        assert seat_map.free_count == 4
        assert seat_map.format_free() == "1 3-5"

    def test_seat_map_large_capacity(self, db_manager):
        """Test free seats of a huge flight stay a handful of ranges"""
        FlightService.add_flight('BIG', 'Mega Air', 'A', 'B', 20_000_000)
        UserService.add_user('U1', 'Ann', 'BIG', 1)
        UserService.add_user('U2', 'Bob', 'BIG', 500)
        UserService.add_user('U3', 'Cid', 'BIG', 20_000_000)

        seat_map = FlightService.get_seat_map('BIG')

        assert seat_map.free_ranges == [(2, 499), (501, 19_999_999)]
        assert seat_map.free_count == 19_999_997
        assert seat_map.nth_free(0) == 2
        assert seat_map.nth_free(498) == 501
        assert seat_map.nth_free(seat_map.free_count - 1) == 19_999_999
        with pytest.raises(IndexError):
            seat_map.nth_free(seat_map.free_count)

    def test_seat_map_full_flight(self, db_manager, test_flight):
        """Test a fully booked flight has no free ranges"""
        UserService.add_user('U1', 'Ann', 'AA100', 2)
        UserService.add_user('U2', 'Bob', 'AA100', 1)

        seat_map = FlightService.get_seat_map('AA100')
        assert seat_map.free_ranges == []
        assert seat_map.free_count == 0
        assert seat_map.format_free() == ""

    def test_seat_map_missing_flight(self, db_manager):
        """Test seat map for unknown flight fails"""
        with pytest.raises(ValidationError):
            FlightService.get_seat_map('ZZ999')


class TestUserService:
    """Test passenger management"""

    def test_add_user_decrements_tickets(self, db_manager, test_flight):
        """Test adding a passenger takes exactly one ticket"""
        user = UserService.add_user('U1', 'John Doe', 'AA100', 1)

        assert user.seat_number == 1
        assert UserService.get_user('U1') == user
        assert FlightService.get_flight('AA100').available_tickets == 1
        assert IntegrityService.check_invariants() == []

    def test_add_duplicate_user(self, db_manager, test_user, count_rows):
        """Test duplicate user ID is rejected"""
        with pytest.raises(ValidationError, match="User with this ID already exists"):
            UserService.add_user('U1', 'Someone Else', 'AA100', 2)

        assert count_rows('Users') == 1
        assert FlightService.get_flight('AA100').available_tickets == 1

    def test_modify_user_same_flight(self, db_manager, test_user):
        """Test changing name and seat on the same flight"""
        updated = UserService.modify_user('U1', 'Johnny', 'AA100', 2)

        assert updated.name == 'Johnny'
        assert UserService.get_user('U1').seat_number == 2
        assert validators.is_seat_available('AA100', 1)
        assert IntegrityService.check_invariants() == []

    def test_modify_user_keeps_own_seat(self, db_manager, test_user):
        """Test a passenger can keep their current seat"""
        updated = UserService.modify_user('U1', 'John Q. Doe', 'AA100', 1)
        assert updated.seat_number == 1

    def test_modify_user_seat_taken_by_other(self, db_manager, test_user):
        """Test moving onto another passenger's seat fails"""
        UserService.add_user('U2', 'Jane', 'AA100', 2)

        with pytest.raises(ValidationError, match="Seat 2 is already taken"):
            UserService.modify_user('U1', 'John', 'AA100', 2)

        assert UserService.get_user('U1').seat_number == 1

    def test_modify_missing_user(self, db_manager, test_flight):
        """Test modifying an unknown user fails"""
        with pytest.raises(ValidationError, match="User not found"):
            UserService.modify_user('U9', 'Nobody', 'AA100', 1)

    def test_modify_user_missing_flight(self, db_manager, test_user):
        """Test moving to an unknown flight fails"""
        with pytest.raises(ValidationError, match="Flight doesn't exist"):
            UserService.modify_user('U1', 'John', 'ZZ999', 1)

    def test_modify_user_flight_change_leaves_counters(self, db_manager, test_user, large_flight):
        """Test changing flight does not move tickets by default"""
        UserService.modify_user('U1', 'John', 'UA200', 4, adjust_tickets=False)

        assert FlightService.get_flight('AA100').available_tickets == 1
        assert FlightService.get_flight('UA200').available_tickets == 50
        assert len(IntegrityService.find_counter_drift()) == 2

    def test_modify_user_flight_change_adjusts_counters(self, db_manager, test_user, large_flight):
        """Test changing flight moves the ticket when adjustment is on"""
        UserService.modify_user('U1', 'John', 'UA200', 4, adjust_tickets=True)

        assert FlightService.get_flight('AA100').available_tickets == 2
        assert FlightService.get_flight('UA200').available_tickets == 49
        assert IntegrityService.check_invariants() == []

    def test_delete_user_releases_ticket(self, db_manager, test_user):
        """Test deleting a passenger returns the ticket"""
        deleted = UserService.delete_user('U1')

        assert deleted.flight_number == 'AA100'
        assert not validators.user_exists('U1')
        assert FlightService.get_flight('AA100').available_tickets == 2
        assert IntegrityService.check_invariants() == []

    def test_delete_missing_user(self, db_manager, test_flight):
        """Test deleting an unknown user fails without changes"""
        with pytest.raises(ValidationError, match="User not found"):
            UserService.delete_user('U9')

        assert FlightService.get_flight('AA100').available_tickets == 2

    def test_list_users_ordered(self, db_manager, large_flight):
        """Test users are listed by ID"""
        for user_id, seat in (('U3', 1), ('U1', 2), ('U2', 3)):
            UserService.add_user(user_id, 'Passenger', 'UA200', seat)

        assert [u.user_id for u in UserService.list_users()] == ['U1', 'U2', 'U3']
        assert [u.seat_number for u in UserService.list_users_on_flight('UA200')] == [1, 2, 3]

    def test_booking_helpers_share_transaction(self, db_manager, test_flight):
        """Test insert_booking and remove_booking move the counter on the caller's connection"""
        with db_manager.transaction() as conn:
            insert_booking(conn, 'U1', 'Ann', 'AA100', 1)
            insert_booking(conn, 'U2', 'Bob', 'AA100', 2)
            removed = remove_booking(conn, 'U1')

        assert removed.seat_number == 1
        assert not validators.user_exists('U1')
        assert FlightService.get_flight('AA100').available_tickets == 1
        assert IntegrityService.check_invariants() == []

    def test_remove_booking_missing_user_rolls_back(self, db_manager, test_flight):
        """Test a failed removal undoes earlier work in the same transaction"""
        with pytest.raises(ValidationError, match="User not found"):
            with db_manager.transaction() as conn:
                insert_booking(conn, 'U1', 'Ann', 'AA100', 1)
                remove_booking(conn, 'U9')

        assert not validators.user_exists('U1')
        assert FlightService.get_flight('AA100').available_tickets == 2


class TestReservationService:
    """Test reservation entry points"""

    def test_make_reservation(self, db_manager, test_flight):
        """Test reservation books the seat and takes a ticket"""
        user = ReservationService.make_reservation('R1', 'Ann', 'AA100', 2)

        assert user.flight_number == 'AA100'
        assert not validators.is_seat_available('AA100', 2)
        assert FlightService.get_flight('AA100').available_tickets == 1
        assert IntegrityService.check_invariants() == []

    def test_make_reservation_existing_user(self, db_manager, test_user):
        """Test an existing passenger ID cannot reserve again"""
        with pytest.raises(ValidationError, match="User with this ID already exists"):
            ReservationService.make_reservation('U1', 'John', 'AA100', 2)

    def test_make_reservation_missing_flight(self, db_manager):
        """Test reserving on an unknown flight fails"""
        with pytest.raises(ValidationError, match="Flight not found"):
            ReservationService.make_reservation('R1', 'Ann', 'ZZ999', 1)

    def test_make_reservation_seat_taken(self, db_manager, test_user):
        """Test reserving a held seat fails"""
        with pytest.raises(ValidationError, match="Seat 1 is already taken"):
            ReservationService.make_reservation('R1', 'Ann', 'AA100', 1)

        assert FlightService.get_flight('AA100').available_tickets == 1

    def test_cancel_reservation(self, db_manager, test_flight):
        """Test cancelling frees the seat and the ticket"""
        ReservationService.make_reservation('R1', 'Ann', 'AA100', 1)
        cancelled = ReservationService.cancel_reservation('R1')

        assert cancelled.user_id == 'R1'
        assert validators.is_seat_available('AA100', 1)
        assert FlightService.get_flight('AA100').available_tickets == 2

    def test_cancel_missing_reservation(self, db_manager):
        """Test cancelling an unknown user fails"""
        with pytest.raises(ValidationError, match="User not found"):
            ReservationService.cancel_reservation('R9')


class TestIntegrityService:
    """Test invariant checks and counter repair"""

    def test_consistent_database(self, db_manager, test_user):
        """Test fresh bookings report no problems"""
        assert IntegrityService.check_invariants() == []
        assert IntegrityService.reconcile_available_tickets() == 0

    def test_detects_and_repairs_drift(self, db_manager, test_user):
        """Test manual counter edits are found and fixed"""
        FlightService.modify_flight('AA100', 'Delta', 'New York', 'Los Angeles', 2, 2)

        drift = IntegrityService.find_counter_drift()
        assert len(drift) == 1
        assert drift[0].flight_number == 'AA100'
        assert drift[0].recorded == 2
        assert drift[0].expected == 1

        assert IntegrityService.reconcile_available_tickets() == 1
        assert FlightService.get_flight('AA100').available_tickets == 1
        assert IntegrityService.check_invariants() == []
