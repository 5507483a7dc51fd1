"""
Console interface for airline reservation system
Menu loop for managing flights, passengers and reservations
"""
import logging
import os
import sys

from tabulate import tabulate

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from backend.flight_service import FlightService
from backend.user_service import UserService
from backend.reservation_service import ReservationService
from backend.validators import ValidationError, flight_exists, user_exists, get_taken_seats
from database import DatabaseError

logger = logging.getLogger(__name__)

MAIN_MENU = """
--- Airline Reservation System ---
1. Flight Management
2. User Management
3. Make Reservation
4. Cancel Reservation
5. Display Flights
6. Display Users
7. Show Available Seats
0. Exit"""

# Range of an SQLite INTEGER column
SQLITE_INT_MIN = -2 ** 63
SQLITE_INT_MAX = 2 ** 63 - 1

FLIGHT_HEADERS = ["Flight Number", "Airline", "From", "To", "Total", "Available"]
USER_HEADERS = ["User ID", "Name", "Flight Number", "Seat"]


class ConsoleShell:
    """Interactive menu reading from ``input_func`` and printing to stdout"""

    def __init__(self, input_func=input):
        self.input_func = input_func

        self.flight_actions = {
            '1': self.add_flight,
            '2': self.modify_flight,
            '3': self.delete_flight,
        }
        self.user_actions = {
            '1': self.add_user,
            '2': self.modify_user,
            '3': self.delete_user,
        }
        self.actions = {
            '1': self.flight_management,
            '2': self.user_management,
            '3': self.make_reservation,
            '4': self.cancel_reservation,
            '5': self.display_flights,
            '6': self.display_users,
            '7': self.show_available_seats,
        }

    def _ask(self, prompt: str) -> str:
        return self.input_func(prompt).strip()

    def _ask_int(self, prompt: str) -> int:
        value = self._ask(prompt)
        try:
            number = int(value)
        except ValueError:
            raise ValidationError("Invalid number.") from None
        if not SQLITE_INT_MIN <= number <= SQLITE_INT_MAX:
            raise ValidationError("Invalid number.")
        return number

    def _print_taken_seats(self, flight_number: str):
        taken = get_taken_seats(flight_number)
        print("Taken seats: " + " ".join(str(seat) for seat in taken))

    def run(self) -> int:
        """Run the menu until the user exits or input ends"""
        while True:
            print(MAIN_MENU)
            try:
                choice = self._ask("Enter your choice: ")
            except EOFError:
                print()
                choice = '0'

            if choice == '0':
                print("Exiting the system.")
                return 0

            action = self.actions.get(choice)
            if action is None:
                print("Invalid choice. Please try again.")
                continue

            try:
                action()
            except EOFError:
                print("\nExiting the system.")
                return 0
            except (ValueError, DatabaseError) as e:
                print(e)
                logger.debug("Operation aborted: %s", e)

    def flight_management(self):
        print("\nFlight Management:")
        print("1. Add Flight\n2. Modify Flight\n3. Delete Flight")
        action = self.flight_actions.get(self._ask("Enter choice: "))
        if action is None:
            print("Invalid choice.")
            return
        action()

    def user_management(self):
        print("\nUser Management:")
        print("1. Add User\n2. Modify User\n3. Delete User")
        action = self.user_actions.get(self._ask("Enter choice: "))
        if action is None:
            print("Invalid choice.")
            return
        action()

    def add_flight(self):
        flight_number = self._ask("\nEnter Flight Number: ")
        if flight_exists(flight_number):
            raise ValidationError("Flight with this number already exists!")

        airline_name = self._ask("Enter Airline Name: ")
        starting_point = self._ask("Enter Starting Point: ")
        destination = self._ask("Enter Destination: ")
        total_tickets = self._ask_int("Enter Total Tickets: ")

        FlightService.add_flight(flight_number, airline_name, starting_point, destination, total_tickets)
        print("Flight added successfully.")

    def modify_flight(self):
        flight_number = self._ask("\nEnter Flight Number to modify: ")
        if not flight_exists(flight_number):
            raise ValidationError("Flight not found!")

        airline_name = self._ask("Enter New Airline Name: ")
        starting_point = self._ask("Enter New Starting Point: ")
        destination = self._ask("Enter New Destination: ")
        total_tickets = self._ask_int("Enter New Total Tickets: ")
        available_tickets = self._ask_int("Enter New Available Tickets: ")

        FlightService.modify_flight(flight_number, airline_name, starting_point, destination,
                                    total_tickets, available_tickets)
        print("Flight modified successfully.")

    def delete_flight(self):
        flight_number = self._ask("\nEnter Flight Number to delete: ")
        FlightService.delete_flight(flight_number)
        print("Flight and associated users deleted successfully.")

    def add_user(self):
        user_id = self._ask("\nEnter User ID: ")
        if user_exists(user_id):
            raise ValidationError("User with this ID already exists!")

        name = self._ask("Enter Name: ")
        flight_number = self._ask("Enter Flight Number: ")
        if not flight_exists(flight_number):
            raise ValidationError("Flight doesn't exist!")

        self._print_taken_seats(flight_number)
        seat_number = self._ask_int("Enter Seat Number: ")

        UserService.add_user(user_id, name, flight_number, seat_number)
        print("User added successfully.")

    def modify_user(self):
        user_id = self._ask("\nEnter User ID to modify: ")
        if not user_exists(user_id):
            raise ValidationError("User not found!")

        name = self._ask("Enter New Name: ")
        flight_number = self._ask("Enter New Flight Number: ")
        if not flight_exists(flight_number):
            raise ValidationError("Flight doesn't exist!")

        seat_number = self._ask_int("Enter New Seat Number: ")

        UserService.modify_user(user_id, name, flight_number, seat_number)
        print("User modified successfully.")

    def delete_user(self):
        user_id = self._ask("\nEnter User ID to delete: ")
        UserService.delete_user(user_id)
        print("User deleted successfully.")

    def make_reservation(self):
        user_id = self._ask("\nEnter User ID: ")
        if user_exists(user_id):
            raise ValidationError("User with this ID already exists!")

        flight_number = self._ask("Enter Flight Number: ")
        flight = FlightService.get_flight(flight_number)
        if flight is None:
            raise ValidationError("Flight not found.")
        if flight.available_tickets <= 0:
            raise ValidationError("No available tickets for this flight.")

        self._print_taken_seats(flight_number)
        name = self._ask("Enter Name: ")
        seat_number = self._ask_int("Enter Seat Number: ")

        ReservationService.make_reservation(user_id, name, flight_number, seat_number)
        print("Reservation successful! Seat booked.")

    def cancel_reservation(self):
        user_id = self._ask("\nEnter User ID to cancel reservation: ")
        ReservationService.cancel_reservation(user_id)
        print("Reservation canceled successfully.")

    def display_flights(self):
        print("\n--- Flight Information ---")
        flights = FlightService.list_flights()
        if not flights:
            print("No flights found.")
            return
        print(tabulate([flight.as_row() for flight in flights], headers=FLIGHT_HEADERS, tablefmt="github"))

    def display_users(self):
        print("\n--- User Information ---")
        users = UserService.list_users()
        if not users:
            print("No users found.")
            return
        print(tabulate([user.as_row() for user in users], headers=USER_HEADERS, tablefmt="github"))

    def show_available_seats(self):
        flight_number = self._ask("Enter Flight Number to see available seats: ")
        seat_map = FlightService.get_seat_map(flight_number)
        print("Taken seats: " + " ".join(str(seat) for seat in seat_map.taken))
        print(f"Free seats ({seat_map.free_count}): {seat_map.format_free()}")
