"""
Test data generator for populating the database with valid entries
Goes through the service layer so ticket counters stay consistent
"""
import random
from faker import Faker
from typing import Optional
import sys
import os

# Add parent directory to path for imports
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.database import get_db_manager
from backend.flight_service import FlightService
from backend.reservation_service import ReservationService
from backend.validators import ValidationError


class DataGenerator:
    """Generate realistic test data for the airline reservation system"""

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator

        Args:
            seed: Random seed for reproducibility
        """
        if seed is not None:
            random.seed(seed)
            Faker.seed(seed)

        self.faker = Faker()

        # Common airports
        self.airports = [
            'New York', 'Los Angeles', 'Chicago', 'Dallas', 'Denver',
            'San Francisco', 'Seattle', 'Las Vegas', 'Orlando', 'Miami',
            'Atlanta', 'Boston', 'Houston', 'Phoenix', 'Philadelphia',
        ]

        # Airline name and two-letter code
        self.airlines = [
            ('American Airlines', 'AA'),
            ('Delta', 'DL'),
            ('United', 'UA'),
            ('Southwest', 'WN'),
            ('Alaska Airlines', 'AS'),
        ]

        self.capacities = [20, 50, 120, 180]

    def generate_flights(self, count: int = 10):
        """
        Generate flights

        Args:
            count: Number of flights to generate

        Returns:
            List of created flights
        """
        flights = []

        print(f"Generating {count} flights...")

        attempts = 0
        while len(flights) < count and attempts < count * 10:
            attempts += 1
            airline, code = random.choice(self.airlines)
            origin, destination = random.sample(self.airports, 2)

            try:
                flight = FlightService.add_flight(
                    flight_number=f"{code}{random.randint(100, 9999)}",
                    airline_name=airline,
                    starting_point=origin,
                    destination=destination,
                    total_tickets=random.choice(self.capacities)
                )
                flights.append(flight)
            except ValidationError:
                # Flight number collision, draw another one
                continue

        print(f"Generated {len(flights)} flights")
        return flights

    def generate_reservations(self, flights, count: int = 50):
        """
        Book passengers onto random free seats

        Args:
            flights: Flights to book on
            count: Number of reservations to attempt

        Returns:
            List of created users
        """
        users = []

        print(f"Generating {count} reservations...")

        for i in range(count):
            flight = FlightService.get_flight(random.choice(flights).flight_number)
            if flight.available_tickets <= 0:
                continue

            seat_map = FlightService.get_seat_map(flight.flight_number)
            if not seat_map.free_ranges:
                continue

            try:
                user = ReservationService.make_reservation(
                    user_id=f"U{i + 1:05d}",
                    name=self.faker.name(),
                    flight_number=flight.flight_number,
                    seat_number=seat_map.nth_free(random.randrange(seat_map.free_count))
                )
                users.append(user)
                if (i + 1) % 50 == 0:
                    print(f"  Created {len(users)}/{count} reservations")
            except ValidationError as e:
                print(f"  Error creating reservation: {e}")

        print(f"Generated {len(users)} reservations")
        return users

    def generate_sample_dataset(self, num_flights: int = 10, num_reservations: int = 50):
        """Generate a complete sample dataset"""
        print("=" * 60)
        print("GENERATING SAMPLE DATASET")
        print("=" * 60)

        get_db_manager().create_tables()

        flights = self.generate_flights(num_flights)
        users = self.generate_reservations(flights, num_reservations) if flights else []

        print("\n" + "=" * 60)
        print("DATASET GENERATION COMPLETE")
        print("=" * 60)
        print(f"Flights: {len(flights)}")
        print(f"Reservations: {len(users)}")

        return {'flights': len(flights), 'reservations': len(users)}


if __name__ == '__main__':
    import argparse

    parser = argparse.ArgumentParser(description="Populate the reservation database with sample data.")
    parser.add_argument('--flights', type=int, default=10, help="Number of flights to create")
    parser.add_argument('--users', type=int, default=50, help="Number of reservations to attempt")
    parser.add_argument('--seed', type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args()

    generator = DataGenerator(seed=args.seed)
    generator.generate_sample_dataset(num_flights=args.flights, num_reservations=args.users)
