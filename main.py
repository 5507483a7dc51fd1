"""
Main entry point for Airline Reservation System
Prepares the database and runs the console menu
"""
import logging
import os
import sys

from database.database import get_db_manager
from frontend.console import ConsoleShell


def configure_logging():
    """Send log records to stderr so they don't mix with the menu"""
    logging.basicConfig(
        level=os.getenv('LOG_LEVEL', 'WARNING').upper(),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main():
    """Main entry point"""
    configure_logging()

    # Initialize database; a failure is logged and the menu still runs
    db_manager = get_db_manager()
    if db_manager.initialize_database():
        print("Database initialized successfully")

    shell = ConsoleShell()
    return shell.run()


if __name__ == '__main__':
    sys.exit(main())
