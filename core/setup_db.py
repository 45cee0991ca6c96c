# core/setup_db.py

import logging

from core.database import create_tables
from core.logging_config import configure_logging
from services.user_service import ensure_demo_accounts

LOGGER = logging.getLogger(__name__)


def main():
    configure_logging()
    LOGGER.info("Creating database tables...")

    # Create all SQLAlchemy tables
    create_tables()

    # Insert demo accounts
    if ensure_demo_accounts():
        LOGGER.info("Demo accounts created.")

    LOGGER.info("Database initialized successfully.")


if __name__ == "__main__":
    main()
