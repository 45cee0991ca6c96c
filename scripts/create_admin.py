"""Provision an administrator account.

Admins cannot sign up from the web UI, so run this once per admin:

    python -m scripts.create_admin admin@example.org "Ada Admin"
"""
import sys
from getpass import getpass

from core.database import create_tables
from core.exceptions import ValidationError
from core.logging_config import configure_logging
from services.user_service import create_admin


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("usage: python -m scripts.create_admin EMAIL [FULL NAME]")
        return 2

    configure_logging()
    create_tables()

    email = argv[0]
    full_name = " ".join(argv[1:]) or None
    password = getpass("Password: ")
    if password != getpass("Confirm password: "):
        print("Passwords do not match.")
        return 1

    try:
        user = create_admin(email, password, full_name)
    except ValidationError as e:
        print(f"Could not create admin: {e}")
        return 1

    print(f"Admin account created for {user.email}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
