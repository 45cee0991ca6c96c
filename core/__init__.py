from .database import get_db_session, get_db_context, SessionLocal, Base, configure, create_tables
from .context import SessionContext
from .exceptions import (
    EHRError,
    AuthenticationError,
    AccessDenied,
    ValidationError,
    NotFoundError,
    ProvisioningNotSupported,
)

__all__ = [
    "get_db_session",
    "get_db_context",
    "SessionLocal",
    "Base",
    "configure",
    "create_tables",
    "SessionContext",
    "EHRError",
    "AuthenticationError",
    "AccessDenied",
    "ValidationError",
    "NotFoundError",
    "ProvisioningNotSupported",
]
