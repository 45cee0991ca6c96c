import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.exceptions import ValidationError

LOGGER = logging.getLogger(__name__)


def commit(db: Session, what: str):
    """Commit, turning constraint violations into ValidationError."""
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        LOGGER.warning("Constraint violation while saving %s: %s", what, exc.orig)
        raise ValidationError(f"Could not save {what}: the data violates a database constraint.") from exc
