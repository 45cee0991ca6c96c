import uuid

from sqlalchemy import Column, DateTime, String

from core.time_utils import now_utc


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=now_utc, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=now_utc, onupdate=now_utc, nullable=False)


def uuid_pk():
    return Column(String(36), primary_key=True, default=new_id)
