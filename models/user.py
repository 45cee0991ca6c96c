from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from core.database import Base
from models._mixins import TimestampMixin, uuid_pk


class User(TimestampMixin, Base):
    """Sign-in identity. Application data hangs off the profile."""

    __tablename__ = "users"

    id = uuid_pk()

    email = Column(String, unique=True, index=True, nullable=False)

    password_hash = Column(String, nullable=False)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"


class AuthSession(Base):
    __tablename__ = "auth_sessions"

    token = Column(String(64), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="sessions")

    def __repr__(self):
        return f"<AuthSession user={self.user_id} expires={self.expires_at}>"
