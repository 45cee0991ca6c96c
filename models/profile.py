from sqlalchemy import CheckConstraint, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from core.database import Base
from models._mixins import TimestampMixin, uuid_pk

ROLES = ("patient", "doctor", "admin")


class Profile(TimestampMixin, Base):
    """Role-tagged record linking an identity to its display data."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("role IN ('patient', 'doctor', 'admin')", name="ck_profiles_role"),
    )

    id = uuid_pk()
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(String, nullable=False, default="patient")

    user = relationship("User", back_populates="profile")
    patient = relationship("Patient", back_populates="profile", uselist=False, cascade="all, delete-orphan", passive_deletes=True)
    doctor = relationship("Doctor", back_populates="profile", uselist=False, cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Profile {self.full_name} ({self.role})>"
