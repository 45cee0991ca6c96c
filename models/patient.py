# models/patient.py

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, String
from sqlalchemy.orm import relationship

from core.database import Base
from models._mixins import TimestampMixin, uuid_pk

GENDERS = ("male", "female", "other")


class Patient(TimestampMixin, Base):
    __tablename__ = "patients"
    __table_args__ = (
        CheckConstraint("gender IS NULL OR gender IN ('male', 'female', 'other')", name="ck_patients_gender"),
    )

    id = uuid_pk()

    # Owning profile (role = patient)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    # Demographics
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String, nullable=True)
    address = Column(String, nullable=True)

    # Emergency contact
    emergency_contact_name = Column(String, nullable=True)
    emergency_contact_phone = Column(String, nullable=True)
    insurance_info = Column(String, nullable=True)

    profile = relationship("Profile", back_populates="patient")
    appointments = relationship("Appointment", back_populates="patient", cascade="all, delete-orphan", passive_deletes=True)
    medical_records = relationship("MedicalRecord", back_populates="patient", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Patient {self.id}>"
