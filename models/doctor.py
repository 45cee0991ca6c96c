from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from core.database import Base
from models._mixins import TimestampMixin, uuid_pk


class Doctor(TimestampMixin, Base):
    __tablename__ = "doctors"

    id = uuid_pk()

    # Owning profile (role = doctor)
    profile_id = Column(String(36), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)

    specialization = Column(String, nullable=False)
    license_number = Column(String, nullable=False)
    department = Column(String, nullable=True)
    years_experience = Column(Integer, nullable=True)
    bio = Column(Text, nullable=True)

    profile = relationship("Profile", back_populates="doctor")
    appointments = relationship("Appointment", back_populates="doctor", cascade="all, delete-orphan", passive_deletes=True)
    medical_records = relationship("MedicalRecord", back_populates="doctor", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Doctor {self.id} - {self.specialization}>"
