# models/appointment.py

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, String, Text, Time
from sqlalchemy.orm import relationship

from core.database import Base
from models._mixins import TimestampMixin, uuid_pk

STATUSES = ("scheduled", "completed", "cancelled", "no_show")


class Appointment(TimestampMixin, Base):
    __tablename__ = "appointments"
    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'completed', 'cancelled', 'no_show')",
            name="ck_appointments_status",
        ),
    )

    id = uuid_pk()

    patient_id = Column(String(36), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)

    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=30)

    # Workflow status
    status = Column(String, nullable=False, default="scheduled")

    reason = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Doctor", back_populates="appointments")

    def __repr__(self):
        return f"<Appointment {self.appointment_date} {self.appointment_time} ({self.status})>"
