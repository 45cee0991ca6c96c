from sqlalchemy import Column, Date, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from core.database import Base
from core.time_utils import today
from models._mixins import TimestampMixin, uuid_pk


class MedicalRecord(TimestampMixin, Base):
    __tablename__ = "medical_records"

    id = uuid_pk()

    patient_id = Column(String(36), ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(String(36), ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_id = Column(String(36), ForeignKey("appointments.id", ondelete="SET NULL"), nullable=True)

    record_date = Column(Date, nullable=False, default=today)

    # Clinical free text
    diagnosis = Column(Text, nullable=True)
    symptoms = Column(Text, nullable=True)
    treatment = Column(Text, nullable=True)
    medications = Column(Text, nullable=True)
    lab_results = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    patient = relationship("Patient", back_populates="medical_records")
    doctor = relationship("Doctor", back_populates="medical_records")
    appointment = relationship("Appointment")

    def __repr__(self):
        return f"<MedicalRecord {self.record_date} patient={self.patient_id}>"
