"""Plain display rows handed from services to pages.

Built while the database session is still open so pages never touch
lazy-loaded ORM attributes.
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class PatientRow:
    id: str
    profile_id: str
    full_name: str
    email: str
    phone: Optional[str]
    date_of_birth: Optional[date]
    gender: Optional[str]
    address: Optional[str]
    emergency_contact_name: Optional[str]
    emergency_contact_phone: Optional[str]
    insurance_info: Optional[str]
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class DoctorRow:
    id: str
    profile_id: str
    full_name: str
    email: str
    phone: Optional[str]
    specialization: str
    license_number: str
    department: Optional[str]
    years_experience: Optional[int]
    bio: Optional[str]
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AppointmentRow:
    id: str
    patient_id: str
    doctor_id: str
    patient_name: str
    doctor_name: str
    specialization: str
    appointment_date: date
    appointment_time: time
    duration_minutes: int
    status: str
    reason: Optional[str]
    notes: Optional[str]


@dataclass(frozen=True)
class RecordRow:
    id: str
    patient_id: str
    doctor_id: str
    appointment_id: Optional[str]
    patient_name: str
    doctor_name: str
    specialization: str
    record_date: date
    diagnosis: Optional[str]
    symptoms: Optional[str]
    treatment: Optional[str]
    medications: Optional[str]
    lab_results: Optional[str]
    notes: Optional[str]


@dataclass(frozen=True)
class Option:
    """A select-box choice: id plus display label."""

    id: str
    label: str
