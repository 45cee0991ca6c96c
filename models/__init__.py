from .user import User, AuthSession
from .profile import Profile, ROLES
from .patient import Patient, GENDERS
from .doctor import Doctor
from .appointment import Appointment, STATUSES
from .medical_record import MedicalRecord

__all__ = [
    "User",
    "AuthSession",
    "Profile",
    "ROLES",
    "Patient",
    "GENDERS",
    "Doctor",
    "Appointment",
    "STATUSES",
    "MedicalRecord",
]
