from dataclasses import dataclass, replace
from typing import Optional


@dataclass(frozen=True)
class SessionContext:
    """Who is signed in, passed explicitly to every service call.

    ``patient_id``/``doctor_id`` point at the caller's own directory row
    and are None when the profile has none.
    """

    token: str
    user_id: str
    profile_id: str
    role: str
    full_name: str
    email: str
    patient_id: Optional[str] = None
    doctor_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_doctor(self) -> bool:
        return self.role == "doctor"

    @property
    def is_patient(self) -> bool:
        return self.role == "patient"

    def with_profile(self, full_name: str) -> "SessionContext":
        return replace(self, full_name=full_name)
