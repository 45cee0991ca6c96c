"""Route table for the app shell and the role-aware menu."""
from dataclasses import dataclass


@dataclass(frozen=True)
class Route:
    path: str
    title: str
    script: str
    icon: str
    protected: bool = True


AUTH = Route("/auth", "Sign In", "pages/auth.py", "🔐", protected=False)
DASHBOARD = Route("/", "Dashboard", "pages/dashboard.py", "❤️")
PATIENTS = Route("/patients", "Patients", "pages/patients.py", "👥")
DOCTORS = Route("/doctors", "Doctors", "pages/doctors.py", "🩺")
APPOINTMENTS = Route("/appointments", "Appointments", "pages/appointments.py", "📅")
MEDICAL_RECORDS = Route("/medical-records", "Medical Records", "pages/medical_records.py", "📄")

ROUTES = (AUTH, DASHBOARD, PATIENTS, DOCTORS, APPOINTMENTS, MEDICAL_RECORDS)
MENU = (DASHBOARD, PATIENTS, DOCTORS, APPOINTMENTS, MEDICAL_RECORDS)

# Menu entries hidden per role
HIDDEN = {
    "doctor": {DOCTORS},
    "patient": {PATIENTS, DOCTORS},
}

PORTALS = {
    "admin": "Admin Portal",
    "doctor": "Doctor Portal",
    "patient": "Patient Portal",
}


def url_path(route: Route) -> str:
    """Streamlit url_path: no leading slash, empty for the root."""
    return route.path.lstrip("/")


def menu_for_role(role: str | None) -> list[Route]:
    hidden = HIDDEN.get(role or "patient", set())
    return [r for r in MENU if r not in hidden]


def portal_name(role: str | None) -> str:
    return PORTALS.get(role or "", "Patient Portal")


def find_route(path: str) -> Route | None:
    """Exact path lookup; None means not found."""
    normalized = "/" + (path or "").strip("/")
    for route in ROUTES:
        if route.path == normalized:
            return route
    return None


def resolve(path: str, signed_in: bool) -> Route | None:
    """Where a request for ``path`` lands: protected routes send anonymous users to /auth."""
    route = find_route(path)
    if route is None:
        return None
    if route.protected and not signed_in:
        return AUTH
    if route is AUTH and signed_in:
        return DASHBOARD
    return route
