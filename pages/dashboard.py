import logging
from datetime import date

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import EHRError
from core.helpers import status_badge
from core.session_manager import notify, refresh_context, require_login
from core.time_utils import today
from models import GENDERS
from services.dashboard_service import DashboardStats, get_stats, recent_appointments
from services.doctor_service import get_doctor
from services.patient_service import get_patient
from services.profile_service import get_own_profile, update_my_details

LOGGER = logging.getLogger(__name__)


def render_stats(ctx, stats: DashboardStats):
    cards = [
        ("Today's Appointments", stats.today_appointments, "Scheduled for today"),
        ("Total Appointments", stats.total_appointments, "All appointments"),
        ("Medical Records", stats.total_records, "Total records"),
    ]
    if ctx.is_admin:
        cards.insert(0, ("Total Patients", stats.total_patients, "Registered patients"))

    cols = st.columns(len(cards))
    for col, (title, value, help_text) in zip(cols, cards):
        with col:
            st.metric(title, value, help=help_text, border=True)


def render_recent(ctx, appointments):
    st.subheader("Recent Appointments")
    st.caption("Your upcoming and recent appointments")
    if not appointments:
        st.caption("No recent appointments")
    for a in appointments:
        with st.container(border=True):
            left, right = st.columns([4, 1])
            with left:
                who = f"Dr. {a.doctor_name}" if ctx.is_patient else a.patient_name
                st.markdown(f"**{who}**")
                st.caption(f"{a.appointment_date:%Y-%m-%d} at {a.appointment_time:%H:%M}")
            with right:
                st.markdown(status_badge(a.status))
    st.page_link("pages/appointments.py", label="View All Appointments", icon="📅")


def render_quick_actions(ctx):
    st.subheader("Quick Actions")
    st.caption("Common tasks you might want to perform")
    if ctx.is_admin:
        st.page_link("pages/patients.py", label="Manage Patients", icon="👥")
        st.page_link("pages/doctors.py", label="Manage Doctors", icon="🩺")
    st.page_link(
        "pages/appointments.py",
        label="Book Appointment" if ctx.is_patient else "Manage Appointments",
        icon="📅",
    )
    st.page_link("pages/medical_records.py", label="View Medical Records", icon="📄")


def render_my_details(ctx):
    """Own profile plus the caller's patient/doctor entry."""
    with st.expander("✏️ My Details", expanded=False):
        try:
            profile = get_own_profile(ctx)
            patient = get_patient(ctx, ctx.patient_id) if ctx.is_patient and ctx.patient_id else None
            doctor = get_doctor(ctx, ctx.doctor_id) if ctx.is_doctor and ctx.doctor_id else None
        except (EHRError, SQLAlchemyError):
            LOGGER.exception("Failed to load details for %s", ctx.email)
            st.error("Failed to load your details")
            return

        with st.form("my_details_form"):
            full_name = st.text_input("Full Name", value=profile.full_name)
            phone = st.text_input("Phone", value=profile.phone or "")

            patient_fields = {}
            if patient is not None:
                genders = [""] + list(GENDERS)
                patient_fields["date_of_birth"] = st.date_input("Date of Birth", value=patient.date_of_birth, min_value=date(1900, 1, 1), max_value=today())
                patient_fields["gender"] = st.selectbox(
                    "Gender", genders,
                    index=genders.index(patient.gender) if patient.gender in genders else 0,
                    format_func=lambda g: g.capitalize() or "—",
                )
                patient_fields["address"] = st.text_input("Address", value=patient.address or "")
                patient_fields["emergency_contact_name"] = st.text_input("Emergency Contact Name", value=patient.emergency_contact_name or "")
                patient_fields["emergency_contact_phone"] = st.text_input("Emergency Contact Phone", value=patient.emergency_contact_phone or "")
                patient_fields["insurance_info"] = st.text_input("Insurance", value=patient.insurance_info or "")

            doctor_fields = {}
            if doctor is not None:
                doctor_fields["specialization"] = st.text_input("Specialization", value=doctor.specialization)
                doctor_fields["license_number"] = st.text_input("License Number", value=doctor.license_number)
                doctor_fields["department"] = st.text_input("Department", value=doctor.department or "")
                doctor_fields["years_experience"] = st.number_input(
                    "Years of Experience", min_value=0, max_value=80, step=1, value=int(doctor.years_experience or 0)
                )
                doctor_fields["bio"] = st.text_area("Bio", value=doctor.bio or "")

            submitted = st.form_submit_button("Save Changes", type="primary")

        if submitted:
            try:
                new_ctx = update_my_details(
                    ctx, full_name=full_name, phone=phone,
                    patient_fields=patient_fields, doctor_fields=doctor_fields,
                )
            except (EHRError, SQLAlchemyError) as e:
                LOGGER.exception("Failed to save details for %s", ctx.email)
                st.error(f"Failed to save your details. {e if isinstance(e, EHRError) else ''}".strip())
                return
            refresh_context(new_ctx)
            notify("success", "Your details were updated")
            st.rerun()


def main():
    ctx = require_login()

    st.title(f"Welcome back, {ctx.full_name}")
    st.caption(
        f"Here's what's happening with your {'healthcare system' if ctx.is_admin else 'health'} today."
    )

    with st.spinner("Loading dashboard..."):
        try:
            stats = get_stats(ctx)
            appointments = recent_appointments(ctx)
        except (EHRError, SQLAlchemyError):
            LOGGER.exception("Error fetching dashboard data")
            st.toast("Failed to load dashboard", icon="⚠️")
            stats, appointments = DashboardStats(), []

    render_stats(ctx, stats)

    left, right = st.columns(2)
    with left:
        render_recent(ctx, appointments)
    with right:
        render_quick_actions(ctx)
        if not ctx.is_admin:
            render_my_details(ctx)


if __name__ == "__main__":
    main()
