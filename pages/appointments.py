import logging

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import EHRError
from core.helpers import render_empty_state, status_badge
from core.session_manager import notify, require_login
from core.time_utils import today
from models import STATUSES
from services.appointment_service import (
    DEFAULT_DURATION,
    DURATIONS,
    allowed_transitions,
    create_appointment,
    filter_appointments,
    list_appointments,
    update_status,
)
from services.doctor_service import doctor_options
from services.patient_service import patient_options

LOGGER = logging.getLogger(__name__)

STATUS_LABELS = {
    "all": "All Status",
    "scheduled": "Scheduled",
    "completed": "Completed",
    "cancelled": "Cancelled",
    "no_show": "No Show",
}
ACTION_LABELS = {"completed": "✅ Complete", "cancelled": "❌ Cancel"}


def _book_label(ctx) -> str:
    return "Book Appointment" if ctx.is_patient else "Schedule Appointment"


@st.dialog("New Appointment")
def appointment_dialog(ctx):
    st.caption("Fill in the appointment details below.")
    try:
        doctors = doctor_options(ctx)
        patients = [] if ctx.is_patient else patient_options(ctx)
    except (EHRError, SQLAlchemyError):
        LOGGER.exception("Error fetching doctors and patients")
        st.error("Failed to load doctors and patients")
        return

    if ctx.is_doctor:
        doctors = [d for d in doctors if d.id == ctx.doctor_id]

    with st.form("appointment_form"):
        patient = None
        if not ctx.is_patient:
            patient = st.selectbox("Patient", patients, index=None, placeholder="Select patient", format_func=lambda o: o.label)
        doctor = st.selectbox("Doctor", doctors, index=None, placeholder="Select doctor", format_func=lambda o: o.label)
        appointment_date = st.date_input("Date", value=today(), min_value=today())
        appointment_time = st.time_input("Time", value=None, step=900)
        duration = st.selectbox(
            "Duration (minutes)", DURATIONS, index=DURATIONS.index(DEFAULT_DURATION),
            format_func=lambda m: "1 hour" if m == 60 else f"{m} minutes",
        )
        reason = st.text_input("Reason for Visit", placeholder="Brief description of visit purpose")
        notes = st.text_area("Additional Notes", placeholder="Any additional information...")
        submitted = st.form_submit_button(_book_label(ctx), type="primary")

    if submitted:
        try:
            create_appointment(
                ctx,
                patient_id=patient.id if patient else None,
                doctor_id=doctor.id if doctor else None,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                duration_minutes=duration,
                reason=reason,
                notes=notes,
            )
        except (EHRError, SQLAlchemyError) as e:
            LOGGER.exception("Error creating appointment")
            # Dialog stays open for a manual retry
            st.error(f"Failed to schedule appointment. {e if isinstance(e, EHRError) else ''}".strip())
            return
        notify("success", "Appointment scheduled successfully")
        st.rerun()


def change_status(ctx, appointment_id: str, new_status: str):
    try:
        update_status(ctx, appointment_id, new_status)
    except (EHRError, SQLAlchemyError):
        LOGGER.exception("Error updating appointment %s", appointment_id)
        st.toast("Failed to update appointment", icon="⚠️")
        return
    notify("success", f"Appointment {new_status} successfully")
    st.rerun()


def render_appointment(ctx, a):
    with st.container(border=True):
        left, right = st.columns([4, 1])
        with left:
            if ctx.is_patient:
                st.markdown(f"#### Dr. {a.doctor_name}")
                st.caption(a.specialization)
            else:
                st.markdown(f"#### {a.patient_name}")
                st.caption(f"Patient appointment · Dr. {a.doctor_name}")
            info = f"📅 {a.appointment_date:%Y-%m-%d}  ·  🕒 {a.appointment_time:%H:%M} ({a.duration_minutes} min)"
            if a.reason:
                info += f"  ·  Reason: {a.reason}"
            st.write(info)
            if a.notes:
                st.caption(f"**Notes:** {a.notes}")
        with right:
            st.markdown(status_badge(a.status))
            if not ctx.is_patient:
                for target in sorted(allowed_transitions(a.status)):
                    if st.button(ACTION_LABELS.get(target, target), key=f"{target}_{a.id}", use_container_width=True):
                        change_status(ctx, a.id, target)


def main():
    ctx = require_login()

    head, action = st.columns([4, 1])
    with head:
        st.title("Appointments")
        st.caption(
            "Manage your appointments" if ctx.is_patient
            else "Your appointment schedule" if ctx.is_doctor
            else "Manage all appointments"
        )
    with action:
        open_dialog = st.button(f"➕ {_book_label(ctx)}", use_container_width=True)
    if open_dialog:
        appointment_dialog(ctx)

    search_col, status_col = st.columns([3, 1])
    with search_col:
        search = st.text_input("Search", placeholder="Search appointments...", label_visibility="collapsed")
    with status_col:
        status = st.selectbox(
            "Status", ["all", *STATUSES], format_func=STATUS_LABELS.get, label_visibility="collapsed"
        )

    with st.spinner("Loading appointments..."):
        try:
            appointments = list_appointments(ctx)
        except (EHRError, SQLAlchemyError):
            LOGGER.exception("Error fetching appointments")
            st.toast("Failed to load appointments", icon="⚠️")
            appointments = []

    shown = filter_appointments(appointments, search, status)

    for a in shown:
        render_appointment(ctx, a)

    if not shown:
        filtered = bool(search.strip()) or status != "all"
        render_empty_state(
            "No appointments found",
            "Try adjusting your search criteria." if filtered
            else "Get started by scheduling your first appointment.",
        )
        if not filtered:
            label = "Book Your First Appointment" if ctx.is_patient else "Schedule First Appointment"
            if st.button(f"➕ {label}"):
                appointment_dialog(ctx)


if __name__ == "__main__":
    main()
