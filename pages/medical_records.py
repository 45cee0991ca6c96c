import logging

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import EHRError
from core.helpers import render_empty_state
from core.session_manager import notify, require_login
from core.time_utils import today
from services.appointment_service import completed_appointments, treated_patients
from services.record_service import create_record, filter_records, list_records

LOGGER = logging.getLogger(__name__)

SECTIONS = (
    ("symptoms", "Symptoms"),
    ("diagnosis", "Diagnosis"),
    ("treatment", "Treatment"),
    ("medications", "Medications"),
    ("lab_results", "Lab Results"),
    ("notes", "Notes"),
)


@st.dialog("Create Medical Record", width="large")
def record_dialog(ctx):
    st.caption("Document the patient's visit and treatment.")
    try:
        patients = treated_patients(ctx)
        visits = completed_appointments(ctx)
    except (EHRError, SQLAlchemyError):
        LOGGER.exception("Error fetching doctor data")
        st.error("Failed to load your patients")
        return

    with st.form("record_form"):
        patient = st.selectbox("Patient", patients, index=None, placeholder="Select patient", format_func=lambda o: o.label)
        visit = st.selectbox(
            "Related Appointment (optional)", visits, index=None,
            placeholder="Select appointment", format_func=lambda o: o.label,
        )
        record_date = st.date_input("Record Date", value=today())
        fields = {}
        for key, label in SECTIONS:
            fields[key] = st.text_area(label, height=80)
        submitted = st.form_submit_button("Create Record", type="primary")

    if submitted:
        try:
            create_record(
                ctx,
                patient_id=patient.id if patient else None,
                appointment_id=visit.id if visit else None,
                record_date=record_date,
                **fields,
            )
        except (EHRError, SQLAlchemyError) as e:
            LOGGER.exception("Error creating medical record")
            st.error(f"Failed to create medical record. {e if isinstance(e, EHRError) else ''}".strip())
            return
        notify("success", "Medical record created successfully")
        st.rerun()


def render_record(ctx, r):
    with st.container(border=True):
        title = f"Dr. {r.doctor_name}" if ctx.is_patient else r.patient_name
        st.markdown(f"#### {title}")
        st.caption(f"📅 {r.record_date:%Y-%m-%d}  ·  🩺 {r.specialization}")
        for key, label in SECTIONS:
            value = getattr(r, key)
            if value:
                st.markdown(f"**{label}:** {value}")


def main():
    ctx = require_login()

    with st.spinner("Loading medical records..."):
        try:
            records = list_records(ctx)
        except (EHRError, SQLAlchemyError):
            LOGGER.exception("Error fetching medical records")
            st.toast("Failed to load medical records", icon="⚠️")
            records = []

    if ctx.is_patient and not records:
        st.title("My Medical Records")
        st.caption("Your health history and treatment records")
        render_empty_state(
            "No medical records yet",
            "Your medical records will appear here after doctor visits and treatments.",
        )
        return

    head, action = st.columns([4, 1])
    with head:
        st.title("My Medical Records" if ctx.is_patient else "Medical Records")
        st.caption(
            "Your health history and treatment records" if ctx.is_patient
            else "Patient records you have created" if ctx.is_doctor
            else "All medical records"
        )
    with action:
        open_dialog = ctx.is_doctor and st.button("➕ New Record", use_container_width=True)
    if open_dialog:
        record_dialog(ctx)

    search = st.text_input("Search", placeholder="Search medical records...", label_visibility="collapsed")
    shown = filter_records(records, search)

    for r in shown:
        render_record(ctx, r)

    if not shown:
        render_empty_state(
            "No medical records found",
            "Try adjusting your search criteria." if search.strip()
            else "Records appear here once a doctor documents a visit.",
        )
        if ctx.is_doctor and not search.strip() and st.button("➕ Create First Record"):
            record_dialog(ctx)


if __name__ == "__main__":
    main()
