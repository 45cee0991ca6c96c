import logging

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import EHRError, ProvisioningNotSupported
from core.helpers import render_empty_state, value_or_dash
from core.session_manager import notify, require_role
from services.patient_service import filter_patients, list_patients, register_patient

LOGGER = logging.getLogger(__name__)


@st.dialog("Add New Patient")
def add_patient_dialog(ctx):
    st.caption("Enter the patient's information below.")
    with st.form("add_patient_form"):
        full_name = st.text_input("Full Name")
        email = st.text_input("Email")
        phone = st.text_input("Phone")
        date_of_birth = st.date_input("Date of Birth", value=None)
        gender = st.selectbox("Gender", ["male", "female", "other"], index=None, format_func=str.capitalize)
        address = st.text_input("Address")
        emergency_contact_name = st.text_input("Emergency Contact Name")
        emergency_contact_phone = st.text_input("Emergency Contact Phone")
        insurance_info = st.text_input("Insurance Information")
        submitted = st.form_submit_button("Add Patient", type="primary")

    if submitted:
        try:
            register_patient(
                ctx, full_name=full_name, email=email, phone=phone,
                date_of_birth=date_of_birth, gender=gender, address=address,
                emergency_contact_name=emergency_contact_name,
                emergency_contact_phone=emergency_contact_phone,
                insurance_info=insurance_info,
            )
        except ProvisioningNotSupported as e:
            # Accounts come from sign-up; nothing is written here
            notify("info", str(e))
            st.rerun()
        except EHRError as e:
            LOGGER.exception("Error creating patient")
            st.error(f"Failed to create patient. {e}")


def render_patient_card(p):
    with st.container(border=True):
        st.markdown(f"**{p.full_name}**")
        st.caption(f"✉️ {p.email}")
        if p.phone:
            st.caption(f"📞 {p.phone}")
        if p.address:
            st.caption(f"📍 {p.address}")
        tags = []
        if p.gender:
            tags.append(f":gray-badge[{p.gender.capitalize()}]")
        if p.date_of_birth:
            tags.append(f":blue-badge[Born {p.date_of_birth:%Y-%m-%d}]")
        if tags:
            st.markdown(" ".join(tags))
        if p.emergency_contact_name:
            contact = p.emergency_contact_name
            if p.emergency_contact_phone:
                contact += f" - {p.emergency_contact_phone}"
            st.markdown(f"**Emergency Contact:** {contact}")
        with st.expander("View Details"):
            st.write(f"**Insurance:** {value_or_dash(p.insurance_info)}")
            st.write(f"**Registered:** {p.created_at:%Y-%m-%d}" if p.created_at else "**Registered:** —")


def main():
    ctx = require_role("admin", "doctor")
    if ctx is None:
        return

    head, action = st.columns([4, 1])
    with head:
        st.title("Patients")
        st.caption("Manage patient records and information")
    with action:
        add_clicked = ctx.is_admin and st.button("➕ Add Patient", use_container_width=True)
    if add_clicked:
        add_patient_dialog(ctx)

    search = st.text_input("Search", placeholder="Search patients by name or email...", label_visibility="collapsed")

    with st.spinner("Loading patients..."):
        try:
            patients = list_patients(ctx)
        except (EHRError, SQLAlchemyError):
            LOGGER.exception("Error fetching patients")
            st.toast("Failed to load patients", icon="⚠️")
            patients = []

    shown = filter_patients(patients, search)

    if not shown:
        render_empty_state(
            "No patients found",
            "Try adjusting your search criteria." if search.strip() else "Get started by adding your first patient.",
        )
        if ctx.is_admin and not search.strip():
            if st.button("➕ Add First Patient"):
                add_patient_dialog(ctx)
        return

    cols = st.columns(3)
    for i, p in enumerate(shown):
        with cols[i % 3]:
            render_patient_card(p)


if __name__ == "__main__":
    main()
