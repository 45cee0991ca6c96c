import logging

import streamlit as st
from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import EHRError, ProvisioningNotSupported
from core.helpers import render_empty_state
from core.session_manager import notify, require_login
from services.doctor_service import filter_doctors, list_doctors, register_doctor

LOGGER = logging.getLogger(__name__)


def load_doctors(ctx):
    with st.spinner("Loading doctors..."):
        try:
            return list_doctors(ctx)
        except (EHRError, SQLAlchemyError):
            LOGGER.exception("Error fetching doctors")
            st.toast("Failed to load doctors", icon="⚠️")
            return []


@st.dialog("Add New Doctor")
def add_doctor_dialog(ctx):
    st.caption("Enter the doctor's information below.")
    with st.form("add_doctor_form"):
        full_name = st.text_input("Full Name")
        email = st.text_input("Email")
        phone = st.text_input("Phone")
        specialization = st.text_input("Specialization", placeholder="e.g., Cardiology, Pediatrics")
        license_number = st.text_input("License Number")
        department = st.text_input("Department")
        years_experience = st.number_input("Years of Experience", min_value=0, max_value=80, step=1)
        bio = st.text_area("Bio")
        submitted = st.form_submit_button("Add Doctor", type="primary")

    if submitted:
        try:
            register_doctor(
                ctx, full_name=full_name, email=email, phone=phone,
                specialization=specialization, license_number=license_number,
                department=department, years_experience=years_experience, bio=bio,
            )
        except ProvisioningNotSupported as e:
            notify("info", str(e))
            st.rerun()
        except EHRError as e:
            LOGGER.exception("Error creating doctor")
            st.error(f"Failed to create doctor. {e}")


def render_directory(ctx):
    """Read-only directory for patients."""
    st.title("Our Doctors")
    st.caption("Find the right specialist for your needs")

    search = st.text_input("Search", placeholder="Search doctors by name or specialization...", label_visibility="collapsed")
    shown = filter_doctors(load_doctors(ctx), search)

    if not shown:
        render_empty_state("No doctors found", "Try adjusting your search criteria." if search.strip() else "No doctors are listed yet.")
        return

    cols = st.columns(3)
    for i, d in enumerate(shown):
        with cols[i % 3]:
            with st.container(border=True):
                st.markdown(f"**Dr. {d.full_name}**")
                st.caption(d.specialization)
                if d.department:
                    st.markdown(f":gray-badge[{d.department}]")
                if d.years_experience:
                    st.caption(f"{d.years_experience} years experience")
                if d.bio:
                    st.write(d.bio)


def render_management(ctx):
    head, action = st.columns([4, 1])
    with head:
        st.title("Doctors")
        st.caption("Manage doctor profiles and information")
    with action:
        add_clicked = st.button("➕ Add Doctor", use_container_width=True)
    if add_clicked:
        add_doctor_dialog(ctx)

    search = st.text_input("Search", placeholder="Search doctors...", label_visibility="collapsed")
    shown = filter_doctors(load_doctors(ctx), search)

    if not shown:
        render_empty_state(
            "No doctors found",
            "Try adjusting your search criteria." if search.strip() else "Get started by adding your first doctor.",
        )
        if not search.strip() and st.button("➕ Add First Doctor"):
            add_doctor_dialog(ctx)
        return

    cols = st.columns(3)
    for i, d in enumerate(shown):
        with cols[i % 3]:
            with st.container(border=True):
                st.markdown(f"**Dr. {d.full_name}**")
                st.caption(d.specialization)
                st.caption(f"✉️ {d.email}")
                if d.phone:
                    st.caption(f"📞 {d.phone}")
                st.write(f"**License:** {d.license_number}")
                if d.department:
                    st.write(f"**Department:** {d.department}")
                if d.years_experience is not None:
                    st.write(f"**Experience:** {d.years_experience} years")


def main():
    ctx = require_login()

    if ctx.is_patient:
        render_directory(ctx)
    elif ctx.is_admin:
        render_management(ctx)
    else:
        st.info("You don't have permission to view this page.")


if __name__ == "__main__":
    main()
