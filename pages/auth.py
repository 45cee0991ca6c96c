import logging

import streamlit as st

from core.exceptions import AuthenticationError, ValidationError
from core.helpers import hide_sidebar_completely
from core.session_manager import HOME_PAGE, login, notify
from services.auth_service import sign_in, sign_up

LOGGER = logging.getLogger(__name__)


def render_sign_in():
    with st.form("sign_in_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign In", type="primary", use_container_width=True)

    if submitted:
        try:
            ctx = sign_in(email, password)
        except AuthenticationError as e:
            st.error(str(e))
            return
        except Exception:
            LOGGER.exception("Sign-in failed")
            st.error("Sign in failed. Please try again.")
            return
        login(ctx)
        notify("success", f"Welcome back, {ctx.full_name}")
        st.switch_page(HOME_PAGE)


def render_sign_up():
    role = st.radio("I am a", ["patient", "doctor"], format_func=str.capitalize, horizontal=True, key="su_role")

    with st.form("sign_up_form"):
        full_name = st.text_input("Full Name")
        email = st.text_input("Email")
        phone = st.text_input("Phone (optional)")
        password = st.text_input("Password", type="password")
        password2 = st.text_input("Confirm Password", type="password")
        specialization = license_number = department = None
        if role == "doctor":
            specialization = st.text_input("Specialization", placeholder="e.g., Cardiology, Pediatrics")
            license_number = st.text_input("License Number")
            department = st.text_input("Department (optional)")
        submitted = st.form_submit_button("Create Account", type="primary", use_container_width=True)

    if submitted:
        if password != password2:
            st.error("Passwords do not match.")
            return
        try:
            sign_up(
                email, password, full_name, role,
                phone=phone, specialization=specialization,
                license_number=license_number, department=department,
            )
            ctx = sign_in(email, password)
        except (ValidationError, AuthenticationError) as e:
            st.error(str(e))
            return
        except Exception:
            LOGGER.exception("Sign-up failed")
            st.error("Sign up failed. Please try again.")
            return
        login(ctx)
        notify("success", "Account created and signed in!")
        st.switch_page(HOME_PAGE)


def main():
    hide_sidebar_completely()

    st.title("❤️ HealthCare EHR")
    st.caption("Sign in to manage appointments and medical records.")

    sign_in_tab, sign_up_tab = st.tabs(["Sign In", "Sign Up"])
    with sign_in_tab:
        render_sign_in()
    with sign_up_tab:
        render_sign_up()


if __name__ == "__main__":
    main()
