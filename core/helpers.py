import streamlit as st

from core.context import SessionContext
from core.navigation import menu_for_role, portal_name

STATUS_BADGES = {
    "scheduled": ":blue-badge[scheduled]",
    "completed": ":green-badge[completed]",
    "cancelled": ":red-badge[cancelled]",
    "no_show": ":gray-badge[no show]",
}


def status_badge(status: str) -> str:
    return STATUS_BADGES.get(status, f":gray-badge[{status}]")


def hide_sidebar_completely():
    """Completely hide Streamlit's sidebar and the toggle control.

    Used on the sign-in page where navigation should not be visible.
    """
    st.markdown(
        """
        <style>
        [data-testid="stSidebar"] { display: none !important; }
        [data-testid="collapsedControl"] { display: none !important; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_sidebar(ctx: SessionContext, pages: dict):
    """Role-aware menu: portal header, page links, signed-in user and Sign Out.

    ``pages`` maps route paths to the StreamlitPage objects registered
    with st.navigation.
    """
    with st.sidebar:
        st.markdown("### ❤️ HealthCare EHR")
        st.caption(portal_name(ctx.role))
        st.divider()
        for route in menu_for_role(ctx.role):
            st.page_link(pages[route.path], label=route.title, icon=route.icon)
        st.divider()
        st.markdown(f"**{ctx.full_name}**")
        st.caption(ctx.role.capitalize())
        if st.button("Sign Out", use_container_width=True, key="sidebar_sign_out"):
            from core.session_manager import logout
            logout()


def render_empty_state(title: str, message: str):
    with st.container(border=True):
        st.markdown(f"#### {title}")
        st.caption(message)


def value_or_dash(value) -> str:
    return "—" if value in (None, "") else str(value)
