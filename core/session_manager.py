import logging

import streamlit as st

from core.context import SessionContext
from core.exceptions import AuthenticationError

LOGGER = logging.getLogger(__name__)

SESSION_KEY = "session_ctx"
NOTICE_KEY = "pending_notices"
QUERY_PARAM = "sid"
AUTH_PAGE = "pages/auth.py"
HOME_PAGE = "pages/dashboard.py"


def init_session_state():
    """Ensure required session keys exist and that the held session is still live.

    A reloaded tab restores from ?sid= (rotating the token); a running tab
    re-checks its token on every run so expired or signed-out sessions end.
    """
    from services.auth_service import restore_session

    if SESSION_KEY not in st.session_state:
        st.session_state[SESSION_KEY] = None
    if NOTICE_KEY not in st.session_state:
        st.session_state[NOTICE_KEY] = []

    ctx = st.session_state[SESSION_KEY]
    if ctx is not None:
        try:
            st.session_state[SESSION_KEY] = restore_session(ctx.token)
        except AuthenticationError as exc:
            LOGGER.info("Ending session for %s: %s", ctx.email, exc)
            clear_session()
            st.session_state[SESSION_KEY] = None
            notify("info", str(exc))
    else:
        token = st.query_params.get(QUERY_PARAM)
        if token:
            try:
                st.session_state[SESSION_KEY] = restore_session(token, rotate=True)
            except AuthenticationError as exc:
                LOGGER.info("Discarding stale session token: %s", exc)
                st.query_params.clear()

    ctx = st.session_state[SESSION_KEY]
    if ctx is not None and st.query_params.get(QUERY_PARAM) != ctx.token:
        # Keep the token in the URL so a browser reload keeps the session
        st.query_params[QUERY_PARAM] = ctx.token


def current_session() -> SessionContext | None:
    return st.session_state.get(SESSION_KEY)


def login(ctx: SessionContext):
    """Persist the signed-in context."""
    st.session_state[SESSION_KEY] = ctx
    st.query_params[QUERY_PARAM] = ctx.token


def refresh_context(ctx: SessionContext):
    st.session_state[SESSION_KEY] = ctx


def clear_session():
    """Clear session without redirect."""
    st.session_state.pop(SESSION_KEY, None)
    try:
        st.query_params.clear()
    except Exception:
        pass


def logout():
    """End the server session, clear local state and go back to sign-in."""
    from services.auth_service import sign_out

    ctx = current_session()
    if ctx is not None:
        sign_out(ctx.token)
    clear_session()
    st.switch_page(AUTH_PAGE)


def require_login() -> SessionContext:
    """Return the signed-in context or redirect to the sign-in page.

    app.py validates the session before any page runs.
    """
    ctx = current_session()
    if ctx is None:
        st.switch_page(AUTH_PAGE)
    return ctx


def require_role(*roles: str) -> SessionContext | None:
    """Restrict a page by role; others see a permission notice instead of the page."""
    ctx = require_login()
    if ctx.role not in roles:
        st.info("You don't have permission to view this page.")
        return None
    return ctx


# -----------------------------
# Notifications (survive st.rerun)
# -----------------------------
def notify(kind: str, message: str):
    st.session_state.setdefault(NOTICE_KEY, []).append((kind, message))


def flush_notifications():
    icons = {"success": "✅", "error": "⚠️", "info": "ℹ️"}
    for kind, message in st.session_state.get(NOTICE_KEY, []):
        st.toast(message, icon=icons.get(kind, "ℹ️"))
    st.session_state[NOTICE_KEY] = []
