import logging

import streamlit as st

from core.config import SEED_DEMO_DATA
from core.database import create_tables
from core.helpers import render_sidebar
from core.logging_config import configure_logging
from core.navigation import ROUTES, DASHBOARD, resolve, url_path
from core.session_manager import current_session, flush_notifications, init_session_state
from services.user_service import ensure_demo_accounts

LOGGER = logging.getLogger(__name__)


@st.cache_resource
def bootstrap():
    """One-time store setup per server process."""
    create_tables()
    if SEED_DEMO_DATA:
        try:
            ensure_demo_accounts()
        except Exception:
            LOGGER.exception("Could not seed demo accounts")
    return True


def build_pages() -> dict:
    pages = {}
    for route in ROUTES:
        pages[route.path] = st.Page(
            route.script,
            title=route.title,
            icon=route.icon,
            url_path=url_path(route) or None,
            default=route is DASHBOARD,
        )
    return pages


def main():
    st.set_page_config(
        page_title="HealthCare EHR",
        page_icon="❤️",
        layout="wide",
    )

    configure_logging()
    bootstrap()
    init_session_state()

    pages = build_pages()
    # The menu is drawn by render_sidebar so it can follow the role
    current = st.navigation(list(pages.values()), position="hidden")

    ctx = current_session()
    # Anonymous users go to /auth, signed-in users skip it
    target = resolve(current.url_path, signed_in=ctx is not None)
    if target is not None and url_path(target) != current.url_path:
        st.switch_page(pages[target.path])

    if ctx is not None:
        render_sidebar(ctx, pages)

    flush_notifications()
    current.run()


if __name__ == "__main__":
    main()
