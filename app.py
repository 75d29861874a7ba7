"""
Event registration portal
Public join pages and the staff admin area.
"""
import logging
import streamlit as st

from eventportal.config import get_settings
from eventportal.services.api_client import get_api_client
from eventportal.services.auth_service import is_authenticated, refresh_access, verify_session
from eventportal.ui.admin_login import render_login_page
from eventportal.ui.analytics_page import render_analytics_page
from eventportal.ui.components import ADMIN_PAGES, render_admin_sidebar
from eventportal.ui.dashboard_page import render_dashboard_page
from eventportal.ui.event_page import render_event_page
from eventportal.ui.export_page import render_export_page
from eventportal.ui.meetings_page import render_meetings_page
from eventportal.ui.registrations_page import render_registrations_page

logging.basicConfig(
    level=getattr(logging, get_settings().log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# Streamlit page configuration
st.set_page_config(
    page_title="Event Portal",
    page_icon="📅",
    layout="wide",
    initial_sidebar_state="auto"
)

ADMIN_RENDERERS = {
    "dashboard": render_dashboard_page,
    "meetings": render_meetings_page,
    "registrations": render_registrations_page,
    "analytics": render_analytics_page,
    "export": render_export_page,
}


def initialize_session_state():
    """Set session defaults and read the event code from the URL."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "admin_login"

    if "event_code" not in st.session_state:
        st.session_state.event_code = None

    code = st.query_params.get("code")
    if code:
        st.session_state.event_code = code
        st.session_state.current_page = "event"


def apply_custom_css():
    """Hide Streamlit chrome and round the buttons."""
    st.markdown("""
        <style>
        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}

        .stButton > button {
            border-radius: 12px;
            font-weight: 600;
        }
        </style>
    """, unsafe_allow_html=True)


def admin_session_valid() -> bool:
    """Stored token present and, once per session, confirmed by the API."""
    client = get_api_client()
    if not is_authenticated(client.token_store) and not refresh_access(client):
        st.session_state.pop("admin_verified", None)
        return False

    if st.session_state.get("admin_verified"):
        return True

    if verify_session(client):
        st.session_state.admin_verified = True
        return True
    return False


def render_current_page():
    """Render the page selected in session state."""
    page = st.session_state.current_page
    try:
        if page == "event":
            render_event_page(st.session_state.event_code)
            return

        if not admin_session_valid():
            render_login_page()
            return

        if page not in ADMIN_PAGES:
            page = st.session_state.current_page = "dashboard"

        render_admin_sidebar(page)
        ADMIN_RENDERERS[page]()

    except Exception as e:
        # Error boundary
        logger.exception("Unhandled exception while rendering page %s", page)
        st.error("Something went wrong. Please try again.")

        with st.expander("🔍 Error details"):
            st.code(str(e))


def main():
    """Application entry point."""
    try:
        initialize_session_state()
        apply_custom_css()
        render_current_page()
    except Exception as e:
        logger.exception("Unhandled exception during app execution")
        st.error("The application hit an error. Please refresh the page.")
        st.code(str(e))

        if st.button("🔄 Reset"):
            st.session_state.clear()
            st.rerun()


if __name__ == "__main__":
    main()
