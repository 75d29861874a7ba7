"""Shared Streamlit widgets: notices, link opening and the admin shell."""
import logging
import traceback

import streamlit as st
import streamlit.components.v1 as components

from eventportal.config import get_settings
from eventportal.services.api_client import get_api_client
from eventportal.services.auth_service import current_username, logout
from eventportal.services.token_store import get_token_store
from eventportal.ui.html_utils import open_window_script
from eventportal.utils.notices import NoticeBoard

logger = logging.getLogger(__name__)

FRAGMENT_DECORATOR = getattr(st, "fragment", None)

NOTICE_ICONS = {"success": "✅", "info": "ℹ️", "error": "❌"}

ADMIN_PAGES = {
    "dashboard": "📊 Dashboard",
    "meetings": "📅 Manage Meetings",
    "registrations": "👥 Registrations",
    "analytics": "📈 Analytics",
    "export": "⬇️ Data Export",
}


def get_notice_board(key: str, duration: float) -> NoticeBoard:
    """Return the page's NoticeBoard, creating it on first use."""
    board = st.session_state.get(key)
    if not isinstance(board, NoticeBoard):
        board = NoticeBoard(duration=duration)
        st.session_state[key] = board
    return board


def public_notice_board() -> NoticeBoard:
    return get_notice_board("public_notice_board", get_settings().notice_seconds)


def admin_notice_board() -> NoticeBoard:
    return get_notice_board("admin_notice_board", get_settings().admin_notice_seconds)


def _show_notice(board: NoticeBoard) -> None:
    notice = board.current()
    if notice is None:
        return

    icon = NOTICE_ICONS.get(notice.level)
    if notice.level == "success":
        st.success(notice.message, icon=icon)
    elif notice.level == "error":
        st.error(notice.message, icon=icon)
    else:
        st.info(notice.message, icon=icon)


def render_notice(board: NoticeBoard) -> None:
    """Show the board's notice; it disappears by itself once it expires."""
    if FRAGMENT_DECORATOR:
        @FRAGMENT_DECORATOR(run_every=1)
        def _notice_fragment():
            _show_notice(board)

        _notice_fragment()
    else:
        _show_notice(board)


def show_admin_exception(error: Exception, context: str) -> None:
    """Display error details in UI and log full traceback."""
    logger.exception("Admin page error during %s", context)

    st.error(f"❌ {context} failed: {error}")
    with st.expander("🔍 Error details"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def open_in_new_tab(url: str) -> None:
    """Ask the browser to open `url` in a new tab."""
    components.html(open_window_script(url), height=0)


def render_admin_sidebar(current: str) -> None:
    """Sidebar navigation between admin pages plus logout."""
    with st.sidebar:
        st.markdown("### Admin")
        if "admin_username" not in st.session_state:
            st.session_state.admin_username = current_username(get_api_client())
        if st.session_state.admin_username:
            st.caption(f"Signed in as {st.session_state.admin_username}")
        for page, label in ADMIN_PAGES.items():
            if st.button(
                label,
                key=f"nav_{page}",
                width="stretch",
                type="primary" if page == current else "secondary",
            ):
                st.session_state.current_page = page
                st.rerun()

        st.divider()
        if st.button("🚪 Logout", key="nav_logout", width="stretch"):
            logout(get_token_store())
            st.session_state.pop("admin_verified", None)
            st.session_state.pop("admin_username", None)
            st.session_state.current_page = "admin_login"
            st.rerun()
