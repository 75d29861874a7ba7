"""Staff login and sign-up page."""
import streamlit as st

from eventportal.services.api_client import get_api_client
from eventportal.services.auth_service import login_admin, register_account

LOGIN_WITH_OPTIONS = {"Username": "username", "Email": "email"}


def _enter_admin() -> None:
    st.session_state.admin_verified = True
    st.session_state.pop("admin_username", None)
    st.session_state.current_page = "dashboard"
    st.rerun()


def _render_login_tab() -> None:
    prefill = st.session_state.pop("admin_login_prefill", None)
    if prefill:
        st.session_state.admin_login_with = "Username"
        st.session_state.admin_identifier_input = prefill

    login_with_label = st.radio(
        "Log in with",
        options=list(LOGIN_WITH_OPTIONS),
        horizontal=True,
        key="admin_login_with",
    )
    login_with = LOGIN_WITH_OPTIONS[login_with_label]

    with st.form("admin_login_form", clear_on_submit=False):
        identifier = st.text_input(
            login_with_label,
            placeholder="you@example.com" if login_with == "email" else "Enter your username",
            key="admin_identifier_input",
        )
        password = st.text_input("Password", type="password", key="admin_password_input")
        submit = st.form_submit_button("Sign in", width="stretch", type="primary")

    if submit:
        success, message = login_admin(get_api_client(), identifier, password, login_with)
        if success:
            st.success(f"✅ {message}")
            _enter_admin()
        else:
            st.error(f"❌ {message}")


def _render_signup_tab() -> None:
    with st.form("admin_signup_form", clear_on_submit=False):
        name = st.text_input("Full name (optional)", key="signup_name")
        username = st.text_input("Username", key="signup_username")
        email = st.text_input("Email", key="signup_email")
        password = st.text_input("Password", type="password", key="signup_password")
        confirm = st.text_input("Confirm password", type="password", key="signup_confirm")
        submit = st.form_submit_button("Create account", width="stretch", type="primary")

    if submit:
        success, message, logged_in = register_account(get_api_client(), username, email, password, confirm, name)
        if not success:
            st.error(f"❌ {message}")
        elif logged_in:
            st.success(f"✅ {message}")
            _enter_admin()
        else:
            st.session_state.admin_login_prefill = username.strip()
            st.session_state.admin_signup_notice = message
            st.rerun()


def render_login_page() -> None:
    """Render staff login/sign-up tabs."""
    st.markdown("## 🔐 Admin Login")
    st.caption("Sign in to manage meetings, registrations and analytics.")

    notice = st.session_state.pop("admin_signup_notice", None)
    if notice:
        st.success(f"✅ {notice}")

    login_tab, signup_tab = st.tabs(["Sign in", "Create account"])
    with login_tab:
        _render_login_tab()
    with signup_tab:
        _render_signup_tab()
