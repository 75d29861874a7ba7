"""Public event page: details, experts, registration form and join."""
import logging
from typing import Optional

import streamlit as st

from eventportal.models.event import Event
from eventportal.models.registration import RegistrationForm
from eventportal.services.api_client import get_api_client
from eventportal.services.event_service import get_event
from eventportal.services.join_service import SUCCESS, JoinFlow
from eventportal.ui.components import (
    FRAGMENT_DECORATOR,
    open_in_new_tab,
    public_notice_board,
    render_notice,
)
from eventportal.ui.html_utils import esc, expert_avatar_html, html_block
from eventportal.utils.exceptions import ApiError, AuthRejection
from eventportal.utils.time_utils import COUNTDOWN_FINISHED, format_countdown, format_date, format_time

logger = logging.getLogger(__name__)

EVENT_CACHE = "event_page_event"
JOIN_IN_FLIGHT = "event_page_join_in_flight"
INLINE_NOTICE = "event_page_inline_notice"
LAST_LINK = "event_page_last_link"

LEGAL_NOTICE = (
    "This event is intended only for individuals or entities who have been "
    "invited/requested to attend. If you are not such an attendee, please do not "
    "attempt to join this meeting. You may not disseminate, distribute or copy any "
    "information contained herein."
)
POLICY_TEXT = (
    "Collection, use, transfer and/or processing of the personal information "
    "provided here, for the purposes of this and other related activities."
)
RECORDING_TEXT = (
    "Recording of this meeting in any format, including the right to store, "
    "transmit and use such recordings for internal or external purposes."
)
CONTACT_TEXT = "May we contact you by email about future education and related product or service information?"


def _form_key(code: str, field: str) -> str:
    return f"event_form_{code}_{field}"


def _load_event(code: str) -> Event:
    """Fetch the event once per code and keep it in session state."""
    cached = st.session_state.get(EVENT_CACHE)
    if cached and cached[0] == code:
        return cached[1]

    event = get_event(get_api_client(), code)
    st.session_state[EVENT_CACHE] = (code, event)
    # A different event: forget the previous page's notices and link.
    st.session_state.pop(INLINE_NOTICE, None)
    st.session_state.pop(LAST_LINK, None)
    return event


def _collect_form(code: str) -> RegistrationForm:
    state = st.session_state
    return RegistrationForm(
        name=state.get(_form_key(code, "name"), ""),
        mobile=state.get(_form_key(code, "mobile"), ""),
        email=state.get(_form_key(code, "email"), ""),
        hospital=state.get(_form_key(code, "hospital"), ""),
        speciality=state.get(_form_key(code, "speciality"), ""),
        accept_policy=bool(state.get(_form_key(code, "accept_policy"), False)),
        accept_recording=bool(state.get(_form_key(code, "accept_recording"), False)),
        contact_optin=state.get(_form_key(code, "contact_optin"), "No"),
    )


def _show_countdown(event: Event) -> None:
    if event.can_join():
        st.markdown("🟢 **Join is open now**")
        return

    remaining = format_countdown(event.start_at)
    if remaining == COUNTDOWN_FINISHED:
        if event.has_ended():
            st.markdown("⏹️ **This event has ended**")
        else:
            st.markdown(f"▶️ **{COUNTDOWN_FINISHED}**")
    else:
        st.markdown(f"⏳ Starts in **{remaining}**")


def _render_countdown(event: Event) -> None:
    """Countdown to start, recomputed from the clock every second."""
    if FRAGMENT_DECORATOR:
        @FRAGMENT_DECORATOR(run_every=1)
        def _countdown_fragment():
            # Stop ticking for an event that is no longer on screen.
            cached = st.session_state.get(EVENT_CACHE)
            if not cached or cached[0] != event.code:
                return
            _show_countdown(event)

        _countdown_fragment()
    else:
        _show_countdown(event)


def _render_header(event: Event) -> None:
    if event.banner_url:
        st.image(event.banner_url, width="stretch")

    st.markdown(
        html_block(
            f"""
            <div style="border-left: 6px solid {esc(event.accent)}; padding-left: 16px; margin: 12px 0;">
                <h1 style="margin: 0;">{esc(event.display_title)}</h1>
                <div style="opacity: 0.8;">
                    {esc(format_date(event.start_at))} &nbsp;|&nbsp;
                    {esc(format_time(event.start_at))} – {esc(format_time(event.end_at))}
                </div>
            </div>
            """
        ),
        unsafe_allow_html=True,
    )
    if event.description:
        st.markdown(event.description)


def _render_experts(event: Event) -> None:
    for title, experts in event.grouped_experts():
        st.markdown(f"#### {title}")
        for expert in experts:
            avatar_col, bio_col = st.columns([1, 5], gap="small")
            with avatar_col:
                st.markdown(expert_avatar_html(expert.name, expert.photo_url), unsafe_allow_html=True)
            with bio_col:
                st.markdown(f"**{expert.name}**")
                if expert.description:
                    st.caption(expert.description)


def _run_join(flow: JoinFlow, action, *args) -> None:
    """Run one join action at a time per browser session."""
    if st.session_state.get(JOIN_IN_FLIGHT):
        return

    st.session_state[JOIN_IN_FLIGHT] = True
    try:
        outcome = action(*args)
    finally:
        st.session_state[JOIN_IN_FLIGHT] = False

    st.session_state[INLINE_NOTICE] = flow.inline_notice
    if outcome.kind == SUCCESS:
        st.session_state[LAST_LINK] = outcome.link


def _render_form(event: Event, flow: JoinFlow) -> None:
    code = event.code

    st.markdown("### Register")
    st.text_input("Name", key=_form_key(code, "name"), placeholder="Your full name")
    st.text_input("Mobile", key=_form_key(code, "mobile"), placeholder="9876543210")
    st.text_input("Email", key=_form_key(code, "email"), placeholder="you@example.com")
    st.text_input("Hospital", key=_form_key(code, "hospital"), placeholder="Hospital / Institution")
    st.text_input("Speciality", key=_form_key(code, "speciality"), placeholder="e.g., Cardiology")

    st.caption(LEGAL_NOTICE)
    st.markdown("**1. For the purposes of event registration, you accept and agree to:**")
    st.checkbox(POLICY_TEXT, key=_form_key(code, "accept_policy"))
    st.checkbox(RECORDING_TEXT, key=_form_key(code, "accept_recording"))
    st.markdown(f"**2.** {CONTACT_TEXT}")
    st.radio(
        "Contact opt-in",
        options=["Yes", "No"],
        index=1,
        horizontal=True,
        key=_form_key(code, "contact_optin"),
        label_visibility="collapsed",
    )

    form = _collect_form(code)
    in_flight = bool(st.session_state.get(JOIN_IN_FLIGHT))

    if st.button(
        "CLICK HERE TO JOIN",
        key=f"join_{code}",
        type="primary",
        width="stretch",
        disabled=not form.has_consent() or in_flight,
    ):
        errors = form.field_errors()
        if errors:
            for message in errors:
                st.warning(message)
        else:
            _run_join(flow, flow.register_and_join, code, form)

    inline = st.session_state.get(INLINE_NOTICE)
    if inline:
        st.info(inline)

    link = st.session_state.get(LAST_LINK)
    if link:
        st.link_button("Open meeting", link, width="stretch")


def _render_login_join(event: Event, flow: JoinFlow) -> None:
    with st.expander("Already registered? Log in to join"):
        with st.form(f"login_join_{event.code}", clear_on_submit=False):
            identifier = st.text_input("Username or email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Log in and join", width="stretch")

        if submitted:
            try:
                _run_join(flow, flow.login_and_join, event.code, identifier, password)
            except AuthRejection as e:
                st.error(f"❌ {e}")


def render_event_page(code: Optional[str]) -> None:
    """Render the public registration/join page for one event code."""
    if not code:
        st.error("No event selected.")
        return

    try:
        event = _load_event(code)
    except ApiError as e:
        st.error(e.message)
        return
    except ValueError as e:
        logger.warning("Event %s has malformed data: %s", code, e)
        st.error("Event not found.")
        return

    board = public_notice_board()
    flow = JoinFlow(get_api_client(), board, open_in_new_tab)

    render_notice(board)
    _render_header(event)
    _render_countdown(event)

    experts_col, form_col = st.columns([1, 1], gap="large")
    with experts_col:
        _render_experts(event)
    with form_col:
        _render_form(event, flow)
        _render_login_join(event, flow)
