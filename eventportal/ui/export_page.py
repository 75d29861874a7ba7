"""Registration data export (all rows or the current filter set)."""
import streamlit as st

from eventportal.services.api_client import get_api_client
from eventportal.services.event_service import list_events
from eventportal.services.export_service import EXPORT_FORMATS, export_filename, export_registrations, mime_type
from eventportal.services.registration_service import (
    ALL_MEETINGS,
    ALL_SPECIALTIES,
    SPECIALTIES,
    RegistrationFilters,
    fetch_registrations,
    filter_registrations,
)
from eventportal.ui.components import show_admin_exception
from eventportal.utils.exceptions import ApiError


def _meeting_options() -> dict:
    options = {ALL_MEETINGS: ALL_MEETINGS}
    try:
        for event in list_events(get_api_client()):
            if event.id:
                options[event.id] = f"{event.display_title} ({event.code})"
    except ApiError as e:
        st.warning(f"Meeting filter unavailable: {e.message}")
    return options


def render_export_page() -> None:
    """Render the data export page."""
    st.markdown("## ⬇️ Data Export")

    scope = st.radio("Rows", ["all", "filtered"], horizontal=True, format_func=str.title, key="export_scope")
    fmt = st.radio("Format", list(EXPORT_FORMATS), horizontal=True, format_func=str.upper, key="export_format")

    filters = RegistrationFilters()
    if scope == "filtered":
        search_col, spec_col = st.columns([2, 1], gap="small")
        with search_col:
            filters.search = st.text_input("Search", key="export_search")
        with spec_col:
            filters.specialty = st.selectbox("Specialty", SPECIALTIES, key="export_specialty")
        meeting_col, from_col, to_col = st.columns([1.5, 1, 1], gap="small")
        with meeting_col:
            meetings = _meeting_options()
            filters.event_id = st.selectbox(
                "Meeting",
                list(meetings),
                format_func=lambda value: meetings.get(value, value),
                key="export_meeting",
            )
        with from_col:
            date_from = st.date_input("From", value=None, key="export_date_from")
        with to_col:
            date_to = st.date_input("To", value=None, key="export_date_to")
        filters.date_from = date_from.isoformat() if date_from else ""
        filters.date_to = date_to.isoformat() if date_to else ""

    try:
        rows = fetch_registrations(get_api_client(), filters.server_params())
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return
    except Exception as error:
        show_admin_exception(error, "Preparing export")
        return

    if scope == "filtered":
        rows = filter_registrations(rows, filters.search, filters.specialty or ALL_SPECIALTIES)

    st.metric("Rows to export", len(rows))
    st.download_button(
        f"⬇️ Download {fmt.upper()}",
        data=export_registrations(rows, fmt),
        file_name=export_filename("registrations", fmt, scope=scope),
        mime=mime_type(fmt),
        type="primary",
        disabled=not rows,
    )
