"""Admin registrations table with filters, pagination, CSV download and delete."""
import logging
from typing import List

import streamlit as st

from eventportal.config import get_settings
from eventportal.models.registration import RegistrationRow
from eventportal.services.api_client import get_api_client
from eventportal.services.event_service import list_events
from eventportal.services.export_service import export_filename, mime_type, registrations_to_csv
from eventportal.services.registration_service import (
    ALL_MEETINGS,
    SPECIALTIES,
    RegistrationFilters,
    delete_registration,
    fetch_registrations,
    filter_registrations,
)
from eventportal.ui.components import admin_notice_board, render_notice, show_admin_exception
from eventportal.utils.exceptions import ApiError
from eventportal.utils.listing import PageCursor, paginate
from eventportal.utils.time_utils import format_timestamp

logger = logging.getLogger(__name__)


def _page_cursor() -> PageCursor:
    cursor = st.session_state.get("registrations_cursor")
    if not isinstance(cursor, PageCursor):
        cursor = PageCursor()
        st.session_state.registrations_cursor = cursor
    return cursor


def _meeting_options() -> dict:
    """Map event id -> label for the meeting filter."""
    options = {ALL_MEETINGS: ALL_MEETINGS}
    try:
        for event in list_events(get_api_client()):
            if event.id:
                options[event.id] = f"{event.display_title} ({event.code})"
    except ApiError as e:
        logger.warning("Meeting filter unavailable: %s", e.message)
    return options


def _render_filters() -> RegistrationFilters:
    search_col, spec_col, meeting_col = st.columns([2, 1, 1.5], gap="small")
    with search_col:
        search = st.text_input("Search", placeholder="Name, email, hospital or meeting", key="reg_search")
    with spec_col:
        specialty = st.selectbox("Specialty", SPECIALTIES, key="reg_specialty")
    with meeting_col:
        meetings = _meeting_options()
        event_id = st.selectbox(
            "Meeting",
            list(meetings),
            format_func=lambda value: meetings.get(value, value),
            key="reg_meeting",
        )

    from_col, to_col = st.columns(2, gap="small")
    with from_col:
        date_from = st.date_input("From", value=None, key="reg_date_from")
    with to_col:
        date_to = st.date_input("To", value=None, key="reg_date_to")

    return RegistrationFilters(
        search=search,
        specialty=specialty,
        event_id=event_id,
        date_from=date_from.isoformat() if date_from else "",
        date_to=date_to.isoformat() if date_to else "",
    )


def _render_rows(rows: List[RegistrationRow]) -> None:
    header = st.columns([2, 2.2, 1.3, 1.8, 1.3, 2, 1.6, 0.6], gap="small")
    for col, label in zip(header, ["Name", "Email", "Mobile", "Hospital", "Speciality", "Meeting", "Registered", ""]):
        col.markdown(f"**{label}**")

    for row in rows:
        cols = st.columns([2, 2.2, 1.3, 1.8, 1.3, 2, 1.6, 0.6], gap="small")
        cols[0].text(row.name)
        cols[1].text(row.email)
        cols[2].text(row.mobile)
        cols[3].text(row.hospital)
        cols[4].text(row.speciality)
        cols[5].text(row.event_title)
        cols[6].text(format_timestamp(row.timestamp) if row.timestamp else "")
        with cols[7]:
            if st.button("🗑️", key=f"delete_join_{row.id}", help="Delete registration"):
                st.session_state.delete_join_id = row.id
                st.session_state.delete_join_label = f"{row.name} · {row.event_title}"


def _render_delete_confirmation() -> None:
    join_id = st.session_state.get("delete_join_id")
    if not join_id:
        return

    with st.container(border=True):
        st.error("⚠️ Delete this registration?")
        st.markdown(f"**{st.session_state.get('delete_join_label', '')}**")
        confirm_col, cancel_col = st.columns(2, gap="small")
        with confirm_col:
            if st.button("✅ Delete", type="primary", width="stretch", key=f"confirm_delete_join_{join_id}"):
                try:
                    delete_registration(get_api_client(), join_id)
                    admin_notice_board().push("success", "Registration deleted")
                except ApiError as e:
                    admin_notice_board().push("error", e.message)
                st.session_state.pop("delete_join_id", None)
                st.session_state.pop("delete_join_label", None)
                st.rerun()
        with cancel_col:
            if st.button("❌ Cancel", width="stretch", key=f"cancel_delete_join_{join_id}"):
                st.session_state.pop("delete_join_id", None)
                st.session_state.pop("delete_join_label", None)
                st.rerun()


def _render_pager(cursor: PageCursor, page) -> None:
    prev_col, info_col, next_col = st.columns([1, 3, 1], gap="small")
    with prev_col:
        if st.button("◀ Previous", disabled=not page.has_previous, width="stretch", key="reg_prev"):
            cursor.go_to(page.number - 1, page.total_pages)
            st.rerun()
    with info_col:
        if page.total_count:
            st.caption(
                f"Showing {page.start_index + 1}–{page.end_index} of {page.total_count} · "
                f"page {page.number} of {page.total_pages}"
            )
        else:
            st.caption("Showing 0 of 0")
    with next_col:
        if st.button("Next ▶", disabled=not page.has_next, width="stretch", key="reg_next"):
            cursor.go_to(page.number + 1, page.total_pages)
            st.rerun()


def render_registrations_page() -> None:
    """Render the registrations table."""
    render_notice(admin_notice_board())
    st.markdown("## 👥 Registrations")

    filters = _render_filters()

    try:
        rows = fetch_registrations(get_api_client(), filters.server_params())
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return
    except Exception as error:
        show_admin_exception(error, "Loading registrations")
        return

    visible = filter_registrations(rows, filters.search, filters.specialty)

    cursor = _page_cursor()
    cursor.sync(*filters.fingerprint(), len(visible))
    page = paginate(visible, cursor.page, get_settings().page_size)
    cursor.go_to(page.number, page.total_pages)

    st.download_button(
        "⬇️ Download CSV",
        data=registrations_to_csv(visible),
        file_name=export_filename("registrations", "csv"),
        mime=mime_type("csv"),
        disabled=not visible,
    )

    if not visible:
        st.info("No registrations match these filters.")
    else:
        _render_rows(page.items)
    _render_delete_confirmation()
    _render_pager(cursor, page)
