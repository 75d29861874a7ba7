"""Meeting management: list, create, edit and delete events and their experts."""
import logging
from datetime import datetime, timedelta
from typing import List, Optional

import streamlit as st

from eventportal.config import get_settings
from eventportal.models.event import Event, Expert
from eventportal.services.api_client import get_api_client
from eventportal.services.event_service import (
    DEFAULT_COLOR,
    ExpertDraft,
    combine_local,
    delete_event,
    delete_expert,
    list_events,
    public_link,
    save_event,
    to_form,
    update_expert,
)
from eventportal.ui.components import admin_notice_board, render_notice, show_admin_exception
from eventportal.utils.exceptions import ApiError, ValidationRefused
from eventportal.utils.time_utils import format_date, format_time

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["png", "jpg", "jpeg", "gif", "webp"]
MAX_EXPERT_ROWS = 6


def _reset_action() -> None:
    st.session_state.meeting_action = None
    st.session_state.pop("meeting_code", None)


def _find_event(events: List[Event], code: Optional[str]) -> Optional[Event]:
    for event in events:
        if event.code == code:
            return event
    return None


def _uploaded(file) -> Optional[tuple]:
    if file is None:
        return None
    return file.name, file.getvalue()


def _render_event_row(event: Event) -> None:
    base_url = get_settings().public_base_url
    col1, col2, col3, col4 = st.columns([3, 2, 1, 1.2], gap="small")

    with col1:
        st.markdown(f"**{event.display_title}**")
        st.caption(f"`{event.code}` · {public_link(base_url, event.code)}")
    with col2:
        st.text(f"{format_date(event.start_at)}")
        st.caption(f"{format_time(event.start_at)} – {format_time(event.end_at)}")
    with col3:
        if event.has_ended():
            st.text("⏹️ Ended")
        elif event.can_join():
            st.text("🟢 Open")
        else:
            st.text("⏳ Upcoming")
    with col4:
        edit_col, delete_col = st.columns(2, gap="small")
        with edit_col:
            if st.button("✏️", key=f"edit_{event.code}", help="Edit"):
                st.session_state.meeting_action = "edit"
                st.session_state.meeting_code = event.code
        with delete_col:
            if st.button("🗑️", key=f"delete_{event.code}", help="Delete"):
                st.session_state.meeting_action = "delete"
                st.session_state.meeting_code = event.code


def _expert_drafts(prefix: str, rows: int) -> List[ExpertDraft]:
    drafts = []
    for index in range(rows):
        st.markdown(f"**Expert {index + 1}**")
        name_col, role_col, order_col = st.columns([2, 2, 1], gap="small")
        with name_col:
            name = st.text_input("Name", key=f"{prefix}_expert_name_{index}")
        with role_col:
            role = st.text_input("Role", key=f"{prefix}_expert_role_{index}", placeholder="Speaker")
        with order_col:
            order = st.number_input("Order", min_value=0, step=1, value=index, key=f"{prefix}_expert_order_{index}")
        description = st.text_area("Description", key=f"{prefix}_expert_description_{index}", height=68)
        photo = st.file_uploader("Photo", type=ALLOWED_IMAGE_TYPES, key=f"{prefix}_expert_photo_{index}")
        drafts.append(
            ExpertDraft(
                name=name,
                role=role,
                description=description,
                order=int(order),
                photo=_uploaded(photo),
            )
        )
    return drafts


def _render_expert_editor(expert: Expert) -> None:
    with st.form(f"expert_form_{expert.id}", clear_on_submit=False):
        role = st.text_input("Role", value=expert.role or "", key=f"expert_role_{expert.id}")
        description = st.text_area(
            "Description", value=expert.description, height=68, key=f"expert_description_{expert.id}"
        )
        order = st.number_input(
            "Order", min_value=0, step=1, value=max(0, expert.order), key=f"expert_order_{expert.id}"
        )
        submit = st.form_submit_button("💾 Save expert", width="stretch")

    if submit:
        try:
            update_expert(get_api_client(), expert.id, role, description, int(order))
            admin_notice_board().push("success", f"Updated {expert.name}")
        except ApiError as e:
            admin_notice_board().push("error", e.message)
        st.session_state.pop("meetings_cache", None)
        st.rerun()


def _render_existing_experts(event: Event) -> None:
    if not event.experts:
        return

    st.markdown("#### Current experts")
    for expert in event.experts:
        info_col, action_col = st.columns([5, 1], gap="small")
        with info_col:
            with st.expander(f"{expert.name} · {expert.role or 'Experts'}"):
                if expert.id:
                    _render_expert_editor(expert)
        with action_col:
            if expert.id and st.button("🗑️", key=f"delete_expert_{expert.id}", help="Remove expert"):
                try:
                    delete_expert(get_api_client(), expert.id)
                    admin_notice_board().push("success", f"Removed {expert.name}")
                except ApiError as e:
                    admin_notice_board().push("error", e.message)
                st.session_state.pop("meetings_cache", None)
                st.rerun()


def _render_meeting_form(existing: Optional[Event] = None) -> None:
    """Create form when `existing` is None, edit form otherwise."""
    creating = existing is None
    prefix = "create" if creating else f"edit_{existing.code}"
    defaults = to_form(existing) if existing else {}

    now = datetime.now().astimezone().replace(second=0, microsecond=0)
    start_default = defaults.get("start_at", now + timedelta(days=1))
    end_default = defaults.get("end_at", start_default + timedelta(hours=1))
    start_default = start_default.astimezone()
    end_default = end_default.astimezone()

    st.markdown("### ➕ New meeting" if creating else f"### ✏️ Edit meeting `{existing.code}`")

    row_count = st.number_input(
        "Experts to add",
        min_value=0,
        max_value=MAX_EXPERT_ROWS,
        value=1 if creating else 0,
        key=f"{prefix}_expert_rows",
    )

    with st.form(f"{prefix}_meeting_form", clear_on_submit=False):
        code = st.text_input(
            "Event code",
            value=defaults.get("code", ""),
            disabled=not creating,
            help="Letters, digits, '-' and '_' only",
        )
        title = st.text_input("Title", value=defaults.get("title", ""))
        description = st.text_area("Description", value=defaults.get("description", ""))
        link = st.text_input("Meeting link", value=defaults.get("link", ""), placeholder="https://")

        start_col1, start_col2 = st.columns(2, gap="small")
        with start_col1:
            start_date = st.date_input("Start date", value=start_default.date())
        with start_col2:
            start_time = st.time_input("Start time", value=start_default.time())
        end_col1, end_col2 = st.columns(2, gap="small")
        with end_col1:
            end_date = st.date_input("End date", value=end_default.date())
        with end_col2:
            end_time = st.time_input("End time", value=end_default.time())

        color_hex = st.color_picker("Accent colour", value=defaults.get("color_hex", DEFAULT_COLOR))
        banner = st.file_uploader("Banner image", type=ALLOWED_IMAGE_TYPES)

        drafts = _expert_drafts(prefix, int(row_count))

        submit_col, cancel_col = st.columns(2, gap="small")
        with submit_col:
            submit = st.form_submit_button("✅ Save", type="primary", width="stretch")
        with cancel_col:
            cancel = st.form_submit_button("❌ Cancel", width="stretch")

    if cancel:
        _reset_action()
        st.rerun()

    if submit:
        form = {
            "code": code if creating else existing.code,
            "title": title,
            "description": description,
            "link": link,
            "start_at": combine_local(start_date, start_time).isoformat(),
            "end_at": combine_local(end_date, end_time).isoformat(),
            "color_hex": color_hex,
        }
        try:
            event = save_event(
                get_api_client(),
                form,
                existing_code=None if creating else existing.code,
                banner=_uploaded(banner),
                experts=drafts,
            )
        except ValidationRefused as e:
            st.error(f"❌ {e}")
            return
        except ApiError as e:
            st.error(f"❌ {e.message}")
            return

        admin_notice_board().push(
            "success", f"{'Created' if creating else 'Updated'} meeting: {event.display_title}"
        )
        st.session_state.pop("meetings_cache", None)
        _reset_action()
        st.rerun()

    if existing:
        _render_existing_experts(existing)


def _render_delete_confirmation(event: Event) -> None:
    with st.container(border=True):
        st.error("⚠️ This cannot be undone. Delete this meeting?")
        st.markdown(f"**{event.display_title}**")
        st.caption(f"{format_date(event.start_at)} · {format_time(event.start_at)} · `{event.code}`")

        confirm_col, cancel_col = st.columns(2, gap="small")
        with confirm_col:
            if st.button("✅ Delete", type="primary", width="stretch", key=f"confirm_delete_{event.code}"):
                try:
                    delete_event(get_api_client(), event.code)
                    admin_notice_board().push("success", f"Deleted meeting: {event.display_title}")
                except ApiError as e:
                    admin_notice_board().push("error", e.message)
                st.session_state.pop("meetings_cache", None)
                _reset_action()
                st.rerun()
        with cancel_col:
            if st.button("❌ Cancel", width="stretch", key=f"cancel_delete_{event.code}"):
                _reset_action()
                st.rerun()


def render_meetings_page() -> None:
    """Render the meeting management page."""
    board = admin_notice_board()
    render_notice(board)

    title_col, create_col, refresh_col = st.columns([3, 1, 1], gap="small")
    with title_col:
        st.markdown("## 📅 Manage Meetings")
    with create_col:
        if st.button("➕ New meeting", width="stretch"):
            st.session_state.meeting_action = "create"
            st.session_state.pop("meeting_code", None)
    with refresh_col:
        if st.button("🔄 Refresh", width="stretch"):
            st.session_state.pop("meetings_cache", None)

    try:
        events = st.session_state.get("meetings_cache")
        if events is None:
            events = list_events(get_api_client())
            st.session_state.meetings_cache = events
    except ApiError as e:
        st.error(f"❌ {e.message}")
        return
    except Exception as error:
        show_admin_exception(error, "Loading meetings")
        return

    action = st.session_state.get("meeting_action")
    if action == "create":
        _render_meeting_form()

    if not events:
        st.info("📝 No meetings yet")
    for event in events:
        _render_event_row(event)

    selected = _find_event(events, st.session_state.get("meeting_code"))
    if action in ("edit", "delete") and selected is None:
        logger.warning("Meeting %s is no longer listed", st.session_state.get("meeting_code"))
        board.push("error", "Meeting not found.")
        _reset_action()
        return
    if action == "edit":
        _render_meeting_form(selected)
    elif action == "delete":
        _render_delete_confirmation(selected)
